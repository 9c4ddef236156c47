"""
Services package
Presentation services: query building, filtering, pagination and report
aggregation for the views. Services only read; writes go through the managers
in helpdesk.business.
"""
