"""
Ticket routes
"""
