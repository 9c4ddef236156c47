"""
Asset routes: inventory, maintenance, borrowing, distribution and reports
"""
