"""
Core routes: users, master data (departments, locations, asset categories)
and the self-service profile page
"""
