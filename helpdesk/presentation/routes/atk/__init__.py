"""
ATK routes: items and stock movements, purchase requests, item requests,
stock opname and the usage report
"""
