"""
ATK (consumables and spareparts) models: items, stock ledger, purchases and requests
"""

from helpdesk.data.atk.atk_item import AtkItem
from helpdesk.data.atk.atk_stock_history import AtkStockHistory
from helpdesk.data.atk.atk_purchase import AtkPurchaseRequest, AtkPurchaseItem
from helpdesk.data.atk.atk_request import AtkRequest, AtkRequestItem
from helpdesk.data.atk.stock_opname import StockOpnameSession, StockOpnameItem

__all__ = [
    'AtkItem',
    'AtkStockHistory',
    'AtkPurchaseRequest',
    'AtkPurchaseItem',
    'AtkRequest',
    'AtkRequestItem',
    'StockOpnameSession',
    'StockOpnameItem',
]
