"""
ATK presentation services
"""

from helpdesk.services.atk.item_service import ItemService
from helpdesk.services.atk.purchase_service import PurchaseService
from helpdesk.services.atk.request_service import RequestService
from helpdesk.services.atk.stock_opname_service import StockOpnameService
from helpdesk.services.atk.report_service import AtkReportService

__all__ = [
    'ItemService',
    'PurchaseService',
    'RequestService',
    'StockOpnameService',
    'AtkReportService',
]
