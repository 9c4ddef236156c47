"""
Asset presentation services
"""

from helpdesk.services.assets.asset_service import AssetService
from helpdesk.services.assets.borrowing_service import BorrowingService
from helpdesk.services.assets.distribution_service import DistributionService
from helpdesk.services.assets.maintenance_service import MaintenanceService
from helpdesk.services.assets.report_service import AssetReportService

__all__ = [
    'AssetService',
    'BorrowingService',
    'DistributionService',
    'MaintenanceService',
    'AssetReportService',
]
