"""
Core presentation services
"""

from helpdesk.services.core.user_service import UserService
from helpdesk.services.core.master_service import MasterDataService
from helpdesk.services.core.dashboard_service import DashboardService

__all__ = ['UserService', 'MasterDataService', 'DashboardService']
