"""
Dashboard Service
Headline counts and recent activity for the home page.
"""

from datetime import date, datetime, time
from typing import Dict, Optional

from helpdesk.business.atk.item_manager import low_stock_items
from helpdesk.business.core.state_machine import AtkRequestStateMachine, BorrowingStateMachine
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_borrowing import AssetBorrowing
from helpdesk.data.atk.atk_request import AtkRequest
from helpdesk.data.core.department import Department
from helpdesk.data.core.user_info.user import User
from helpdesk.data.tickets.ticket import Ticket


class DashboardService:

    @staticmethod
    def get_dashboard_data(today: Optional[date] = None) -> Dict:
        today = today or date.today()
        start_of_day = datetime.combine(today, time.min)

        return {
            'total_users': User.query.filter(User.is_system.is_(False)).count(),
            'total_departments': Department.query.count(),
            'total_assets': Asset.query.count(),
            'open_tickets': Ticket.query.filter(Ticket.status.in_(Ticket.ACTIVE_STATUSES)).count(),
            'resolved_today': Ticket.query.filter(Ticket.resolved_at >= start_of_day).count(),
            'pending_borrowings': AssetBorrowing.query.filter_by(status=BorrowingStateMachine.PENDING).count(),
            'pending_requests': AtkRequest.query.filter_by(status=AtkRequestStateMachine.PENDING).count(),
            'low_stock_items': low_stock_items()[:5],
            'recent_tickets': Ticket.query.order_by(Ticket.created_at.desc()).limit(5).all(),
        }
