"""
Stock Opname Service
List and detail data for stock opname sessions.
"""

from typing import Dict
from flask import Request
from flask_sqlalchemy.pagination import Pagination
from helpdesk import db
from helpdesk.data.atk.stock_opname import StockOpnameSession


class StockOpnameService:

    @staticmethod
    def get_list_data(request: Request, page: int = 1, per_page: int = 20) -> Pagination:
        query = StockOpnameSession.query
        status = request.args.get('status')
        if status:
            query = query.filter(StockOpnameSession.status == status)
        query = query.order_by(StockOpnameSession.created_at.desc(), StockOpnameSession.id.desc())
        return query.paginate(page=page, per_page=per_page, error_out=False)

    @staticmethod
    def get_detail_data(session_id: int) -> Dict:
        """
        Returns:
            The session with its lines and the totals of counted differences
            (surplus and shortage are reported separately)
        """
        session = db.get_or_404(StockOpnameSession, session_id)
        counted = [line for line in session.items if line.physical_quantity is not None]
        return {
            'session': session,
            'items': session.items,
            'counted': len(counted),
            'surplus': sum(line.difference for line in counted if line.difference > 0),
            'shortage': -sum(line.difference for line in counted if line.difference < 0),
        }
