"""
Ticket Service
Presentation service for ticket list and detail views.
"""

from typing import Dict, Optional, Tuple
from flask import Request
from flask_sqlalchemy.pagination import Pagination
from helpdesk import db
from helpdesk.data.tickets.ticket import Ticket


class TicketService:
    """
    Service for ticket presentation data.

    Provides methods for:
    - Building filtered ticket queries
    - Paginating ticket lists with per-status counts
    """

    @staticmethod
    def build_filtered_query(
        status: Optional[str] = None,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        assigned_to_id: Optional[int] = None,
        created_by_id: Optional[int] = None,
        search: Optional[str] = None
    ):
        """
        Build a filtered ticket query.

        Args:
            status: Filter by status
            category: Filter by category
            priority: Filter by priority
            assigned_to_id: Only tickets assigned to this user
            created_by_id: Only tickets reported by this user
            search: Match on title or description

        Returns:
            SQLAlchemy query object, newest first
        """
        query = Ticket.query

        if status:
            query = query.filter(Ticket.status == status)
        if category:
            query = query.filter(Ticket.category == category)
        if priority:
            query = query.filter(Ticket.priority == priority)
        if assigned_to_id:
            query = query.filter(Ticket.assigned_to_id == assigned_to_id)
        if created_by_id:
            query = query.filter(Ticket.created_by_id == created_by_id)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(db.or_(Ticket.title.ilike(pattern), Ticket.description.ilike(pattern)))

        return query.order_by(Ticket.created_at.desc(), Ticket.id.desc())

    @staticmethod
    def get_list_data(request: Request, page: int = 1, per_page: int = 20,
                      created_by_id: Optional[int] = None) -> Tuple[Pagination, Dict]:
        """
        Args:
            created_by_id: Restrict to tickets of one reporter; overrides the query string

        Returns:
            Tuple of (pagination object, {'status_counts': {status: count}})
        """
        query = TicketService.build_filtered_query(
            status=request.args.get('status') or None,
            category=request.args.get('category') or None,
            priority=request.args.get('priority') or None,
            assigned_to_id=request.args.get('assigned_to_id', type=int),
            created_by_id=created_by_id or request.args.get('created_by_id', type=int),
            search=request.args.get('search') or None,
        )
        tickets = query.paginate(page=page, per_page=per_page, error_out=False)

        status_counts = dict(
            db.session.query(Ticket.status, db.func.count()).group_by(Ticket.status).all()
        )
        return tickets, {'status_counts': status_counts}

    @staticmethod
    def get_detail_data(ticket_id: int) -> Dict:
        ticket = db.get_or_404(Ticket, ticket_id)
        return {
            'ticket': ticket,
            'parts': ticket.parts,
        }
