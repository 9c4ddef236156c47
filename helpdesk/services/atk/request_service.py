"""
Request Service
List, detail and SPB print data for ATK item requests.
"""

from typing import Dict, Optional
from flask import Request
from flask_sqlalchemy.pagination import Pagination
from helpdesk import db
from helpdesk.data.atk.atk_request import AtkRequest


class RequestService:

    @staticmethod
    def build_filtered_query(
        status: Optional[str] = None,
        requester_id: Optional[int] = None,
        department_id: Optional[int] = None
    ):
        """
        Args:
            status: Filter by request status
            requester_id: Only requests made by this user ("my requests")
            department_id: Filter by the requester's department
        """
        query = AtkRequest.query

        if status:
            query = query.filter(AtkRequest.status == status)
        if requester_id:
            query = query.filter(AtkRequest.requester_id == requester_id)
        if department_id:
            query = query.filter(AtkRequest.department_id == department_id)

        return query.order_by(AtkRequest.created_at.desc(), AtkRequest.id.desc())

    @staticmethod
    def get_list_data(request: Request, page: int = 1, per_page: int = 20,
                      requester_id: Optional[int] = None) -> Pagination:
        query = RequestService.build_filtered_query(
            status=request.args.get('status') or None,
            requester_id=requester_id,
            department_id=request.args.get('department_id', type=int),
        )
        return query.paginate(page=page, per_page=per_page, error_out=False)

    @staticmethod
    def get_detail_data(request_id: int) -> Dict:
        atk_request = db.get_or_404(AtkRequest, request_id)
        return {
            'atk_request': atk_request,
            'items': atk_request.items,
            'total_requested': sum(line.quantity for line in atk_request.items),
            'total_approved': sum(line.approved_quantity or 0 for line in atk_request.items),
        }
