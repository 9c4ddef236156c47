"""
Purchase Service
List and detail data for ATK purchase requests.
"""

from typing import Dict, Optional
from flask import Request
from flask_sqlalchemy.pagination import Pagination
from helpdesk import db
from helpdesk.data.atk.atk_purchase import AtkPurchaseRequest


class PurchaseService:

    @staticmethod
    def build_filtered_query(status: Optional[str] = None, search: Optional[str] = None):
        query = AtkPurchaseRequest.query

        if status:
            query = query.filter(AtkPurchaseRequest.status == status)
        if search:
            query = query.filter(AtkPurchaseRequest.title.ilike(f"%{search.strip()}%"))

        return query.order_by(AtkPurchaseRequest.created_at.desc(), AtkPurchaseRequest.id.desc())

    @staticmethod
    def get_list_data(request: Request, page: int = 1, per_page: int = 20) -> Pagination:
        query = PurchaseService.build_filtered_query(
            status=request.args.get('status') or None,
            search=request.args.get('search') or None,
        )
        return query.paginate(page=page, per_page=per_page, error_out=False)

    @staticmethod
    def get_detail_data(purchase_id: int) -> Dict:
        purchase = db.get_or_404(AtkPurchaseRequest, purchase_id)
        return {
            'purchase': purchase,
            'items': purchase.items,
            'total_quantity': sum(line.quantity for line in purchase.items),
        }
