"""
Borrowing Service
List data for asset borrowings.
"""

from typing import Dict, Optional, Tuple
from flask import Request
from flask_sqlalchemy.pagination import Pagination
from helpdesk import db
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_borrowing import AssetBorrowing


class BorrowingService:

    @staticmethod
    def build_filtered_query(
        status: Optional[str] = None,
        borrower_user_id: Optional[int] = None,
        search: Optional[str] = None
    ):
        """
        Args:
            status: Filter by borrowing status
            borrower_user_id: Only borrowings of this user
            search: Match on the asset name or code

        Returns:
            SQLAlchemy query object, newest first
        """
        query = AssetBorrowing.query.join(Asset, AssetBorrowing.asset_id == Asset.id)

        if status:
            query = query.filter(AssetBorrowing.status == status)
        if borrower_user_id:
            query = query.filter(AssetBorrowing.borrower_user_id == borrower_user_id)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(db.or_(Asset.name.ilike(pattern), Asset.asset_code.ilike(pattern)))

        return query.order_by(AssetBorrowing.created_at.desc(), AssetBorrowing.id.desc())

    @staticmethod
    def get_list_data(request: Request, page: int = 1, per_page: int = 20,
                      borrower_user_id: Optional[int] = None) -> Tuple[Pagination, Dict]:
        """
        Args:
            borrower_user_id: Restrict to one borrower; overrides the query string

        Returns:
            Tuple of (pagination object, {'status_counts': {status: count}})
        """
        query = BorrowingService.build_filtered_query(
            status=request.args.get('status') or None,
            borrower_user_id=borrower_user_id or request.args.get('borrower_user_id', type=int),
            search=request.args.get('search') or None,
        )
        borrowings = query.paginate(page=page, per_page=per_page, error_out=False)

        status_counts = dict(
            db.session.query(AssetBorrowing.status, db.func.count())
            .group_by(AssetBorrowing.status).all()
        )
        return borrowings, {'status_counts': status_counts}
