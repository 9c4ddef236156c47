"""
Item Service
Presentation service for ATK items and the stock ledger.

Handles:
- Query building and filtering for the item list
- The stock movement history (stock-in / stock-out pages)
"""

from typing import Optional
from flask import Request
from flask_sqlalchemy.pagination import Pagination
from helpdesk import db
from helpdesk.data.atk.atk_item import AtkItem
from helpdesk.data.atk.atk_stock_history import AtkStockHistory
from helpdesk.services.core.filters import parse_bool


class ItemService:
    """
    Service for ATK item presentation data.

    Provides methods for:
    - Building filtered item queries
    - Paginating item lists and stock movements
    """

    @staticmethod
    def build_filtered_query(
        search: Optional[str] = None,
        item_type: Optional[str] = None,
        low_stock: Optional[bool] = None
    ):
        """
        Build a filtered item query.

        Args:
            search: Case-insensitive match on name or description
            item_type: 'atk' or 'sparepart'
            low_stock: Only items at or below their minimum stock

        Returns:
            SQLAlchemy query object
        """
        query = AtkItem.query

        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(db.or_(AtkItem.name.ilike(pattern), AtkItem.description.ilike(pattern)))
        if item_type:
            query = query.filter(AtkItem.type == item_type)
        if low_stock:
            query = query.filter(AtkItem.stock_quantity <= AtkItem.min_stock)

        return query.order_by(AtkItem.name)

    @staticmethod
    def get_list_data(request: Request, page: int = 1, per_page: int = 20) -> Pagination:
        query = ItemService.build_filtered_query(
            search=request.args.get('search') or None,
            item_type=request.args.get('type') or None,
            low_stock=parse_bool(request.args.get('low_stock')),
        )
        return query.paginate(page=page, per_page=per_page, error_out=False)

    @staticmethod
    def build_history_query(movement_type: Optional[str] = None, item_id: Optional[int] = None):
        """
        Stock ledger rows, newest first.

        Args:
            movement_type: 'in' or 'out'
            item_id: Only movements of this item
        """
        query = AtkStockHistory.query

        if movement_type:
            query = query.filter(AtkStockHistory.type == movement_type)
        if item_id:
            query = query.filter(AtkStockHistory.item_id == item_id)

        return query.order_by(AtkStockHistory.created_at.desc(), AtkStockHistory.id.desc())

    @staticmethod
    def get_history_data(request: Request, movement_type: Optional[str] = None,
                         page: int = 1, per_page: int = 20) -> Pagination:
        query = ItemService.build_history_query(
            movement_type=movement_type,
            item_id=request.args.get('item_id', type=int),
        )
        return query.paginate(page=page, per_page=per_page, error_out=False)

    @staticmethod
    def all_items(item_type: Optional[str] = None):
        return ItemService.build_filtered_query(item_type=item_type).all()
