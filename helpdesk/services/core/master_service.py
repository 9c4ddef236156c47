"""
Master Data Service
List data for departments, locations and asset categories, with the number
of records that still reference each row (a row in use cannot be deleted).
"""

from typing import Dict, Tuple
from flask import Request
from flask_sqlalchemy.pagination import Pagination
from helpdesk import db
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_category import AssetCategory
from helpdesk.data.core.department import Department
from helpdesk.data.core.location import Location
from helpdesk.data.core.user_info.user import User


class MasterDataService:

    @staticmethod
    def _counts(column) -> Dict[int, int]:
        rows = db.session.query(column, db.func.count()).filter(column.isnot(None)).group_by(column).all()
        return {key: count for key, count in rows}

    @staticmethod
    def get_list_data(model, request: Request, page: int = 1, per_page: int = 20) -> Tuple[Pagination, Dict]:
        """
        Args:
            model: Department, Location or AssetCategory
            request: Flask request object (reads ?search=)

        Returns:
            Tuple of (pagination object, count dict)
        """
        query = model.query
        search = request.args.get('search')
        if search:
            query = query.filter(model.name.ilike(f"%{search.strip()}%"))
        records = query.order_by(model.name).paginate(page=page, per_page=per_page, error_out=False)

        counts = {}
        if model is Department:
            counts['asset_counts'] = MasterDataService._counts(Asset.department_id)
            counts['user_counts'] = MasterDataService._counts(User.department_id)
        elif model is Location:
            counts['asset_counts'] = MasterDataService._counts(Asset.location_id)
        elif model is AssetCategory:
            counts['asset_counts'] = MasterDataService._counts(Asset.category_id)
        return records, counts

    @staticmethod
    def options():
        """Dropdown options used across forms"""
        return {
            'departments': Department.query.order_by(Department.name).all(),
            'locations': Location.query.order_by(Location.name).all(),
            'categories': AssetCategory.query.order_by(AssetCategory.name).all(),
        }
