"""
Maintenance Service
List data for asset maintenance records.
"""

from typing import Dict, Optional, Tuple
from flask import Request
from flask_sqlalchemy.pagination import Pagination
from helpdesk import db
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_maintenance import AssetMaintenance


class MaintenanceService:

    @staticmethod
    def build_filtered_query(
        asset_id: Optional[int] = None,
        maintenance_type: Optional[str] = None,
        search: Optional[str] = None
    ):
        query = AssetMaintenance.query.join(Asset, AssetMaintenance.asset_id == Asset.id)

        if asset_id:
            query = query.filter(AssetMaintenance.asset_id == asset_id)
        if maintenance_type:
            query = query.filter(AssetMaintenance.type == maintenance_type)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(db.or_(
                Asset.name.ilike(pattern),
                Asset.asset_code.ilike(pattern),
                AssetMaintenance.description.ilike(pattern),
            ))

        return query.order_by(AssetMaintenance.performed_at.desc(), AssetMaintenance.id.desc())

    @staticmethod
    def get_list_data(request: Request, page: int = 1, per_page: int = 20) -> Tuple[Pagination, Dict]:
        """
        Returns:
            Tuple of (pagination object, {'total_cost': sum of cost over the filtered records})
        """
        query = MaintenanceService.build_filtered_query(
            asset_id=request.args.get('asset_id', type=int),
            maintenance_type=request.args.get('type') or None,
            search=request.args.get('search') or None,
        )
        records = query.paginate(page=page, per_page=per_page, error_out=False)
        total_cost = query.order_by(None).with_entities(db.func.coalesce(db.func.sum(AssetMaintenance.cost), 0)).scalar()
        return records, {'total_cost': float(total_cost or 0)}
