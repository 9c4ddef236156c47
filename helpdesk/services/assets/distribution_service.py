"""
Distribution Service
List, detail and print data for asset distributions (SBBK).
"""

from typing import Dict, Optional
from flask import Request
from flask_sqlalchemy.pagination import Pagination
from helpdesk import db
from helpdesk.data.assets.asset_distribution import AssetDistribution


class DistributionService:

    @staticmethod
    def build_filtered_query(status: Optional[str] = None, destination_location_id: Optional[int] = None):
        query = AssetDistribution.query

        if status:
            query = query.filter(AssetDistribution.status == status)
        if destination_location_id:
            query = query.filter(AssetDistribution.destination_location_id == destination_location_id)

        return query.order_by(AssetDistribution.created_at.desc(), AssetDistribution.id.desc())

    @staticmethod
    def get_list_data(request: Request, page: int = 1, per_page: int = 20) -> Pagination:
        query = DistributionService.build_filtered_query(
            status=request.args.get('status') or None,
            destination_location_id=request.args.get('location_id', type=int),
        )
        return query.paginate(page=page, per_page=per_page, error_out=False)

    @staticmethod
    def get_detail_data(distribution_id: int) -> Dict:
        distribution = db.get_or_404(AssetDistribution, distribution_id)
        return {
            'distribution': distribution,
            'items': distribution.items,
            'asset_count': len(distribution.items),
        }
