"""
Asset models: categories, assets, maintenance, borrowing and distribution
"""

from helpdesk.data.assets.asset_category import AssetCategory
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_maintenance import AssetMaintenance
from helpdesk.data.assets.asset_borrowing import AssetBorrowing
from helpdesk.data.assets.asset_distribution import AssetDistribution, AssetDistributionItem

__all__ = [
    'AssetCategory',
    'Asset',
    'AssetMaintenance',
    'AssetBorrowing',
    'AssetDistribution',
    'AssetDistributionItem',
]
