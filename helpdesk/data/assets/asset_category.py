from helpdesk import db
from helpdesk.data.core.user_created_base import UserCreatedBase


class AssetCategory(UserCreatedBase):
    __tablename__ = 'asset_categories'

    name = db.Column(db.String(100), unique=True, nullable=False)
    # Used as the first segment of generated asset codes (e.g. LPT-2024-0001)
    prefix = db.Column(db.String(10), nullable=False)
    description = db.Column(db.Text)

    def __repr__(self):
        return f'<AssetCategory {self.name} ({self.prefix})>'
