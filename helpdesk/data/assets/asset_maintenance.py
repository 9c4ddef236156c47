from helpdesk import db
from datetime import datetime
from helpdesk.data.core.user_created_base import UserCreatedBase


class AssetMaintenance(UserCreatedBase):
    __tablename__ = 'asset_maintenance'

    TYPES = ('repair', 'upgrade', 'cleaning', 'inspection')

    asset_id = db.Column(db.Integer, db.ForeignKey('assets.id'), nullable=False)
    type = db.Column(db.String(30), nullable=False, default='repair')
    description = db.Column(db.Text)
    cost = db.Column(db.Float, default=0)
    performed_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    performed_at = db.Column(db.DateTime, default=datetime.utcnow)
    next_maintenance = db.Column(db.Date)
    notes = db.Column(db.Text)

    asset = db.relationship('Asset', foreign_keys=[asset_id])
    performed_by = db.relationship('User', foreign_keys=[performed_by_id])

    def __repr__(self):
        return f'<AssetMaintenance {self.id} asset={self.asset_id} {self.type}>'
