from helpdesk import db
from helpdesk.data.core.user_created_base import UserCreatedBase


class AssetDistribution(UserCreatedBase):
    __tablename__ = 'asset_distributions'

    # Assigned when the SBBK document is first printed
    document_number = db.Column(db.String(30), unique=True, nullable=True)
    destination_location_id = db.Column(db.Integer, db.ForeignKey('locations.id'), nullable=False)
    receiver_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    notes = db.Column(db.Text)
    status = db.Column(db.String(20), nullable=False, default='draft')
    distributed_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    distributed_at = db.Column(db.DateTime)
    received_at = db.Column(db.DateTime)
    receiver_signature_url = db.Column(db.String(500))

    destination_location = db.relationship('Location', foreign_keys=[destination_location_id])
    receiver = db.relationship('User', foreign_keys=[receiver_id])
    distributed_by = db.relationship('User', foreign_keys=[distributed_by_id])
    items = db.relationship('AssetDistributionItem', back_populates='distribution',
                            cascade='all, delete-orphan', order_by='AssetDistributionItem.id')

    def __repr__(self):
        return f'<AssetDistribution {self.id} {self.document_number or "-"} {self.status}>'


class AssetDistributionItem(db.Model):
    __tablename__ = 'asset_distribution_items'

    CONDITIONS = ('Baru', 'Bekas')

    id = db.Column(db.Integer, primary_key=True)
    distribution_id = db.Column(db.Integer, db.ForeignKey('asset_distributions.id'), nullable=False)
    asset_id = db.Column(db.Integer, db.ForeignKey('assets.id'), nullable=False)
    condition = db.Column(db.String(10), nullable=False, default='Baru')

    distribution = db.relationship('AssetDistribution', back_populates='items')
    asset = db.relationship('Asset', foreign_keys=[asset_id])
