from helpdesk import db
from helpdesk.data.core.user_created_base import UserCreatedBase


class AssetBorrowing(UserCreatedBase):
    __tablename__ = 'asset_borrowings'

    asset_id = db.Column(db.Integer, db.ForeignKey('assets.id'), nullable=False)
    borrower_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    borrower_location_id = db.Column(db.Integer, db.ForeignKey('locations.id'), nullable=True)
    original_location_id = db.Column(db.Integer, db.ForeignKey('locations.id'), nullable=True)
    borrow_date = db.Column(db.Date, nullable=False)
    expected_return_date = db.Column(db.Date)
    actual_return_date = db.Column(db.Date)
    purpose = db.Column(db.Text)
    notes = db.Column(db.Text)
    status = db.Column(db.String(20), nullable=False, default='pending')
    approved_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    approved_at = db.Column(db.DateTime)
    returned_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    returned_at = db.Column(db.DateTime)

    asset = db.relationship('Asset', foreign_keys=[asset_id])
    borrower = db.relationship('User', foreign_keys=[borrower_user_id])
    borrower_location = db.relationship('Location', foreign_keys=[borrower_location_id])
    original_location = db.relationship('Location', foreign_keys=[original_location_id])
    approved_by = db.relationship('User', foreign_keys=[approved_by_id])
    returned_by = db.relationship('User', foreign_keys=[returned_by_id])

    def __repr__(self):
        return f'<AssetBorrowing {self.id} asset={self.asset_id} {self.status}>'
