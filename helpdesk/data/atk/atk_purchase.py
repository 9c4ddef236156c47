from helpdesk import db
from helpdesk.data.core.user_created_base import UserCreatedBase


class AtkPurchaseRequest(UserCreatedBase):
    __tablename__ = 'atk_purchase_requests'

    title = db.Column(db.String(200), nullable=False)
    notes = db.Column(db.Text)
    total_amount = db.Column(db.Float, default=0)
    status = db.Column(db.String(20), nullable=False, default='draft')
    approved_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    approved_at = db.Column(db.DateTime)
    receipt_photo_url = db.Column(db.String(500))

    approved_by = db.relationship('User', foreign_keys=[approved_by_id])
    items = db.relationship('AtkPurchaseItem', back_populates='purchase',
                            cascade='all, delete-orphan', order_by='AtkPurchaseItem.id')

    def __repr__(self):
        return f'<AtkPurchaseRequest {self.id} {self.title} {self.status}>'


class AtkPurchaseItem(db.Model):
    __tablename__ = 'atk_purchase_items'

    id = db.Column(db.Integer, primary_key=True)
    purchase_id = db.Column(db.Integer, db.ForeignKey('atk_purchase_requests.id'), nullable=False)
    item_id = db.Column(db.Integer, db.ForeignKey('atk_items.id'), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Float, nullable=False, default=0)
    subtotal = db.Column(db.Float, nullable=False, default=0)

    purchase = db.relationship('AtkPurchaseRequest', back_populates='items')
    item = db.relationship('AtkItem', foreign_keys=[item_id])
