from helpdesk import db
from helpdesk.data.core.user_created_base import UserCreatedBase


class AtkStockHistory(UserCreatedBase):
    """Stock ledger row; every stock change writes one"""
    __tablename__ = 'atk_stock_history'

    TYPE_IN = 'in'
    TYPE_OUT = 'out'

    item_id = db.Column(db.Integer, db.ForeignKey('atk_items.id'), nullable=False)
    type = db.Column(db.String(10), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    # Id of the purchase, request or ticket that caused the movement
    reference_id = db.Column(db.Integer, nullable=True)
    notes = db.Column(db.Text)

    item = db.relationship('AtkItem', foreign_keys=[item_id])

    def __repr__(self):
        return f'<AtkStockHistory item={self.item_id} {self.type} {self.quantity}>'
