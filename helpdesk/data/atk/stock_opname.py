from helpdesk import db
from helpdesk.data.core.user_created_base import UserCreatedBase


class StockOpnameSession(UserCreatedBase):
    """Physical stock count over every ATK item"""
    __tablename__ = 'stock_opname_sessions'

    session_code = db.Column(db.String(30), unique=True, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='draft')
    notes = db.Column(db.Text)
    completed_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    completed_at = db.Column(db.DateTime)

    completed_by = db.relationship('User', foreign_keys=[completed_by_id])
    items = db.relationship('StockOpnameItem', back_populates='session',
                            cascade='all, delete-orphan', order_by='StockOpnameItem.id')

    @property
    def item_count(self):
        return len(self.items)

    @property
    def counted_count(self):
        return sum(1 for line in self.items if line.physical_quantity is not None)

    def __repr__(self):
        return f'<StockOpnameSession {self.session_code} {self.status}>'


class StockOpnameItem(db.Model):
    __tablename__ = 'stock_opname_items'

    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.Integer, db.ForeignKey('stock_opname_sessions.id'), nullable=False)
    item_id = db.Column(db.Integer, db.ForeignKey('atk_items.id'), nullable=False)
    # Stock on record when the session was opened
    system_quantity = db.Column(db.Integer, nullable=False, default=0)
    physical_quantity = db.Column(db.Integer, nullable=True)
    difference = db.Column(db.Integer, nullable=False, default=0)
    notes = db.Column(db.Text)
    counted_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    counted_at = db.Column(db.DateTime)

    session = db.relationship('StockOpnameSession', back_populates='items')
    item = db.relationship('AtkItem', foreign_keys=[item_id])
    counted_by = db.relationship('User', foreign_keys=[counted_by_id])
