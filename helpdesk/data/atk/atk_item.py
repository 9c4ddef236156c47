from helpdesk import db
from helpdesk.data.core.user_created_base import UserCreatedBase


class AtkItem(UserCreatedBase):
    __tablename__ = 'atk_items'

    TYPE_ATK = 'atk'
    TYPE_SPAREPART = 'sparepart'
    TYPES = (TYPE_ATK, TYPE_SPAREPART)

    DEFAULT_MIN_STOCK = 5
    DEFAULT_LEAD_TIME_DAYS = 7

    type = db.Column(db.String(20), nullable=False, default=TYPE_ATK)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    unit = db.Column(db.String(30), nullable=False, default='pcs')
    price = db.Column(db.Float, default=0)
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    min_stock = db.Column(db.Integer, nullable=False, default=DEFAULT_MIN_STOCK)
    # Days between ordering and receiving; drives the reorder point
    lead_time_days = db.Column(db.Integer, nullable=False, default=DEFAULT_LEAD_TIME_DAYS)
    image_url = db.Column(db.String(500))

    @property
    def is_low_stock(self):
        return (self.stock_quantity or 0) <= (self.min_stock or 0)

    def __repr__(self):
        return f'<AtkItem {self.name} stock={self.stock_quantity}>'
