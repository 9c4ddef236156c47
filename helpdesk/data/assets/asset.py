from helpdesk import db
from helpdesk.data.core.user_created_base import UserCreatedBase


class Asset(UserCreatedBase):
    __tablename__ = 'assets'

    STATUS_ACTIVE = 'active'
    STATUS_MAINTENANCE = 'maintenance'
    STATUS_DAMAGE = 'damage'
    STATUS_RETIRED = 'retired'
    STATUS_DISPOSED = 'disposed'
    STATUSES = (STATUS_ACTIVE, STATUS_MAINTENANCE, STATUS_DAMAGE, STATUS_RETIRED, STATUS_DISPOSED)

    CONDITIONS = ('good', 'fair', 'poor')

    DEFAULT_USEFUL_LIFE_YEARS = 5

    asset_code = db.Column(db.String(50), unique=True, nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey('asset_categories.id'), nullable=True)
    name = db.Column(db.String(200), nullable=False)
    brand = db.Column(db.String(100))
    model = db.Column(db.String(100))
    serial_number = db.Column(db.String(100))
    purchase_date = db.Column(db.Date)
    purchase_price = db.Column(db.Float, default=0)
    warranty_expiry = db.Column(db.Date)
    useful_life_years = db.Column(db.Integer, default=DEFAULT_USEFUL_LIFE_YEARS)
    status = db.Column(db.String(20), nullable=False, default=STATUS_ACTIVE)
    condition = db.Column(db.String(20), nullable=False, default='good')
    location_id = db.Column(db.Integer, db.ForeignKey('locations.id'), nullable=True)
    department_id = db.Column(db.Integer, db.ForeignKey('departments.id'), nullable=True)
    assigned_to_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    is_borrowable = db.Column(db.Boolean, default=False)
    image_url = db.Column(db.String(500))
    notes = db.Column(db.Text)

    category = db.relationship('AssetCategory', foreign_keys=[category_id])
    location = db.relationship('Location', foreign_keys=[location_id])
    department = db.relationship('Department', foreign_keys=[department_id])
    assigned_to = db.relationship('User', foreign_keys=[assigned_to_id])

    def __repr__(self):
        return f'<Asset {self.asset_code}: {self.name}>'
