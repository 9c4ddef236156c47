from helpdesk import db
from helpdesk.data.core.user_created_base import UserCreatedBase


class AtkRequest(UserCreatedBase):
    __tablename__ = 'atk_requests'

    # SPB number, assigned when the document is first printed
    document_number = db.Column(db.String(30), unique=True, nullable=True)
    requester_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    department_id = db.Column(db.Integer, db.ForeignKey('departments.id'), nullable=True)
    notes = db.Column(db.Text)
    status = db.Column(db.String(20), nullable=False, default='pending')
    approved_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    approved_at = db.Column(db.DateTime)
    approval_signature_url = db.Column(db.String(500))

    requester = db.relationship('User', foreign_keys=[requester_id])
    department = db.relationship('Department', foreign_keys=[department_id])
    approved_by = db.relationship('User', foreign_keys=[approved_by_id])
    items = db.relationship('AtkRequestItem', back_populates='request',
                            cascade='all, delete-orphan', order_by='AtkRequestItem.id')

    def __repr__(self):
        return f'<AtkRequest {self.id} {self.status}>'


class AtkRequestItem(db.Model):
    __tablename__ = 'atk_request_items'

    id = db.Column(db.Integer, primary_key=True)
    request_id = db.Column(db.Integer, db.ForeignKey('atk_requests.id'), nullable=False)
    item_id = db.Column(db.Integer, db.ForeignKey('atk_items.id'), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    approved_quantity = db.Column(db.Integer, nullable=True)

    request = db.relationship('AtkRequest', back_populates='items')
    item = db.relationship('AtkItem', foreign_keys=[item_id])
