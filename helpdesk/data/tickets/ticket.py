from helpdesk import db
from helpdesk.data.core.user_created_base import UserCreatedBase


class Ticket(UserCreatedBase):
    __tablename__ = 'tickets'

    CATEGORIES = ('hardware', 'software', 'data', 'network')
    PRIORITIES = ('low', 'medium', 'high', 'urgent')

    STATUS_OPEN = 'open'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_RESOLVED = 'resolved'
    STATUS_CLOSED = 'closed'
    STATUSES = (STATUS_OPEN, STATUS_IN_PROGRESS, STATUS_RESOLVED, STATUS_CLOSED)

    # Statuses that count towards a technician's workload
    ACTIVE_STATUSES = (STATUS_OPEN, STATUS_IN_PROGRESS)

    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    category = db.Column(db.String(20), nullable=False, default='hardware')
    priority = db.Column(db.String(20), nullable=False, default='medium')
    status = db.Column(db.String(20), nullable=False, default=STATUS_OPEN)
    department_id = db.Column(db.Integer, db.ForeignKey('departments.id'), nullable=True)
    asset_id = db.Column(db.Integer, db.ForeignKey('assets.id'), nullable=True)
    assigned_to_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    resolution_notes = db.Column(db.Text)
    resolved_at = db.Column(db.DateTime)
    resolved_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)

    department = db.relationship('Department', foreign_keys=[department_id])
    asset = db.relationship('Asset', foreign_keys=[asset_id])
    assigned_to = db.relationship('User', foreign_keys=[assigned_to_id])
    resolved_by = db.relationship('User', foreign_keys=[resolved_by_id])
    parts = db.relationship('TicketPart', back_populates='ticket',
                            cascade='all, delete-orphan', order_by='TicketPart.id')

    def __repr__(self):
        return f'<Ticket {self.id} {self.status}: {self.title}>'


class TicketPart(db.Model):
    """Sparepart consumed while resolving a ticket"""
    __tablename__ = 'ticket_parts'

    id = db.Column(db.Integer, primary_key=True)
    ticket_id = db.Column(db.Integer, db.ForeignKey('tickets.id'), nullable=False)
    item_id = db.Column(db.Integer, db.ForeignKey('atk_items.id'), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)

    ticket = db.relationship('Ticket', back_populates='parts')
    item = db.relationship('AtkItem', foreign_keys=[item_id])
