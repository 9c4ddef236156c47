from helpdesk import db, login_manager
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from datetime import datetime
from helpdesk.business.core.data_insertion_mixin import DataInsertionMixin


class User(UserMixin, DataInsertionMixin, db.Model):
    __tablename__ = 'users'

    ROLE_ADMIN = 'admin'
    ROLE_USER = 'user'
    ROLE_STAFF_IT = 'staff_it'
    ROLE_MANAGER_IT = 'manager_it'
    ROLES = (ROLE_ADMIN, ROLE_USER, ROLE_STAFF_IT, ROLE_MANAGER_IT)

    # Roles that receive tickets and borrowing notifications
    TECHNICIAN_ROLES = (ROLE_STAFF_IT, ROLE_ADMIN)

    # Roles allowed to approve, complete and manage records
    STAFF_ROLES = (ROLE_ADMIN, ROLE_STAFF_IT, ROLE_MANAGER_IT)

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(200), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_USER)
    department_id = db.Column(db.Integer, db.ForeignKey('departments.id', use_alter=True), nullable=True)
    whatsapp_phone = db.Column(db.String(30))
    avatar_url = db.Column(db.String(500))
    is_active = db.Column(db.Boolean, default=True)
    is_system = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    department = db.relationship('Department', foreign_keys=[department_id])

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN

    @property
    def is_technician(self):
        return self.role in self.TECHNICIAN_ROLES

    @property
    def is_staff(self):
        return self.role in self.STAFF_ROLES

    @property
    def display_name(self):
        return self.full_name or self.username

    def __repr__(self):
        return f'<User {self.username}>'


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))
