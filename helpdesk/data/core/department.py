from helpdesk import db
from helpdesk.data.core.user_created_base import UserCreatedBase


class Department(UserCreatedBase):
    __tablename__ = 'departments'

    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.Text)

    def __repr__(self):
        return f'<Department {self.name}>'
