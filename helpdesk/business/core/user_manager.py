"""
UserManager - user accounts (profiles), avatars and CSV batch import
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from helpdesk import db
from helpdesk.business.core.action_result import ActionResult, action
from helpdesk.business.core.errors import ConflictError, HelpdeskError, StatusError, ValidationError
from helpdesk.business.core.file_storage import get_file_store
from helpdesk.business.core.records import get_optional, get_or_raise
from helpdesk.data.core.department import Department
from helpdesk.data.core.user_info.user import User
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.core.user_manager")

MIN_PASSWORD_LENGTH = 6
EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def normalize_username(username: str) -> str:
    """Lower-case, whitespace replaced by dots: 'Budi Santoso' -> 'budi.santoso'"""
    return re.sub(r'\s', '.', (username or '').strip().lower())


def normalize_role(role: Optional[str]) -> str:
    role = (role or '').strip().lower()
    return role if role in User.ROLES else User.ROLE_USER


@dataclass
class ImportDetail:
    username: str
    email: str
    full_name: str
    status: str = 'success'
    error: Optional[str] = None


@dataclass
class ImportResult:
    success: bool = True
    imported: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    details: List[ImportDetail] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class UserManager:

    def __init__(self, actor_id: int | None):
        self.actor_id = actor_id

    def _check_unique(self, username: str, email: str | None, user_id: int | None = None) -> None:
        existing = User.query.filter_by(username=username).first()
        if existing is not None and existing.id != user_id:
            raise ConflictError(f"Username {username} is already taken")
        if email is not None:
            existing = User.query.filter(db.func.lower(User.email) == email.lower()).first()
            if existing is not None and existing.id != user_id:
                raise ConflictError(f"Email {email} is already registered")

    @staticmethod
    def _validate_credentials(email: str, password: str) -> None:
        if not EMAIL_PATTERN.match(email or ''):
            raise ValidationError("Invalid email format")
        if len(password or '') < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    def _build_user(self, data: Mapping[str, Any]) -> User:
        email = (data.get('email') or '').strip()
        password = data.get('password') or ''
        username = normalize_username(data.get('username'))
        full_name = (data.get('full_name') or '').strip()

        if not username or not email or not full_name:
            raise ValidationError("Username, email and full name are required")
        self._validate_credentials(email, password)
        role = data.get('role') or User.ROLE_USER
        if role not in User.ROLES:
            raise ValidationError(f"Unknown role: {role}")
        self._check_unique(username, email)
        department = get_optional(Department, data.get('department_id'), 'Department')

        user = User(
            username=username,
            email=email,
            full_name=full_name,
            role=role,
            department_id=department.id if department else None,
            whatsapp_phone=data.get('whatsapp_phone') or None,
            avatar_url=data.get('avatar_url') or None,
            is_active=True,
        )
        user.set_password(password)
        return user

    @action("upload_avatar")
    def upload_avatar(self, upload, user_id: int | None = None) -> ActionResult:
        if user_id:
            get_or_raise(User, user_id, 'User')
        url = get_file_store().save_upload(upload, 'users')
        return ActionResult.ok(id=user_id, url=url)

    @action("create_user")
    def create_user(self, data: Mapping[str, Any]) -> User:
        user = self._build_user(data)
        db.session.add(user)
        db.session.commit()

        logger.info(f"Created user {user.username} ({user.role}) by user {self.actor_id}")
        return user

    @action("update_user")
    def update_user(self, user_id: int, data: Mapping[str, Any]) -> User:
        """
        Update a profile. full_name and role are always written; username,
        avatar_url, whatsapp_phone, department_id and is_active only when
        present in data.
        """
        user = get_or_raise(User, user_id, 'User')

        full_name = (data.get('full_name') or '').strip()
        if not full_name:
            raise ValidationError("Full name is required")
        role = data.get('role') or user.role
        if role not in User.ROLES:
            raise ValidationError(f"Unknown role: {role}")

        user.full_name = full_name
        user.role = role

        if data.get('username'):
            username = normalize_username(data['username'])
            self._check_unique(username, None, user.id)
            user.username = username
        old_avatar = user.avatar_url
        if 'avatar_url' in data:
            user.avatar_url = data['avatar_url'] or None
        if 'whatsapp_phone' in data:
            user.whatsapp_phone = data['whatsapp_phone'] or None
        if 'department_id' in data:
            department = get_optional(Department, data['department_id'], 'Department')
            user.department_id = department.id if department else None
        if 'is_active' in data:
            if not data['is_active'] and user.id == self.actor_id:
                raise ValidationError("You cannot deactivate your own account")
            user.is_active = bool(data['is_active'])
        if data.get('password'):
            self._validate_credentials(user.email, data['password'])
            user.set_password(data['password'])

        db.session.commit()

        if old_avatar and old_avatar != user.avatar_url:
            get_file_store().delete(old_avatar)

        logger.info(f"Updated user {user.username} by user {self.actor_id}")
        return user

    @action("update_profile")
    def update_profile(self, data: Mapping[str, Any]) -> User:
        """The acting user's own full name, WhatsApp number and avatar; role and access stay untouched."""
        user = get_or_raise(User, self.actor_id, 'User')

        full_name = (data.get('full_name') or '').strip()
        if not full_name:
            raise ValidationError("Full name is required")
        user.full_name = full_name
        user.whatsapp_phone = (data.get('whatsapp_phone') or '').strip() or None

        old_avatar = user.avatar_url
        if 'avatar_url' in data:
            user.avatar_url = data['avatar_url'] or None

        db.session.commit()

        if old_avatar and old_avatar != user.avatar_url:
            get_file_store().delete(old_avatar)

        logger.info(f"User {user.username} updated their profile")
        return user

    @action("delete_user")
    def delete_user(self, user_id: int) -> ActionResult:
        user = get_or_raise(User, user_id, 'User')
        if user.is_system:
            raise StatusError("The system user cannot be deleted")
        if user.id == self.actor_id:
            raise StatusError("You cannot delete your own account")

        username = user.username
        avatar_url = user.avatar_url
        if avatar_url:
            get_file_store().delete(avatar_url)

        db.session.delete(user)
        db.session.commit()

        logger.info(f"Deleted user {username} by user {self.actor_id}")
        return ActionResult.ok(id=user_id)

    def import_users_batch(self, rows: Sequence[Mapping[str, Any]]) -> ImportResult:
        """
        Create users from imported rows, one commit per row.

        A failing row is reported in the result and does not stop the batch.
        Unknown roles become 'user'; a department column is matched by name.
        """
        result = ImportResult()
        departments = {department.name.lower(): department.id for department in Department.query.all()}

        for row in rows:
            detail = ImportDetail(
                username=(row.get('username') or '').strip(),
                email=(row.get('email') or '').strip(),
                full_name=(row.get('full_name') or '').strip(),
            )
            try:
                if not (detail.username and detail.email and row.get('password') and detail.full_name):
                    raise ValidationError("Missing required fields (username, email, password, full_name)")

                department_name = (row.get('department') or '').strip().lower()
                user = self._build_user({
                    'username': detail.username,
                    'email': detail.email,
                    'password': row.get('password'),
                    'full_name': detail.full_name,
                    'role': normalize_role(row.get('role')),
                    'whatsapp_phone': (row.get('whatsapp_phone') or '').strip() or None,
                    'department_id': departments.get(department_name),
                })
                db.session.add(user)
                db.session.commit()
                result.imported += 1
            except (HelpdeskError, SQLAlchemyError) as e:
                db.session.rollback()
                detail.status = 'failed'
                detail.error = str(getattr(e, 'orig', None) or e)
                result.failed += 1
                result.errors.append(f"{detail.email or detail.username or 'Unknown'}: {detail.error}")
            result.details.append(detail)

        result.success = result.failed == 0
        logger.info(f"User import by user {self.actor_id}: {result.imported} imported, {result.failed} failed")
        return result
