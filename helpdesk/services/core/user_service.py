"""
User Service
Presentation service for user-related data retrieval and formatting.

Handles:
- Query building and filtering for user list views
"""

from typing import Optional
from flask import Request
from flask_sqlalchemy.pagination import Pagination
from helpdesk import db
from helpdesk.data.core.user_info.user import User
from helpdesk.services.core.filters import parse_bool


class UserService:
    """
    Service for user presentation data.

    Provides methods for:
    - Building filtered user queries
    - Paginating user lists
    - Listing assignable technicians
    """

    @staticmethod
    def build_filtered_query(
        role: Optional[str] = None,
        active: Optional[bool] = None,
        department_id: Optional[int] = None,
        search: Optional[str] = None
    ):
        """
        Build a filtered user query. The system user is never listed.

        Args:
            role: Filter by role ('admin', 'user', 'staff_it', 'manager_it')
            active: Filter by active status
            department_id: Filter by department
            search: Case-insensitive match on username, full name or email

        Returns:
            SQLAlchemy query object
        """
        query = User.query.filter(User.is_system.is_(False))

        if role:
            query = query.filter(User.role == role)

        if active is not None:
            query = query.filter(User.is_active == active)

        if department_id:
            query = query.filter(User.department_id == department_id)

        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(db.or_(
                User.username.ilike(pattern),
                User.full_name.ilike(pattern),
                User.email.ilike(pattern),
            ))

        return query.order_by(User.full_name, User.username)

    @staticmethod
    def get_list_data(
        request: Request,
        page: int = 1,
        per_page: int = 20
    ) -> Pagination:
        """
        Get paginated user list with filters applied.

        Args:
            request: Flask request object
            page: Page number (default: 1)
            per_page: Items per page (default: 20)

        Returns:
            Pagination object
        """
        query = UserService.build_filtered_query(
            role=request.args.get('role') or None,
            active=parse_bool(request.args.get('active')),
            department_id=request.args.get('department_id', type=int),
            search=request.args.get('search') or None,
        )
        return query.paginate(page=page, per_page=per_page, error_out=False)

    @staticmethod
    def technicians():
        """Active users who can be assigned tickets, ordered by name"""
        return (User.query
                .filter(User.role.in_(User.TECHNICIAN_ROLES), User.is_active.is_(True))
                .order_by(User.full_name).all())

    @staticmethod
    def active_users():
        return (User.query
                .filter(User.is_active.is_(True), User.is_system.is_(False))
                .order_by(User.full_name).all())
