"""
Core models: users, departments and locations
"""

from helpdesk.data.core.user_info.user import User
from helpdesk.data.core.department import Department
from helpdesk.data.core.location import Location

__all__ = ['User', 'Department', 'Location']
