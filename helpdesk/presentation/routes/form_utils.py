"""
Helpers shared by the route modules: access decorators, form parsing and
flashing of ActionResults.
"""

from datetime import date, datetime
from functools import wraps
from typing import Dict, List, Optional

from flask import abort, flash
from flask_login import current_user
from werkzeug.datastructures import MultiDict

from helpdesk.business.core.action_result import ActionResult
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.routes.form_utils")


def _require(check, label):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated or not check(current_user):
                logger.warning(
                    f"User {current_user.username if current_user.is_authenticated else 'anonymous'} "
                    f"attempted to access {label} page {f.__name__}"
                )
                abort(403)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


admin_required = _require(lambda user: user.is_admin, 'admin')
"""Decorator to require the admin role"""

staff_required = _require(lambda user: user.is_staff, 'staff')
"""Decorator to require an IT staff, IT manager or admin role"""


def flash_result(result: ActionResult, success_message: str) -> bool:
    """Flash the outcome of a manager call; returns result.success"""
    if result.success:
        flash(success_message, 'success')
    else:
        flash(result.error or 'Operation failed', 'error')
    return result.success


def form_int(form: MultiDict, key: str, default: Optional[int] = None) -> Optional[int]:
    value = (form.get(key) or '').strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def form_float(form: MultiDict, key: str, default: Optional[float] = None) -> Optional[float]:
    value = (form.get(key) or '').strip().replace(',', '')
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def form_date(form: MultiDict, key: str) -> Optional[date]:
    value = (form.get(key) or '').strip()
    if not value:
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        return None


def form_text(form: MultiDict, key: str) -> Optional[str]:
    value = (form.get(key) or '').strip()
    return value or None


def form_lines(form: MultiDict, *fields: str) -> List[Dict[str, str]]:
    """
    Zip repeated line inputs into rows.

    A line editor posts item_id=1&quantity=2&item_id=3&quantity=4; with
    fields ('item_id', 'quantity') this returns
    [{'item_id': '1', 'quantity': '2'}, {'item_id': '3', 'quantity': '4'}].
    Rows whose first field is blank are dropped.
    """
    columns = [form.getlist(name) for name in fields]
    length = max((len(column) for column in columns), default=0)

    rows = []
    for index in range(length):
        row = {name: (column[index].strip() if index < len(column) else '')
               for name, column in zip(fields, columns)}
        if row[fields[0]]:
            rows.append(row)
    return rows


def to_int(value, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def to_float(value, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def safe_next(value: Optional[str], default: str) -> str:
    """
    Only same-site relative paths are followed after a form post.

    Browsers read a backslash as '/' and drop tabs and newlines, so either
    one after the leading slash could turn the path into an off-site URL.
    """
    if (value and value.startswith('/') and not value.startswith('//')
            and '\\' not in value and not any(ord(char) < 32 for char in value)):
        return value
    return default
