"""
Request argument parsing shared by the list and report services
"""

from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

from flask import Request

DEFAULT_REPORT_DAYS = 30


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse YYYY-MM-DD; anything else is None"""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), '%Y-%m-%d').date()
    except ValueError:
        return None


def parse_bool(value: Optional[str]) -> Optional[bool]:
    if value is None or value == '':
        return None
    return value.lower() in ('true', '1', 'yes', 'on')


def date_range_from_request(request: Request, default_days: int = DEFAULT_REPORT_DAYS,
                            today: Optional[date] = None) -> Tuple[date, date]:
    """
    Read start_date/end_date from the query string.

    Missing values default to the last default_days days ending today; a
    reversed range is swapped.
    """
    today = today or date.today()
    end = parse_date(request.args.get('end_date')) or today
    start = parse_date(request.args.get('start_date')) or (end - timedelta(days=default_days))
    if start > end:
        start, end = end, start
    return start, end


def day_bounds(start: date, end: date) -> Tuple[datetime, datetime]:
    """Datetime bounds covering whole days from start to end inclusive"""
    return datetime.combine(start, time.min), datetime.combine(end, time.max)
