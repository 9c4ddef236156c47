"""
Least-busy technician selection for ticket auto-assignment
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from helpdesk import db
from helpdesk.data.core.user_info.user import User
from helpdesk.data.tickets.ticket import Ticket


def pick_least_busy(technician_ids: Sequence[int], assigned_ids: Iterable[Optional[int]]) -> Optional[int]:
    """
    Choose the technician with the fewest active tickets.

    Args:
        technician_ids: Candidates, in priority order
        assigned_ids: assigned_to_id of every open/in_progress ticket

    Returns:
        The candidate with the strictly lowest count (the first one wins a
        tie), or None when there are no candidates.
    """
    counts = {technician_id: 0 for technician_id in technician_ids}
    for assigned_id in assigned_ids:
        if assigned_id in counts:
            counts[assigned_id] += 1

    chosen = None
    lowest = None
    for technician_id in technician_ids:
        if lowest is None or counts[technician_id] < lowest:
            lowest = counts[technician_id]
            chosen = technician_id
    return chosen


def find_least_busy_technician() -> Optional[User]:
    technician_ids = [
        user_id for (user_id,) in db.session.query(User.id)
        .filter(User.role.in_(User.TECHNICIAN_ROLES), User.is_active.is_(True))
        .order_by(User.id.asc()).all()
    ]
    if not technician_ids:
        return None

    assigned_ids = [
        assigned_id for (assigned_id,) in db.session.query(Ticket.assigned_to_id)
        .filter(Ticket.status.in_(Ticket.ACTIVE_STATUSES), Ticket.assigned_to_id.isnot(None)).all()
    ]
    chosen = pick_least_busy(technician_ids, assigned_ids)
    return db.session.get(User, chosen) if chosen is not None else None
