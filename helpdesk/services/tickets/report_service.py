"""
Ticket Report Service
Created/resolved statistics for a period: totals, average resolution time,
a daily trend, breakdowns by category/status/priority, resolution-time
buckets and per-technician workload.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional

from helpdesk.data.tickets.ticket import Ticket
from helpdesk.services.core.filters import day_bounds

UNKNOWN = 'Unknown'

# (label, upper bound in hours); the last bucket is open-ended
DURATION_BUCKETS = (
    ('< 1 Jam', 1),
    ('1 - 4 Jam', 4),
    ('4 - 24 Jam', 24),
    ('1 - 3 Hari', 72),
    ('> 3 Hari', None),
)


def duration_bucket(duration: timedelta) -> str:
    hours = duration.total_seconds() / 3600
    for label, upper in DURATION_BUCKETS:
        if upper is None or hours < upper:
            return label
    return DURATION_BUCKETS[-1][0]


@dataclass
class TicketSummary:
    total_created: int = 0
    total_resolved: int = 0
    open_count: int = 0
    avg_resolution_hours: float = 0.0


@dataclass
class TicketReport:
    summary: TicketSummary
    trend: List[Dict] = field(default_factory=list)
    category_stats: List[Dict] = field(default_factory=list)
    status_stats: List[Dict] = field(default_factory=list)
    priority_stats: List[Dict] = field(default_factory=list)
    duration_stats: List[Dict] = field(default_factory=list)
    technician_stats: List[Dict] = field(default_factory=list)


class TicketReportService:

    @staticmethod
    def report(start: date, end: date) -> TicketReport:
        """
        Build the ticket report for start..end inclusive.

        Counts by category, status and priority cover tickets created in the
        period (with their current status). Durations and the resolved
        counts cover tickets resolved in the period, whenever they were
        created. A technician's assigned count comes from created tickets,
        the resolved count from resolved ones.
        """
        lower, upper = day_bounds(start, end)

        created = Ticket.query.filter(Ticket.created_at >= lower, Ticket.created_at <= upper).all()
        resolved = (Ticket.query
                    .filter(Ticket.resolved_at.isnot(None),
                            Ticket.resolved_at >= lower, Ticket.resolved_at <= upper).all())

        summary = TicketSummary(
            total_created=len(created),
            total_resolved=len(resolved),
            open_count=sum(1 for ticket in created if ticket.status in Ticket.ACTIVE_STATUSES),
        )

        buckets = Counter({label: 0 for label, _ in DURATION_BUCKETS})
        total_duration = timedelta()
        for ticket in resolved:
            if ticket.created_at is None:
                continue
            duration = ticket.resolved_at - ticket.created_at
            total_duration += duration
            buckets[duration_bucket(duration)] += 1
        if resolved:
            summary.avg_resolution_hours = total_duration.total_seconds() / 3600 / len(resolved)

        trend: Dict[str, Dict] = {}
        for ticket in created:
            day = ticket.created_at.date().isoformat()
            trend.setdefault(day, {'date': day, 'created': 0, 'resolved': 0})['created'] += 1
        for ticket in resolved:
            day = ticket.resolved_at.date().isoformat()
            trend.setdefault(day, {'date': day, 'created': 0, 'resolved': 0})['resolved'] += 1

        technicians: Dict[int, Dict] = {}

        def technician_row(user) -> Optional[Dict]:
            if user is None:
                return None
            return technicians.setdefault(user.id, {'name': user.display_name or UNKNOWN, 'assigned': 0, 'resolved': 0})

        for ticket in created:
            row = technician_row(ticket.assigned_to)
            if row is not None:
                row['assigned'] += 1
        for ticket in resolved:
            row = technician_row(ticket.resolved_by)
            if row is not None:
                row['resolved'] += 1

        return TicketReport(
            summary=summary,
            trend=sorted(trend.values(), key=lambda point: point['date']),
            category_stats=[{'name': name, 'count': count}
                            for name, count in Counter(t.category for t in created).items()],
            status_stats=[{'status': status, 'count': count}
                          for status, count in Counter(t.status for t in created).items()],
            priority_stats=[{'priority': priority, 'count': count}
                            for priority, count in Counter(t.priority for t in created).items()],
            duration_stats=[{'range': label, 'count': buckets[label]} for label, _ in DURATION_BUCKETS],
            technician_stats=sorted(technicians.values(), key=lambda row: row['resolved'], reverse=True),
        )
