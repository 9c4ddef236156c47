"""
State machines for the status fields of borrowings, purchases, ATK requests,
stock opname sessions, distributions and tickets

Encodes valid transitions; managers call validate_transition before writing.
Keeps "what is allowed" separate from "how persistence occurs".
"""

from typing import Dict, Set
from helpdesk.business.core.errors import StatusError


class StatusStateMachine:
    """
    Base state machine. Subclasses declare their statuses, TRANSITIONS and
    TERMINAL_STATES.
    """

    LABEL = 'record'
    INITIAL = None
    TERMINAL_STATES: Set[str] = set()
    TRANSITIONS: Dict[str, Set[str]] = {}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """
        Check if transition is valid.

        Args:
            from_status: Current status
            to_status: Target status

        Returns:
            bool: True if transition is allowed
        """
        if from_status in cls.TERMINAL_STATES:
            return False
        return to_status in cls.TRANSITIONS.get(from_status, set())

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """
        Validate transition and raise exception if invalid.

        Raises:
            StatusError: If transition is not allowed
        """
        if not cls.can_transition(from_status, to_status):
            raise StatusError(
                f"Cannot change {cls.LABEL} status from '{from_status}' to '{to_status}'"
            )

    @classmethod
    def get_allowed_transitions(cls, from_status: str) -> Set[str]:
        """Get set of allowed target statuses from current status"""
        if from_status in cls.TERMINAL_STATES:
            return set()
        return cls.TRANSITIONS.get(from_status, set())

    @classmethod
    def is_initial(cls, status: str) -> bool:
        """Edits and deletes are only allowed while a record is in its initial status"""
        return status == cls.INITIAL


class BorrowingStateMachine(StatusStateMachine):
    """pending -> approved/rejected, approved -> borrowed -> returned"""

    LABEL = 'borrowing'

    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    BORROWED = 'borrowed'
    RETURNED = 'returned'

    INITIAL = PENDING
    # Statuses that block a new borrowing of the same asset
    ACTIVE_STATES = {PENDING, APPROVED, BORROWED}
    TERMINAL_STATES = {REJECTED, RETURNED}

    TRANSITIONS: Dict[str, Set[str]] = {
        PENDING: {APPROVED, REJECTED},
        APPROVED: {BORROWED},
        BORROWED: {RETURNED},
    }


class DistributionStateMachine(StatusStateMachine):
    """draft -> completed"""

    LABEL = 'distribution'

    DRAFT = 'draft'
    COMPLETED = 'completed'

    INITIAL = DRAFT
    TERMINAL_STATES = {COMPLETED}

    TRANSITIONS: Dict[str, Set[str]] = {
        DRAFT: {COMPLETED},
    }


class PurchaseStateMachine(StatusStateMachine):
    """draft -> process -> success"""

    LABEL = 'purchase request'

    DRAFT = 'draft'
    PROCESS = 'process'
    SUCCESS = 'success'

    INITIAL = DRAFT
    TERMINAL_STATES = {SUCCESS}

    TRANSITIONS: Dict[str, Set[str]] = {
        DRAFT: {PROCESS},
        PROCESS: {SUCCESS},
    }


class AtkRequestStateMachine(StatusStateMachine):
    """pending -> approved/rejected, approved -> completed"""

    LABEL = 'ATK request'

    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    COMPLETED = 'completed'

    INITIAL = PENDING
    TERMINAL_STATES = {REJECTED, COMPLETED}

    TRANSITIONS: Dict[str, Set[str]] = {
        PENDING: {APPROVED, REJECTED},
        APPROVED: {COMPLETED},
    }


class TicketStateMachine(StatusStateMachine):
    """
    open -> in_progress -> resolved -> closed.

    Resolving straight from open is allowed (a technician may fix something
    before it was assigned), and a resolved ticket can be reopened.
    """

    LABEL = 'ticket'

    OPEN = 'open'
    IN_PROGRESS = 'in_progress'
    RESOLVED = 'resolved'
    CLOSED = 'closed'

    INITIAL = OPEN
    TERMINAL_STATES = {CLOSED}

    TRANSITIONS: Dict[str, Set[str]] = {
        OPEN: {IN_PROGRESS, RESOLVED, CLOSED},
        IN_PROGRESS: {OPEN, RESOLVED, CLOSED},
        RESOLVED: {IN_PROGRESS, CLOSED},
    }


class StockOpnameStateMachine(StatusStateMachine):
    """draft -> in_progress -> completed; draft and in_progress can be cancelled"""

    LABEL = 'stock opname'

    DRAFT = 'draft'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    INITIAL = DRAFT
    TERMINAL_STATES = {COMPLETED, CANCELLED}

    TRANSITIONS: Dict[str, Set[str]] = {
        DRAFT: {IN_PROGRESS, CANCELLED},
        IN_PROGRESS: {COMPLETED, CANCELLED},
    }
