"""
StockOpnameManager - physical stock counts

A session snapshots the recorded stock of every item, staff enter the
counted quantity per item, and completing the session sets each counted
item's stock to the physical count with a ledger row for the difference.
"""

from __future__ import annotations

from datetime import date, datetime

from helpdesk import db
from helpdesk.business.atk.stock_manager import StockManager
from helpdesk.business.core.action_result import ActionResult, action
from helpdesk.business.core.document_numbers import next_stock_opname_code
from helpdesk.business.core.errors import StatusError, ValidationError
from helpdesk.business.core.records import get_or_raise
from helpdesk.business.core.state_machine import StockOpnameStateMachine
from helpdesk.data.atk.atk_item import AtkItem
from helpdesk.data.atk.stock_opname import StockOpnameItem, StockOpnameSession
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.atk.stock_opname_manager")


def generate_session_code(today: date | None = None) -> str:
    today = today or date.today()
    existing = [
        code for (code,) in db.session.query(StockOpnameSession.session_code)
        .filter(StockOpnameSession.session_code.like(f"SO-{today.year}-%")).all()
    ]
    return next_stock_opname_code(existing, today)


class StockOpnameManager:

    def __init__(self, actor_id: int | None):
        self.actor_id = actor_id

    @action("create_stock_opname")
    def create_session(self, notes: str | None = None) -> StockOpnameSession:
        session = StockOpnameSession(
            session_code=generate_session_code(),
            status=StockOpnameStateMachine.DRAFT,
            notes=notes or None,
            created_by_id=self.actor_id,
            updated_by_id=self.actor_id,
        )
        session.items = [
            StockOpnameItem(item_id=item.id, system_quantity=item.stock_quantity or 0)
            for item in AtkItem.query.order_by(AtkItem.name.asc()).all()
        ]
        db.session.add(session)
        db.session.commit()

        logger.info(f"Opened stock opname {session.session_code} with {len(session.items)} items "
                    f"by user {self.actor_id}")
        return session

    @action("count_stock_opname_item")
    def record_count(self, opname_item_id: int, physical_quantity: int,
                     notes: str | None = None) -> StockOpnameItem:
        line = get_or_raise(StockOpnameItem, opname_item_id, 'Stock opname item')
        session = line.session
        if session.status in StockOpnameStateMachine.TERMINAL_STATES:
            raise StatusError(f"Stock opname {session.session_code} is already {session.status}")
        if physical_quantity is None or physical_quantity < 0:
            raise ValidationError("Physical quantity cannot be negative")

        line.physical_quantity = physical_quantity
        line.difference = physical_quantity - line.system_quantity
        line.notes = notes or None
        line.counted_by_id = self.actor_id
        line.counted_at = datetime.utcnow()

        if session.status == StockOpnameStateMachine.DRAFT:
            session.status = StockOpnameStateMachine.IN_PROGRESS
            session.updated_by_id = self.actor_id

        db.session.commit()
        return line

    @action("complete_stock_opname")
    def complete_session(self, session_id: int) -> StockOpnameSession:
        session = get_or_raise(StockOpnameSession, session_id, 'Stock opname')
        counted = [line for line in session.items if line.physical_quantity is not None]
        if not counted:
            raise ValidationError("No items have been counted")
        StockOpnameStateMachine.validate_transition(session.status, StockOpnameStateMachine.COMPLETED)

        stock = StockManager(self.actor_id)
        adjusted = 0
        for line in counted:
            if line.difference != 0:
                movement = stock.set_quantity(
                    item_id=line.item_id,
                    quantity=line.physical_quantity,
                    reference_id=session.id,
                    notes=f"Stock opname {session.session_code}",
                )
                if movement is not None:
                    adjusted += 1

        session.status = StockOpnameStateMachine.COMPLETED
        session.completed_by_id = self.actor_id
        session.completed_at = datetime.utcnow()
        session.updated_by_id = self.actor_id
        db.session.commit()

        logger.info(f"Completed stock opname {session.session_code}: {len(counted)} counted, "
                    f"{adjusted} adjusted by user {self.actor_id}")
        return session

    @action("cancel_stock_opname")
    def cancel_session(self, session_id: int) -> StockOpnameSession:
        session = get_or_raise(StockOpnameSession, session_id, 'Stock opname')
        StockOpnameStateMachine.validate_transition(session.status, StockOpnameStateMachine.CANCELLED)

        session.status = StockOpnameStateMachine.CANCELLED
        session.updated_by_id = self.actor_id
        db.session.commit()

        logger.info(f"Cancelled stock opname {session.session_code} by user {self.actor_id}")
        return session

    @action("delete_stock_opname")
    def delete_session(self, session_id: int) -> ActionResult:
        session = get_or_raise(StockOpnameSession, session_id, 'Stock opname')
        code = session.session_code

        db.session.delete(session)
        db.session.commit()

        logger.info(f"Deleted stock opname {code} by user {self.actor_id}")
        return ActionResult.ok(id=session_id)
