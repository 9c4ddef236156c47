"""
BorrowingManager - asset borrowing requests and their lifecycle

pending -> approved/rejected, approved -> borrowed -> returned

Only one active (pending, approved or borrowed) borrowing may exist per
asset. The check is a read before the insert; two requests racing for the
same asset can both pass it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from helpdesk import db
from helpdesk.business.core.action_result import ActionResult, action
from helpdesk.business.core.errors import ConflictError, StatusError, ValidationError
from helpdesk.business.core.records import get_or_raise
from helpdesk.business.core.state_machine import BorrowingStateMachine
from helpdesk.business.notifications.notifier import get_notifier
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_borrowing import AssetBorrowing
from helpdesk.data.core.location import Location
from helpdesk.data.core.user_info.user import User
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.assets.borrowing_manager")


@dataclass(frozen=True)
class BorrowingInput:
    asset_id: int
    borrower_location_id: int | None
    borrow_date: date
    purpose: str
    borrower_user_id: int | None = None
    expected_return_date: date | None = None
    notes: str | None = None


def has_active_borrowing(asset_id: int) -> bool:
    return db.session.query(AssetBorrowing.id).filter(
        AssetBorrowing.asset_id == asset_id,
        AssetBorrowing.status.in_(BorrowingStateMachine.ACTIVE_STATES),
    ).first() is not None


class BorrowingManager:

    def __init__(self, actor_id: int | None):
        self.actor_id = actor_id

    def _get(self, borrowing_id: int) -> AssetBorrowing:
        return get_or_raise(AssetBorrowing, borrowing_id, 'Borrowing')

    def _transition(self, borrowing: AssetBorrowing, to_status: str) -> None:
        BorrowingStateMachine.validate_transition(borrowing.status, to_status)
        borrowing.status = to_status
        borrowing.updated_by_id = self.actor_id

    @action("create_borrowing_request")
    def create_borrowing_request(self, data: BorrowingInput, notify_staff: bool = False) -> AssetBorrowing:
        """
        Open a pending borrowing for an asset.

        The borrower defaults to the acting user. With notify_staff, admins and
        IT staff get a WhatsApp message about the new request.
        """
        asset = get_or_raise(Asset, data.asset_id, 'Asset')
        if not asset.is_borrowable:
            raise ValidationError(f"Asset {asset.name} cannot be borrowed")
        if has_active_borrowing(asset.id):
            raise ConflictError(f"Asset {asset.name} is currently borrowed and has not been returned")
        if not (data.purpose or '').strip():
            raise ValidationError("Purpose is required")
        if data.expected_return_date and data.expected_return_date < data.borrow_date:
            raise ValidationError("Expected return date cannot be before the borrow date")
        if data.borrower_location_id is not None:
            get_or_raise(Location, data.borrower_location_id, 'Borrower location')

        borrower = get_or_raise(User, data.borrower_user_id or self.actor_id, 'Borrower')

        borrowing = AssetBorrowing(
            asset_id=asset.id,
            borrower_user_id=borrower.id,
            borrower_location_id=data.borrower_location_id,
            original_location_id=asset.location_id,
            borrow_date=data.borrow_date,
            expected_return_date=data.expected_return_date,
            purpose=data.purpose.strip(),
            notes=data.notes or None,
            status=BorrowingStateMachine.PENDING,
            created_by_id=self.actor_id,
            updated_by_id=self.actor_id,
        )
        db.session.add(borrowing)
        db.session.commit()

        logger.info(f"Borrowing {borrowing.id} requested for asset {asset.asset_code} by user {borrower.id}")

        if notify_staff:
            staff = User.query.filter(
                User.role.in_(User.TECHNICIAN_ROLES),
                User.is_active.is_(True),
                User.whatsapp_phone.isnot(None),
            ).all()
            get_notifier().borrowing_requested(borrowing, staff)
        return borrowing

    @action("approve_borrowing")
    def approve_borrowing(self, borrowing_id: int) -> AssetBorrowing:
        borrowing = self._get(borrowing_id)
        self._transition(borrowing, BorrowingStateMachine.APPROVED)
        borrowing.approved_by_id = self.actor_id
        borrowing.approved_at = datetime.utcnow()
        db.session.commit()

        logger.info(f"Borrowing {borrowing.id} approved by user {self.actor_id}")
        get_notifier().borrowing_approved(borrowing)
        return borrowing

    @action("reject_borrowing")
    def reject_borrowing(self, borrowing_id: int, reason: str | None = None) -> AssetBorrowing:
        borrowing = self._get(borrowing_id)
        self._transition(borrowing, BorrowingStateMachine.REJECTED)
        borrowing.approved_by_id = self.actor_id
        borrowing.approved_at = datetime.utcnow()
        borrowing.notes = reason or None
        db.session.commit()

        logger.info(f"Borrowing {borrowing.id} rejected by user {self.actor_id}")
        get_notifier().borrowing_rejected(borrowing, reason)
        return borrowing

    @action("confirm_borrowed")
    def confirm_borrowed(self, borrowing_id: int) -> AssetBorrowing:
        """The asset was picked up; it now sits at the borrower's location"""
        borrowing = self._get(borrowing_id)
        self._transition(borrowing, BorrowingStateMachine.BORROWED)
        if borrowing.borrower_location_id is not None:
            borrowing.asset.location_id = borrowing.borrower_location_id
            borrowing.asset.updated_by_id = self.actor_id
        db.session.commit()

        logger.info(f"Borrowing {borrowing.id}: asset {borrowing.asset_id} handed over")
        return borrowing

    @action("return_asset")
    def return_asset(self, borrowing_id: int) -> AssetBorrowing:
        """The asset came back; it returns to the location it was borrowed from"""
        borrowing = self._get(borrowing_id)
        self._transition(borrowing, BorrowingStateMachine.RETURNED)
        now = datetime.utcnow()
        borrowing.actual_return_date = now.date()
        borrowing.returned_by_id = self.actor_id
        borrowing.returned_at = now
        borrowing.asset.location_id = borrowing.original_location_id
        borrowing.asset.updated_by_id = self.actor_id
        db.session.commit()

        logger.info(f"Borrowing {borrowing.id}: asset {borrowing.asset_id} returned")
        return borrowing

    @action("delete_borrowing")
    def delete_borrowing(self, borrowing_id: int) -> ActionResult:
        borrowing = self._get(borrowing_id)
        if not BorrowingStateMachine.is_initial(borrowing.status):
            raise StatusError("Only pending borrowings can be deleted")

        db.session.delete(borrowing)
        db.session.commit()

        logger.info(f"Deleted borrowing {borrowing_id} by user {self.actor_id}")
        return ActionResult.ok(id=borrowing_id)
