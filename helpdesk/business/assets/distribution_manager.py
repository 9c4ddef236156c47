from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError

from helpdesk import db
from helpdesk.business.core.action_result import ActionResult, action
from helpdesk.business.core.errors import HelpdeskError, StatusError, ValidationError
from helpdesk.business.core.file_storage import get_file_store
from helpdesk.business.core.records import assign_document_number, get_optional, get_or_raise
from helpdesk.business.core.state_machine import DistributionStateMachine
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_distribution import AssetDistribution, AssetDistributionItem
from helpdesk.data.core.location import Location
from helpdesk.data.core.user_info.user import User
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.assets.distribution_manager")

SBBK_DOCUMENT_TYPE = 'SBBK'


@dataclass(frozen=True)
class DistributionLine:
    asset_id: int
    condition: str = 'Baru'


class DistributionManager:
    """
    Asset handovers to a location and receiver (SBBK documents).

    A distribution is created as a draft with its asset lines, confirmed with
    the receiver's signature, and only then are the assets moved. The SBBK
    number is assigned the first time the document is printed.
    """

    def __init__(self, actor_id: int | None):
        self.actor_id = actor_id

    def _add_lines(self, distribution: AssetDistribution, lines: Sequence[DistributionLine]) -> None:
        for line in lines:
            asset = get_or_raise(Asset, line.asset_id, 'Asset')
            db.session.add(AssetDistributionItem(
                distribution_id=distribution.id,
                asset_id=asset.id,
                condition=line.condition,
            ))
        db.session.commit()

    @action("create_distribution")
    def create_distribution(self, destination_location_id: int, receiver_id: int | None,
                            lines: Sequence[DistributionLine], notes: str | None = None) -> AssetDistribution:
        if not lines:
            raise ValidationError("Select at least one asset")
        for line in lines:
            if line.condition not in AssetDistributionItem.CONDITIONS:
                raise ValidationError(f"Unknown asset condition: {line.condition}")
        destination = get_or_raise(Location, destination_location_id, 'Destination location')
        receiver = get_optional(User, receiver_id, 'Receiver')

        distribution = AssetDistribution(
            destination_location_id=destination.id,
            receiver_id=receiver.id if receiver else None,
            notes=notes or None,
            status=DistributionStateMachine.DRAFT,
            created_by_id=self.actor_id,
            updated_by_id=self.actor_id,
        )
        db.session.add(distribution)
        db.session.commit()

        try:
            self._add_lines(distribution, lines)
        except (HelpdeskError, SQLAlchemyError):
            # Lines failed: remove the header again so no empty draft is left behind
            db.session.rollback()
            db.session.delete(distribution)
            db.session.commit()
            logger.warning(f"Distribution {distribution.id} removed after its items failed to save")
            raise

        logger.info(f"Created distribution {distribution.id} with {len(lines)} assets by user {self.actor_id}")
        return distribution

    @action("upload_distribution_signature")
    def upload_distribution_signature(self, distribution_id: int, upload) -> ActionResult:
        distribution = get_or_raise(AssetDistribution, distribution_id, 'Distribution')
        url = get_file_store().save_upload(upload, 'signatures')
        return ActionResult.ok(id=distribution.id, url=url)

    @action("confirm_distribution")
    def confirm_distribution(self, distribution_id: int, signature_url: str) -> AssetDistribution:
        distribution = get_or_raise(AssetDistribution, distribution_id, 'Distribution')
        DistributionStateMachine.validate_transition(distribution.status, DistributionStateMachine.COMPLETED)
        if not signature_url:
            raise ValidationError("Receiver signature is required")

        now = datetime.utcnow()
        distribution.status = DistributionStateMachine.COMPLETED
        distribution.distributed_by_id = self.actor_id
        distribution.distributed_at = now
        distribution.received_at = now
        distribution.receiver_signature_url = signature_url
        distribution.updated_by_id = self.actor_id

        for line in distribution.items:
            line.asset.location_id = distribution.destination_location_id
            line.asset.assigned_to_id = distribution.receiver_id
            line.asset.updated_by_id = self.actor_id
        db.session.commit()

        logger.info(f"Distribution {distribution.id} completed, {len(distribution.items)} assets moved "
                    f"to location {distribution.destination_location_id}")
        return distribution

    @action("delete_distribution")
    def delete_distribution(self, distribution_id: int) -> ActionResult:
        distribution = get_or_raise(AssetDistribution, distribution_id, 'Distribution')
        if distribution.status == DistributionStateMachine.COMPLETED:
            raise StatusError("Cannot delete a completed distribution")

        signature_url = distribution.receiver_signature_url
        db.session.delete(distribution)
        db.session.commit()
        if signature_url:
            get_file_store().delete(signature_url)

        logger.info(f"Deleted distribution {distribution_id} by user {self.actor_id}")
        return ActionResult.ok(id=distribution_id)

    @action("generate_distribution_document_number")
    def generate_document_number_for_print(self, distribution_id: int) -> ActionResult:
        distribution = get_or_raise(AssetDistribution, distribution_id, 'Distribution')
        number = assign_document_number(distribution, SBBK_DOCUMENT_TYPE)
        db.session.commit()
        return ActionResult.ok(id=distribution.id, document_number=number)
