"""
TicketManager - helpdesk tickets from creation to resolution

Resolving a ticket records the spareparts used (taken out of stock, floored
at zero) and, when an asset is involved, writes a maintenance record for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Sequence

from helpdesk import db
from helpdesk.business.atk.stock_manager import StockManager
from helpdesk.business.core.action_result import ActionResult, action
from helpdesk.business.core.errors import ValidationError
from helpdesk.business.core.records import get_optional, get_or_raise
from helpdesk.business.core.state_machine import TicketStateMachine
from helpdesk.business.notifications.notifier import get_notifier
from helpdesk.business.tickets.assignment import find_least_busy_technician
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_maintenance import AssetMaintenance
from helpdesk.data.atk.atk_item import AtkItem
from helpdesk.data.core.department import Department
from helpdesk.data.core.user_info.user import User
from helpdesk.data.tickets.ticket import Ticket, TicketPart
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.tickets.ticket_manager")


@dataclass(frozen=True)
class TicketInput:
    title: str
    category: str
    priority: str
    description: str | None = None
    department_id: int | None = None
    asset_id: int | None = None


@dataclass(frozen=True)
class PartLine:
    item_id: int
    quantity: int


def _validate_choice(value: str, choices: Sequence[str], label: str) -> str:
    if value not in choices:
        raise ValidationError(f"Unknown {label}: {value}")
    return value


class TicketManager:

    def __init__(self, actor_id: int | None):
        self.actor_id = actor_id

    @action("create_ticket")
    def create_ticket(self, data: TicketInput, auto_assign: bool = False) -> Ticket:
        """
        Open a ticket for the acting user.

        The department defaults to the creator's. With auto_assign the least
        busy technician gets the ticket, it starts in_progress and the
        technician is notified.
        """
        title = (data.title or '').strip()
        if not title:
            raise ValidationError("Title is required")
        _validate_choice(data.category, Ticket.CATEGORIES, 'category')
        _validate_choice(data.priority, Ticket.PRIORITIES, 'priority')

        creator = get_or_raise(User, self.actor_id, 'User')
        department = get_optional(Department, data.department_id, 'Department')
        asset = get_optional(Asset, data.asset_id, 'Asset')

        assignee = find_least_busy_technician() if auto_assign else None

        ticket = Ticket(
            title=title,
            description=data.description or None,
            category=data.category,
            priority=data.priority,
            status=TicketStateMachine.IN_PROGRESS if assignee else TicketStateMachine.OPEN,
            department_id=department.id if department else creator.department_id,
            asset_id=asset.id if asset else None,
            assigned_to_id=assignee.id if assignee else None,
            created_by_id=creator.id,
            updated_by_id=creator.id,
        )
        db.session.add(ticket)
        db.session.commit()

        logger.info(f"Created ticket {ticket.id} ({ticket.category}/{ticket.priority}) by user {creator.id}"
                    + (f", assigned to {assignee.id}" if assignee else ""))

        if assignee is not None:
            get_notifier().ticket_assigned(ticket, creator.display_name)
        return ticket

    @action("update_ticket")
    def update_ticket(self, ticket_id: int, changes: Dict[str, Any]) -> Ticket:
        """Apply only the fields present in changes; empty title/category/priority/status are ignored"""
        ticket = get_or_raise(Ticket, ticket_id, 'Ticket')

        if changes.get('title'):
            ticket.title = changes['title'].strip()
        if 'description' in changes:
            ticket.description = changes['description'] or None
        if changes.get('category'):
            ticket.category = _validate_choice(changes['category'], Ticket.CATEGORIES, 'category')
        if changes.get('priority'):
            ticket.priority = _validate_choice(changes['priority'], Ticket.PRIORITIES, 'priority')
        if changes.get('assigned_to_id'):
            ticket.assigned_to_id = get_or_raise(User, changes['assigned_to_id'], 'Assignee').id
        if 'asset_id' in changes:
            asset = get_optional(Asset, changes['asset_id'], 'Asset')
            ticket.asset_id = asset.id if asset else None
        if changes.get('status') and changes['status'] != ticket.status:
            TicketStateMachine.validate_transition(ticket.status, changes['status'])
            ticket.status = changes['status']

        ticket.updated_by_id = self.actor_id
        db.session.commit()
        return ticket

    @action("assign_ticket")
    def assign_ticket(self, ticket_id: int, assignee_id: int) -> Ticket:
        ticket = get_or_raise(Ticket, ticket_id, 'Ticket')
        assignee = get_or_raise(User, assignee_id, 'Assignee')
        # Reassigning a ticket that is already being worked on keeps its status
        if ticket.status != TicketStateMachine.IN_PROGRESS:
            TicketStateMachine.validate_transition(ticket.status, TicketStateMachine.IN_PROGRESS)

        ticket.assigned_to_id = assignee.id
        ticket.status = TicketStateMachine.IN_PROGRESS
        ticket.updated_by_id = self.actor_id
        db.session.commit()

        logger.info(f"Ticket {ticket.id} assigned to user {assignee.id} by user {self.actor_id}")
        get_notifier().ticket_assigned(ticket)
        return ticket

    @action("complete_ticket")
    def complete_ticket(self, ticket_id: int, resolution_notes: str | None = None,
                        repair_type: str | None = None, asset_id: int | None = None,
                        parts: Sequence[PartLine] = ()) -> Ticket:
        ticket = get_or_raise(Ticket, ticket_id, 'Ticket')
        TicketStateMachine.validate_transition(ticket.status, TicketStateMachine.RESOLVED)

        repair_type = repair_type or 'repair'
        if repair_type not in AssetMaintenance.TYPES:
            raise ValidationError(f"Unknown maintenance type: {repair_type}")
        for part in parts:
            get_or_raise(AtkItem, part.item_id, 'Part')
            if part.quantity <= 0:
                raise ValidationError("Part quantity must be greater than zero")

        now = datetime.utcnow()
        ticket.status = TicketStateMachine.RESOLVED
        ticket.resolution_notes = resolution_notes or None
        ticket.resolved_at = now
        ticket.resolved_by_id = self.actor_id
        ticket.updated_by_id = self.actor_id

        stock = StockManager(self.actor_id)
        for part in parts:
            ticket.parts.append(TicketPart(item_id=part.item_id, quantity=part.quantity))
            stock.issue(
                item_id=part.item_id,
                quantity=part.quantity,
                reference_id=ticket.id,
                notes=f"Ticket #{ticket.id}",
                floor_at_zero=True,
            )

        if ticket.asset_id is None and asset_id:
            ticket.asset_id = get_or_raise(Asset, asset_id, 'Asset').id

        if ticket.asset_id is not None:
            parts_note = (
                "Parts used: " + ", ".join(f"{part.quantity}x" for part in parts)
                if parts else None
            )
            db.session.add(AssetMaintenance(
                asset_id=ticket.asset_id,
                type=repair_type,
                description=f"Ticket resolution: {resolution_notes or 'Completed'}",
                notes=parts_note,
                cost=0,
                performed_by_id=self.actor_id,
                performed_at=now,
                created_by_id=self.actor_id,
                updated_by_id=self.actor_id,
            ))

        db.session.commit()
        logger.info(f"Ticket {ticket.id} resolved by user {self.actor_id} ({len(parts)} parts used)")
        return ticket

    @action("delete_ticket")
    def delete_ticket(self, ticket_id: int) -> ActionResult:
        ticket = get_or_raise(Ticket, ticket_id, 'Ticket')
        db.session.delete(ticket)
        db.session.commit()

        logger.info(f"Deleted ticket {ticket_id} by user {self.actor_id}")
        return ActionResult.ok(id=ticket_id)
