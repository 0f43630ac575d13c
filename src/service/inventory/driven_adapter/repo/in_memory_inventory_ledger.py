from typing import Callable, Optional

import attrs
from uuid_utils import UUID

from src.platform.clock.utc_clock import utc_now
from src.platform.database.in_memory_store import InMemoryStore, UndoAction
from src.platform.exception.exceptions import (
    ConflictError,
    DomainError,
    ErrorCode,
    InvariantViolationError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.interface.i_inventory_ledger import IInventoryLedger
from src.service.inventory.domain.entity.ticket_type_entity import TicketType


class InMemoryInventoryLedger(IInventoryLedger):
    """Ledger over InMemoryStore; no await between the check and the write."""

    def __init__(
        self, *, store: InMemoryStore, record_undo: Callable[[UndoAction], None]
    ) -> None:
        self._store = store
        self._record_undo = record_undo

    def _get_or_raise(self, ticket_type_id: UUID) -> TicketType:
        ticket_type = self._store.ticket_types.get(ticket_type_id)
        if ticket_type is None:
            raise NotFoundError('Ticket type not found', ErrorCode.TICKET_TYPE_NOT_FOUND)
        return ticket_type

    def _apply_delta(self, ticket_type_id: UUID, delta: int) -> TicketType:
        current = self._store.ticket_types[ticket_type_id]
        updated = attrs.evolve(
            current, available_supply=current.available_supply + delta, updated_at=utc_now()
        )
        self._store.ticket_types[ticket_type_id] = updated
        return updated

    @Logger.io
    async def create(self, *, ticket_type: TicketType) -> TicketType:
        self._store.ticket_types[ticket_type.id] = ticket_type
        self._record_undo(lambda: self._store.ticket_types.pop(ticket_type.id, None))
        return ticket_type

    @Logger.io
    async def get_by_id(self, *, ticket_type_id: UUID) -> Optional[TicketType]:
        return self._store.ticket_types.get(ticket_type_id)

    @Logger.io
    async def reserve(self, *, ticket_type_id: UUID, quantity: int) -> TicketType:
        if quantity <= 0:
            raise DomainError('quantity must be positive', code=ErrorCode.INVALID_QUANTITY)

        current = self._get_or_raise(ticket_type_id)
        if current.available_supply < quantity:
            raise ConflictError(
                f'Insufficient inventory for {quantity} ticket(s)',
                ErrorCode.INSUFFICIENT_INVENTORY,
            )
        updated = self._apply_delta(ticket_type_id, -quantity)
        # Undo is a delta, never a snapshot restore
        self._record_undo(lambda: self._apply_delta(ticket_type_id, quantity))
        return updated

    @Logger.io
    async def release(self, *, ticket_type_id: UUID, quantity: int) -> TicketType:
        if quantity <= 0:
            raise DomainError('quantity must be positive', code=ErrorCode.INVALID_QUANTITY)

        current = self._get_or_raise(ticket_type_id)
        if current.available_supply + quantity > current.total_supply:
            Logger.base.error(
                f'💥 [LEDGER] release of {quantity} would exceed total_supply '
                f'({current.available_supply}/{current.total_supply}) on {ticket_type_id}'
            )
            raise InvariantViolationError(
                f'release({quantity}) would push available_supply past total_supply '
                f'for ticket type {ticket_type_id}'
            )
        updated = self._apply_delta(ticket_type_id, quantity)
        self._record_undo(lambda: self._apply_delta(ticket_type_id, -quantity))
        return updated
