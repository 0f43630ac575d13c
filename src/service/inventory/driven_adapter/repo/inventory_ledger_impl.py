"""
Inventory Ledger (SQLAlchemy)

Both primitives are one conditional UPDATE ... RETURNING. The UPDATE takes the
row lock, so concurrent reservations on the same ticket type serialize in the
database and the WHERE clause is re-evaluated against the committed value.
"""

from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func
from uuid_utils import UUID

from src.platform.clock.utc_clock import ensure_utc
from src.platform.exception.exceptions import (
    ConflictError,
    DomainError,
    ErrorCode,
    InvariantViolationError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import from_std_uuid, to_std_uuid
from src.service.inventory.app.interface.i_inventory_ledger import IInventoryLedger
from src.service.inventory.domain.entity.ticket_type_entity import TicketType
from src.service.inventory.driven_adapter.model.ticket_type_model import TicketTypeModel


_COLUMNS = tuple(TicketTypeModel.__table__.c)


class InventoryLedgerImpl(IInventoryLedger):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_entity(row: Any) -> TicketType:
        return TicketType(
            id=from_std_uuid(row.id),
            event_id=row.event_id,
            name=row.name,
            unit_price_minor=row.unit_price_minor,
            total_supply=row.total_supply,
            available_supply=row.available_supply,
            sale_start_at=ensure_utc(row.sale_start_at),
            sale_end_at=ensure_utc(row.sale_end_at),
            is_active=row.is_active,
            created_at=ensure_utc(row.created_at),
            updated_at=ensure_utc(row.updated_at),
        )

    @Logger.io
    async def create(self, *, ticket_type: TicketType) -> TicketType:
        self.session.add(
            TicketTypeModel(
                id=to_std_uuid(ticket_type.id),
                event_id=ticket_type.event_id,
                name=ticket_type.name,
                unit_price_minor=ticket_type.unit_price_minor,
                total_supply=ticket_type.total_supply,
                available_supply=ticket_type.available_supply,
                sale_start_at=ticket_type.sale_start_at,
                sale_end_at=ticket_type.sale_end_at,
                is_active=ticket_type.is_active,
                created_at=ticket_type.created_at,
                updated_at=ticket_type.updated_at,
            )
        )
        await self.session.flush()
        return ticket_type

    @Logger.io
    async def get_by_id(self, *, ticket_type_id: UUID) -> Optional[TicketType]:
        result = await self.session.execute(
            select(*_COLUMNS).where(TicketTypeModel.id == to_std_uuid(ticket_type_id))
        )
        row = result.first()
        return self._to_entity(row) if row else None

    @Logger.io
    async def reserve(self, *, ticket_type_id: UUID, quantity: int) -> TicketType:
        if quantity <= 0:
            raise DomainError('quantity must be positive', code=ErrorCode.INVALID_QUANTITY)

        result = await self.session.execute(
            update(TicketTypeModel)
            .where(
                TicketTypeModel.id == to_std_uuid(ticket_type_id),
                TicketTypeModel.available_supply >= quantity,
            )
            .values(
                available_supply=TicketTypeModel.available_supply - quantity,
                updated_at=func.now(),
            )
            .returning(*_COLUMNS)
            .execution_options(synchronize_session=False)
        )
        row = result.first()
        if row:
            return self._to_entity(row)

        if await self.get_by_id(ticket_type_id=ticket_type_id) is None:
            raise NotFoundError('Ticket type not found', ErrorCode.TICKET_TYPE_NOT_FOUND)
        raise ConflictError(
            f'Insufficient inventory for {quantity} ticket(s)', ErrorCode.INSUFFICIENT_INVENTORY
        )

    @Logger.io
    async def release(self, *, ticket_type_id: UUID, quantity: int) -> TicketType:
        if quantity <= 0:
            raise DomainError('quantity must be positive', code=ErrorCode.INVALID_QUANTITY)

        result = await self.session.execute(
            update(TicketTypeModel)
            .where(
                TicketTypeModel.id == to_std_uuid(ticket_type_id),
                TicketTypeModel.available_supply + quantity <= TicketTypeModel.total_supply,
            )
            .values(
                available_supply=TicketTypeModel.available_supply + quantity,
                updated_at=func.now(),
            )
            .returning(*_COLUMNS)
            .execution_options(synchronize_session=False)
        )
        row = result.first()
        if row:
            return self._to_entity(row)

        current = await self.get_by_id(ticket_type_id=ticket_type_id)
        if current is None:
            raise NotFoundError('Ticket type not found', ErrorCode.TICKET_TYPE_NOT_FOUND)
        Logger.base.error(
            f'💥 [LEDGER] release of {quantity} would exceed total_supply '
            f'({current.available_supply}/{current.total_supply}) on {ticket_type_id}'
        )
        raise InvariantViolationError(
            f'release({quantity}) would push available_supply past total_supply '
            f'for ticket type {ticket_type_id}'
        )
