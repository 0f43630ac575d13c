from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.clock.utc_clock import ensure_utc
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_ticket_ownership_repo import ITicketOwnershipRepo
from src.service.marketplace.domain.entity.ticket_ownership_entity import TicketOwnership
from src.service.marketplace.driven_adapter.model.ticket_ownership_model import (
    TicketOwnershipModel,
)


_COLUMNS = tuple(TicketOwnershipModel.__table__.c)


def _to_entity(row: Any) -> TicketOwnership:
    return TicketOwnership(
        ticket_id=row.ticket_id,
        owner_address=row.owner_address,
        price_minor=row.price_minor,
        updated_at=ensure_utc(row.updated_at),
    )


class TicketOwnershipRepoImpl(ITicketOwnershipRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def get(self, *, ticket_id: str) -> Optional[TicketOwnership]:
        result = await self.session.execute(
            select(*_COLUMNS).where(TicketOwnershipModel.ticket_id == ticket_id)
        )
        row = result.first()
        return _to_entity(row) if row else None

    @Logger.io
    async def record(self, *, ownership: TicketOwnership) -> TicketOwnership:
        await self.session.merge(
            TicketOwnershipModel(
                ticket_id=ownership.ticket_id,
                owner_address=ownership.owner_address,
                price_minor=ownership.price_minor,
                updated_at=ownership.updated_at,
            )
        )
        await self.session.flush()
        return ownership

    @Logger.io
    async def transfer(self, *, from_address: str, ownership: TicketOwnership) -> bool:
        result = await self.session.execute(
            update(TicketOwnershipModel)
            .where(
                TicketOwnershipModel.ticket_id == ownership.ticket_id,
                TicketOwnershipModel.owner_address == from_address,
            )
            .values(
                owner_address=ownership.owner_address,
                price_minor=ownership.price_minor,
                updated_at=ownership.updated_at,
            )
            .returning(TicketOwnershipModel.ticket_id)
            .execution_options(synchronize_session=False)
        )
        if result.first() is not None:
            return True

        if await self.get(ticket_id=ownership.ticket_id) is not None:
            return False
        await self.record(ownership=ownership)
        return True
