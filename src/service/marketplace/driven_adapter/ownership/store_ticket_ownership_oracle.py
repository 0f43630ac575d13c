from typing import Optional

from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_ticket_ownership_oracle import (
    ITicketOwnershipOracle,
)
from src.service.marketplace.domain.entity.ticket_ownership_entity import TicketOwnership


class StoreTicketOwnershipOracle(ITicketOwnershipOracle):
    """Reads the local ownership registry kept up to date by mints and sales."""

    def __init__(self, *, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory

    @Logger.io
    async def get_owner(self, *, ticket_id: str) -> Optional[TicketOwnership]:
        async with self.uow_factory() as uow:
            return await uow.ticket_ownership_repo.get(ticket_id=ticket_id)
