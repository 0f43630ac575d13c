from datetime import datetime
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.clock.utc_clock import Clock, ensure_utc
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.service.inventory.domain.entity.ticket_type_entity import TicketType


class CreateTicketTypeUseCase:
    def __init__(self, *, uow_factory: UnitOfWorkFactory, clock: Clock) -> None:
        self.uow_factory = uow_factory
        self.clock = clock

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        clock: Clock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(uow_factory=uow_factory, clock=clock)

    @Logger.io
    async def create_ticket_type(
        self,
        *,
        event_id: str,
        name: str,
        unit_price_minor: int,
        total_supply: int,
        sale_start_at: Optional[datetime] = None,
        sale_end_at: Optional[datetime] = None,
        is_active: bool = True,
    ) -> TicketType:
        ticket_type = TicketType.create(
            event_id=event_id,
            name=name,
            unit_price_minor=unit_price_minor,
            total_supply=total_supply,
            sale_start_at=ensure_utc(sale_start_at),
            sale_end_at=ensure_utc(sale_end_at),
            is_active=is_active,
            now=self.clock(),
        )
        async with self.uow_factory() as uow:
            await uow.inventory_ledger.create(ticket_type=ticket_type)
            await uow.commit()

        Logger.base.info(
            f'🎟️ [INVENTORY] ticket type {ticket_type.id} ({name}) '
            f'with {total_supply} ticket(s) for event {event_id}'
        )
        return ticket_type
