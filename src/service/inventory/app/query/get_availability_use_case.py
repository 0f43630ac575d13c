from typing import Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.clock.utc_clock import Clock
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import ErrorCode, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.reservation.domain.enum.order_status import OrderStatus


@attrs.define(frozen=True)
class Availability:
    event_id: str
    ticket_type_id: UUID
    available_supply: int
    total_supply: int
    reserved_supply: int
    sold_supply: int
    unit_price_minor: int
    is_available: bool


class GetAvailabilityUseCase:
    """
    Read-only snapshot of a ticket type's counters.

    reserved/sold are summed over pending/confirmed orders; available comes
    straight from the ledger and is the only number reservations act on.
    """

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
    async def get_availability(self, *, event_id: str, ticket_type_id: UUID) -> Availability:
        async with self.uow_factory() as uow:
            ticket_type = await uow.inventory_ledger.get_by_id(ticket_type_id=ticket_type_id)
            if ticket_type is None or ticket_type.event_id != event_id:
                raise NotFoundError(
                    'Ticket type not found for this event', ErrorCode.TICKET_TYPE_NOT_FOUND
                )
            quantities = await uow.order_query_repo.sum_quantity_by_status(
                ticket_type_id=ticket_type_id
            )

        now = self.clock()
        return Availability(
            event_id=event_id,
            ticket_type_id=ticket_type_id,
            available_supply=ticket_type.available_supply,
            total_supply=ticket_type.total_supply,
            reserved_supply=quantities[OrderStatus.PENDING],
            sold_supply=quantities[OrderStatus.CONFIRMED],
            unit_price_minor=ticket_type.unit_price_minor,
            is_available=(
                ticket_type.available_supply > 0
                and ticket_type.is_active
                and ticket_type.is_within_sale_window(now)
            ),
        )
