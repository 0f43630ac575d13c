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
from src.service.reservation.domain.entity.order_entity import Order


@attrs.define(frozen=True)
class ReservationView:
    order: Order
    time_left_seconds: int


class GetReservationUseCase:
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
    async def get_reservation(self, *, order_id: UUID) -> ReservationView:
        async with self.uow_factory() as uow:
            order = await uow.order_query_repo.get_by_id(order_id=order_id)
        if order is None:
            raise NotFoundError('Order not found', ErrorCode.ORDER_NOT_FOUND)
        return ReservationView(order=order, time_left_seconds=order.time_left_seconds(self.clock()))
