from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.clock.utc_clock import Clock
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    ConflictError,
    ErrorCode,
    ForbiddenError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.command.order_transition import apply_order_transition
from src.service.reservation.domain.entity.order_entity import Order
from src.service.reservation.domain.enum.order_status import OrderEvent
from src.service.shared_kernel.domain.value_object.wallet_address import (
    normalize_wallet_address,
)


class CancelReservationUseCase:
    """Buyer-initiated cancel of a pending order; credits the ledger back."""

    def __init__(self, *, uow_factory: UnitOfWorkFactory, clock: Clock) -> None:
        self.uow_factory = uow_factory
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        clock: Clock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(uow_factory=uow_factory, clock=clock)

    @Logger.io
    async def cancel_reservation(self, *, order_id: UUID, requester_address: str) -> Order:
        requester = normalize_wallet_address(requester_address, field='requester_address')

        with self.tracer.start_as_current_span(
            'use_case.cancel_reservation', attributes={'order.id': str(order_id)}
        ):
            now = self.clock()
            async with self.uow_factory() as uow:
                order = await uow.order_command_repo.get_by_id(order_id=order_id)
                if order is None:
                    raise NotFoundError('Order not found', ErrorCode.ORDER_NOT_FOUND)
                if not order.is_owned_by(requester):
                    raise ForbiddenError('Only the buyer can cancel this reservation')

                cancelled = await apply_order_transition(
                    uow=uow, order=order, event=OrderEvent.BUYER_CANCEL, now=now
                )
                if cancelled is None:
                    raise ConflictError(
                        'Order was finalized concurrently', ErrorCode.ALREADY_TERMINAL
                    )
                await uow.commit()

            Logger.base.info(f'↩️ [CANCEL] order {order_id} cancelled by buyer')
            return cancelled
