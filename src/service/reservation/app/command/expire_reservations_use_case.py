import time
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
    CustomBaseError,
    ErrorCode,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.reservation.app.command.order_transition import apply_order_transition
from src.service.reservation.domain.entity.order_entity import Order
from src.service.reservation.domain.enum.order_status import OrderEvent, OrderStatus


class ExpireReservationsUseCase:
    """
    Hold-timeout transitions.

    Each overdue order moves pending -> expired in its own unit of work with a
    compare-and-set on (status = pending AND expires_at < now). Inventory is
    released only by the call that won, so repeated or concurrent sweeps
    release each hold exactly once.
    """

    def __init__(self, *, uow_factory: UnitOfWorkFactory, clock: Clock, batch_size: int) -> None:
        self.uow_factory = uow_factory
        self.clock = clock
        self.batch_size = batch_size
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        clock: Clock = Depends(Provide[Container.clock]),
        batch_size: int = Depends(Provide[Container.config_service.provided.SWEEP_BATCH_SIZE]),
    ) -> Self:
        return cls(uow_factory=uow_factory, clock=clock, batch_size=batch_size)

    async def expire_overdue(self) -> int:
        """Run one sweep tick. Returns how many orders this call expired."""
        started = time.perf_counter()
        with self.tracer.start_as_current_span('use_case.expire_overdue_reservations') as span:
            now = self.clock()
            async with self.uow_factory() as uow:
                overdue_ids = await uow.order_command_repo.list_overdue_ids(
                    now=now, limit=self.batch_size
                )

            expired = 0
            for order_id in overdue_ids:
                try:
                    if await self._expire_one(order_id=order_id) is not None:
                        expired += 1
                except CustomBaseError as e:
                    Logger.base.warning(f'⚠️ [SWEEP] order {order_id} skipped: {e.message}')

            span.set_attribute('sweep.expired', expired)
            metrics.record_sweep(
                entity='order',
                result='ok',
                expired=expired,
                duration=time.perf_counter() - started,
            )
            if expired:
                Logger.base.info(f'🧹 [SWEEP] expired {expired} reservation(s)')
            return expired

    @Logger.io
    async def expire_reservation(self, *, order_id: UUID) -> Order:
        """Expire one order on demand; it must be pending and past its deadline."""
        async with self.uow_factory() as uow:
            order = await uow.order_command_repo.get_by_id(order_id=order_id)
        if order is None:
            raise NotFoundError('Order not found', ErrorCode.ORDER_NOT_FOUND)
        if order.status.is_terminal:
            raise ConflictError(f'Order is already {order.status}', ErrorCode.ALREADY_TERMINAL)
        if not order.is_overdue(self.clock()):
            raise ConflictError('Hold has not elapsed yet', ErrorCode.INVALID_TRANSITION)

        expired = await self._expire_one(order_id=order_id)
        if expired is None:
            raise ConflictError('Order was finalized concurrently', ErrorCode.ALREADY_TERMINAL)
        return expired

    async def _expire_one(self, *, order_id: UUID) -> Order | None:
        now = self.clock()
        async with self.uow_factory() as uow:
            order = await uow.order_command_repo.get_by_id(order_id=order_id)
            if order is None or order.status is not OrderStatus.PENDING:
                return None

            expired = await apply_order_transition(
                uow=uow,
                order=order,
                event=OrderEvent.HOLD_TIMEOUT,
                now=now,
                hold_elapsed_at=now,
            )
            await uow.commit()
            return expired
