from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.clock.utc_clock import Clock
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, UnitOfWorkFactory
from src.platform.exception.exceptions import (
    ConflictError,
    DomainError,
    ErrorCode,
    GoneError,
    NotFoundError,
    PaymentRejectedError,
)
from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.command.order_transition import apply_order_transition
from src.service.shared_kernel.app.interface.i_payment_verifier import IPaymentVerifier
from src.service.reservation.domain.entity.order_entity import Order
from src.service.reservation.domain.enum.order_status import OrderEvent, OrderStatus
from src.service.reservation.domain.order_state_machine import resolve_transition


class ConfirmReservationUseCase:
    """
    Turn a pending hold into a confirmed purchase using a payment proof.

    Flow:
    1. Load the order; absent -> NotFound, terminal -> AlreadyTerminal
    2. Overdue -> expire it (releasing inventory) and answer Expired
    3. Verify the proof with the payment collaborator, outside any transaction.
       Upstream failure leaves the order pending.
    4. Rejected -> failed + release; accepted -> confirmed, guarded by the
       compare-and-set on status and deadline
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        payment_verifier: IPaymentVerifier,
        clock: Clock,
    ) -> None:
        self.uow_factory = uow_factory
        self.payment_verifier = payment_verifier
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        payment_verifier: IPaymentVerifier = Depends(Provide[Container.payment_verifier]),
        clock: Clock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(uow_factory=uow_factory, payment_verifier=payment_verifier, clock=clock)

    @Logger.io
    async def confirm_reservation(self, *, order_id: UUID, payment_signature: str) -> Order:
        proof = (payment_signature or '').strip()
        if not proof:
            raise DomainError(
                'payment_signature is required', code=ErrorCode.INVALID_PAYMENT_PROOF
            )

        with self.tracer.start_as_current_span(
            'use_case.confirm_reservation', attributes={'order.id': str(order_id)}
        ):
            order = await self._load_pending_or_expire(order_id=order_id)

            accepted = await self.payment_verifier.verify(
                proof=proof, amount_minor=order.total_price_minor, reference=str(order.id)
            )

            if not accepted:
                await self._fail(order=order)
                raise PaymentRejectedError('Payment proof was rejected')

            return await self._confirm(order=order, proof=proof)

    async def _load_pending_or_expire(self, *, order_id: UUID) -> Order:
        now = self.clock()
        async with self.uow_factory() as uow:
            order = await uow.order_command_repo.get_by_id(order_id=order_id)
            if order is None:
                raise NotFoundError('Order not found', ErrorCode.ORDER_NOT_FOUND)

            # Raises AlreadyTerminal for anything but pending
            resolve_transition(current=order.status, event=OrderEvent.PAYMENT_CONFIRMED)

            if order.is_overdue(now):
                expired = await apply_order_transition(
                    uow=uow,
                    order=order,
                    event=OrderEvent.HOLD_TIMEOUT,
                    now=now,
                    hold_elapsed_at=now,
                )
                await uow.commit()
                if expired is not None:
                    Logger.base.info(f'⌛ [CONFIRM] order {order_id} expired before payment')
                raise GoneError('Reservation has expired', ErrorCode.RESERVATION_EXPIRED)

            return order

    async def _fail(self, *, order: Order) -> None:
        now = self.clock()
        async with self.uow_factory() as uow:
            failed = await apply_order_transition(
                uow=uow, order=order, event=OrderEvent.PAYMENT_REJECTED, now=now
            )
            if failed is None:
                await self._raise_lost_race(uow=uow, order_id=order.id)
            await uow.commit()
        Logger.base.warning(f'🚫 [CONFIRM] payment rejected for order {order.id}')

    async def _confirm(self, *, order: Order, proof: str) -> Order:
        now = self.clock()
        async with self.uow_factory() as uow:
            confirmed = await apply_order_transition(
                uow=uow,
                order=order,
                event=OrderEvent.PAYMENT_CONFIRMED,
                now=now,
                payment_signature=proof,
                hold_active_at=now,
            )
            if confirmed is None:
                await self._raise_lost_race(uow=uow, order_id=order.id)
            await uow.commit()

        Logger.base.info(f'✅ [CONFIRM] order {order.id} confirmed')
        return confirmed  # type: ignore[return-value]

    async def _raise_lost_race(self, *, uow: AbstractUnitOfWork, order_id: UUID) -> None:
        """The compare-and-set missed: report whatever state won."""
        current = await uow.order_command_repo.get_by_id(order_id=order_id)
        now = self.clock()
        if current is not None and current.is_overdue(now):
            await apply_order_transition(
                uow=uow,
                order=current,
                event=OrderEvent.HOLD_TIMEOUT,
                now=now,
                hold_elapsed_at=now,
            )
            await uow.commit()
            raise GoneError('Reservation has expired', ErrorCode.RESERVATION_EXPIRED)
        if current is not None and current.status is OrderStatus.EXPIRED:
            raise GoneError('Reservation has expired', ErrorCode.RESERVATION_EXPIRED)
        status = current.status if current is not None else 'unknown'
        raise ConflictError(f'Order is already {status}', ErrorCode.ALREADY_TERMINAL)
