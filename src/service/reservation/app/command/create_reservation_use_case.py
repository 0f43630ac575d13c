from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.clock.utc_clock import Clock
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import CustomBaseError, DomainError, ErrorCode, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.reservation.domain.entity.order_entity import Order, validate_quantity
from src.service.reservation.domain.reservation_policy import ReservationPolicy
from src.service.shared_kernel.domain.value_object.wallet_address import (
    normalize_wallet_address,
)


class CreateReservationUseCase:
    """
    Hold tickets for a buyer: debit the inventory ledger and open a pending order.

    Flow (one unit of work):
    1. Validate quantity against the per-order limit (no I/O)
    2. Load the ticket type; it must belong to the event, be active and on sale
    3. Ledger reserve (atomic check-and-decrement)
    4. Per-buyer limit over pending + confirmed orders
    5. Insert the pending order with expires_at = now + hold duration
    Any failure rolls the whole unit back, including the debit.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        policy: ReservationPolicy,
        clock: Clock,
    ) -> None:
        self.uow_factory = uow_factory
        self.policy = policy
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        policy: ReservationPolicy = Depends(Provide[Container.reservation_policy]),
        clock: Clock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(uow_factory=uow_factory, policy=policy, clock=clock)

    @Logger.io
    async def create_reservation(
        self,
        *,
        event_id: str,
        ticket_type_id: UUID,
        quantity: int,
        buyer_address: str,
    ) -> Order:
        with self.tracer.start_as_current_span(
            'use_case.create_reservation',
            attributes={
                'ticket_type.id': str(ticket_type_id),
                'order.quantity': quantity,
            },
        ):
            try:
                order = await self._create(
                    event_id=event_id,
                    ticket_type_id=ticket_type_id,
                    quantity=quantity,
                    buyer_address=buyer_address,
                )
            except CustomBaseError as e:
                metrics.record_reservation(result=e.code)
                raise

            metrics.record_reservation(result='created', quantity=order.quantity)
            Logger.base.info(
                f'🎫 [RESERVE] order {order.id} holds {order.quantity} x {ticket_type_id} '
                f'until {order.expires_at.isoformat()}'
            )
            return order

    async def _create(
        self,
        *,
        event_id: str,
        ticket_type_id: UUID,
        quantity: int,
        buyer_address: str,
    ) -> Order:
        validate_quantity(quantity=quantity, max_quantity=self.policy.max_tickets_per_order)
        buyer = normalize_wallet_address(buyer_address, field='buyer_address')
        now = self.clock()

        async with self.uow_factory() as uow:
            ticket_type = await uow.inventory_ledger.get_by_id(ticket_type_id=ticket_type_id)
            if ticket_type is None or ticket_type.event_id != event_id:
                raise NotFoundError(
                    'Ticket type not found for this event', ErrorCode.TICKET_TYPE_NOT_FOUND
                )
            ticket_type.ensure_on_sale(now)

            await uow.inventory_ledger.reserve(ticket_type_id=ticket_type_id, quantity=quantity)

            # Read after the debit: the ledger row lock serializes holds on this ticket type
            already_held = await uow.order_command_repo.sum_active_quantity_for_buyer(
                buyer_address=buyer, ticket_type_id=ticket_type_id
            )
            if already_held + quantity > self.policy.max_tickets_per_buyer:
                raise DomainError(
                    f'Buyer limit of {self.policy.max_tickets_per_buyer} tickets '
                    f'per ticket type exceeded',
                    code=ErrorCode.BUYER_LIMIT_EXCEEDED,
                )

            order = Order.create(
                event_id=event_id,
                ticket_type_id=ticket_type_id,
                buyer_address=buyer,
                quantity=quantity,
                unit_price_minor=ticket_type.unit_price_minor,
                max_quantity=self.policy.max_tickets_per_order,
                hold_duration=self.policy.hold_duration,
                now=now,
            )
            await uow.order_command_repo.create(order=order)
            await uow.commit()
            return order
