from datetime import datetime, timedelta
from typing import Optional

import attrs
from uuid_utils import UUID
import uuid_utils

from src.platform.exception.exceptions import DomainError, ErrorCode
from src.service.reservation.domain.enum.order_status import OrderEvent, OrderStatus
from src.service.reservation.domain.order_state_machine import (
    OrderTransition,
    resolve_transition,
)
from src.service.shared_kernel.domain.value_object.wallet_address import (
    normalize_wallet_address,
)


@attrs.define(frozen=True)
class Order:
    """
    A hold on `quantity` tickets of one ticket type.

    Frozen: a status change produces a new Order through `apply`, which the
    repository persists with a compare-and-set on the previous status.
    """

    id: UUID
    event_id: str
    ticket_type_id: UUID
    buyer_address: str
    quantity: int
    total_price_minor: int
    status: OrderStatus
    created_at: datetime
    expires_at: datetime
    confirmed_at: Optional[datetime] = None
    payment_signature: Optional[str] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        event_id: str,
        ticket_type_id: UUID,
        buyer_address: str,
        quantity: int,
        unit_price_minor: int,
        max_quantity: int,
        hold_duration: timedelta,
        now: datetime,
    ) -> 'Order':
        validate_quantity(quantity=quantity, max_quantity=max_quantity)
        return cls(
            id=uuid_utils.uuid7(),
            event_id=event_id,
            ticket_type_id=ticket_type_id,
            buyer_address=normalize_wallet_address(buyer_address, field='buyer_address'),
            quantity=quantity,
            total_price_minor=unit_price_minor * quantity,
            status=OrderStatus.PENDING,
            created_at=now,
            expires_at=now + hold_duration,
            updated_at=now,
        )

    def is_overdue(self, now: datetime) -> bool:
        return self.status is OrderStatus.PENDING and now > self.expires_at

    def time_left_seconds(self, now: datetime) -> int:
        if self.status is not OrderStatus.PENDING:
            return 0
        return max(0, int((self.expires_at - now).total_seconds()))

    def is_owned_by(self, address: str) -> bool:
        return self.buyer_address == normalize_wallet_address(address)

    def apply(
        self,
        event: OrderEvent,
        *,
        now: datetime,
        payment_signature: Optional[str] = None,
    ) -> tuple['Order', OrderTransition]:
        transition = resolve_transition(current=self.status, event=event)
        changes: dict = {'status': transition.to_status, 'updated_at': now}
        if transition.to_status is OrderStatus.CONFIRMED:
            if not payment_signature:
                raise DomainError(
                    'payment_signature is required', code=ErrorCode.INVALID_PAYMENT_PROOF
                )
            changes |= {'payment_signature': payment_signature, 'confirmed_at': now}
        return attrs.evolve(self, **changes), transition


def validate_quantity(*, quantity: int, max_quantity: int) -> None:
    if not 1 <= quantity <= max_quantity:
        raise DomainError(
            f'quantity must be between 1 and {max_quantity}', code=ErrorCode.INVALID_QUANTITY
        )
