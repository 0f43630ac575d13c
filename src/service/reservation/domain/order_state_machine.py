"""
Order lifecycle

    pending --payment_confirmed--> confirmed   (inventory stays consumed)
    pending --payment_rejected---> failed      (release inventory)
    pending --buyer_cancel-------> cancelled   (release inventory)
    pending --hold_timeout-------> expired     (release inventory)

Every other (status, event) pair is illegal. Terminal states have no exits.
"""

from typing import NamedTuple

from src.platform.exception.exceptions import ConflictError, ErrorCode
from src.service.reservation.domain.enum.order_status import OrderEvent, OrderStatus


class OrderTransition(NamedTuple):
    to_status: OrderStatus
    releases_inventory: bool


ORDER_TRANSITIONS: dict[tuple[OrderStatus, OrderEvent], OrderTransition] = {
    (OrderStatus.PENDING, OrderEvent.PAYMENT_CONFIRMED): OrderTransition(
        OrderStatus.CONFIRMED, releases_inventory=False
    ),
    (OrderStatus.PENDING, OrderEvent.PAYMENT_REJECTED): OrderTransition(
        OrderStatus.FAILED, releases_inventory=True
    ),
    (OrderStatus.PENDING, OrderEvent.BUYER_CANCEL): OrderTransition(
        OrderStatus.CANCELLED, releases_inventory=True
    ),
    (OrderStatus.PENDING, OrderEvent.HOLD_TIMEOUT): OrderTransition(
        OrderStatus.EXPIRED, releases_inventory=True
    ),
}


def resolve_transition(*, current: OrderStatus, event: OrderEvent) -> OrderTransition:
    transition = ORDER_TRANSITIONS.get((current, event))
    if transition is not None:
        return transition
    if current.is_terminal:
        raise ConflictError(f'Order is already {current}', ErrorCode.ALREADY_TERMINAL)
    raise ConflictError(
        f'Event {event} is not allowed from {current}', ErrorCode.INVALID_TRANSITION
    )
