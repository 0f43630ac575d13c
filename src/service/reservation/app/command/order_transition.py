from datetime import datetime
from typing import Optional

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.metrics.ticketing_metrics import metrics
from src.service.reservation.domain.entity.order_entity import Order
from src.service.reservation.domain.enum.order_status import OrderEvent


async def apply_order_transition(
    *,
    uow: AbstractUnitOfWork,
    order: Order,
    event: OrderEvent,
    now: datetime,
    payment_signature: Optional[str] = None,
    hold_active_at: Optional[datetime] = None,
    hold_elapsed_at: Optional[datetime] = None,
) -> Optional[Order]:
    """
    Run one state-machine transition inside the caller's unit of work.

    Inventory is released only when this call's compare-and-set actually moved
    the order, so a sweep racing a confirm or a second sweep never
    double-releases. Returns None when another caller won the race.
    """
    updated, transition = order.apply(event, now=now, payment_signature=payment_signature)
    stored = await uow.order_command_repo.compare_and_set(
        updated=updated,
        expected_status=order.status,
        hold_active_at=hold_active_at,
        hold_elapsed_at=hold_elapsed_at,
    )
    if stored is None:
        return None

    if transition.releases_inventory:
        await uow.inventory_ledger.release(
            ticket_type_id=order.ticket_type_id, quantity=order.quantity
        )
    metrics.record_order_transition(from_status=order.status, to_status=stored.status)
    return stored
