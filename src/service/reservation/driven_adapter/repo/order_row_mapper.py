from typing import Any

from src.platform.clock.utc_clock import ensure_utc
from src.platform.types.uuid7_utils_types import from_std_uuid
from src.service.reservation.domain.entity.order_entity import Order
from src.service.reservation.domain.enum.order_status import OrderStatus
from src.service.reservation.driven_adapter.model.order_model import OrderModel


ORDER_COLUMNS = tuple(OrderModel.__table__.c)


def row_to_order(row: Any) -> Order:
    return Order(
        id=from_std_uuid(row.id),
        event_id=row.event_id,
        ticket_type_id=from_std_uuid(row.ticket_type_id),
        buyer_address=row.buyer_address,
        quantity=row.quantity,
        total_price_minor=row.total_price_minor,
        status=OrderStatus(row.status),
        created_at=ensure_utc(row.created_at),
        expires_at=ensure_utc(row.expires_at),
        confirmed_at=ensure_utc(row.confirmed_at),
        payment_signature=row.payment_signature,
        updated_at=ensure_utc(row.updated_at),
    )
