from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.reservation.domain.entity.order_entity import Order
from src.service.shared_kernel.driving_adapter.schema.camel_model import CamelModel


class ReserveRequest(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            'example': {
                'eventId': 'evt-2025-sui-summit',
                'ticketTypeId': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'quantity': 2,
                'buyerAddress': '0x7d2f9c1e4b6a8d0f3e5c7a9b1d3f5e7c9a1b3d5f',
            }
        },
    )

    event_id: str
    ticket_type_id: UtilsUUID7
    quantity: int
    buyer_address: str


class PurchaseRequest(CamelModel):
    order_id: UtilsUUID7
    payment_signature: str


class CancelReservationRequest(CamelModel):
    requester_address: str


class OrderResponse(CamelModel):
    id: UtilsUUID7
    event_id: str
    ticket_type_id: UtilsUUID7
    buyer_address: str
    quantity: int
    total_price_minor: int
    status: str
    created_at: datetime
    expires_at: datetime
    confirmed_at: Optional[datetime] = None
    payment_signature: Optional[str] = None

    @classmethod
    def from_entity(cls, order: Order) -> 'OrderResponse':
        return cls(
            id=order.id,
            event_id=order.event_id,
            ticket_type_id=order.ticket_type_id,
            buyer_address=order.buyer_address,
            quantity=order.quantity,
            total_price_minor=order.total_price_minor,
            status=order.status.value,
            created_at=order.created_at,
            expires_at=order.expires_at,
            confirmed_at=order.confirmed_at,
            payment_signature=order.payment_signature,
        )


class ReservationResponse(OrderResponse):
    time_left_seconds: int


class BuyerOrdersResponse(CamelModel):
    orders: List[OrderResponse]
    total: int
    limit: int
    offset: int


class CleanupReservationsResponse(CamelModel):
    cleaned_reservations: int
    timestamp: datetime
