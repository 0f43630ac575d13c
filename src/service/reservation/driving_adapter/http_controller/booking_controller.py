from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from opentelemetry import trace

from src.platform.clock.utc_clock import utc_now
from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.inventory.app.query.get_availability_use_case import GetAvailabilityUseCase
from src.service.inventory.driving_adapter.http_controller.schema.ticket_type_schema import (
    AvailabilityResponse,
)
from src.service.reservation.app.command.cancel_reservation_use_case import (
    CancelReservationUseCase,
)
from src.service.reservation.app.command.confirm_reservation_use_case import (
    ConfirmReservationUseCase,
)
from src.service.reservation.app.command.create_reservation_use_case import (
    CreateReservationUseCase,
)
from src.service.reservation.app.command.expire_reservations_use_case import (
    ExpireReservationsUseCase,
)
from src.service.reservation.app.query.get_reservation_use_case import GetReservationUseCase
from src.service.reservation.app.query.list_buyer_orders_use_case import (
    ListBuyerOrdersUseCase,
)
from src.service.reservation.domain.enum.order_status import OrderStatus
from src.service.reservation.driving_adapter.http_controller.schema.order_schema import (
    BuyerOrdersResponse,
    CancelReservationRequest,
    CleanupReservationsResponse,
    OrderResponse,
    PurchaseRequest,
    ReservationResponse,
    ReserveRequest,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('/reserve', status_code=status.HTTP_201_CREATED)
@Logger.io
async def reserve(
    request: ReserveRequest,
    use_case: CreateReservationUseCase = Depends(CreateReservationUseCase.depends),
) -> OrderResponse:
    with tracer.start_as_current_span('controller.reserve') as span:
        span.set_attribute('event_id', request.event_id)
        span.set_attribute('quantity', request.quantity)

        order = await use_case.create_reservation(
            event_id=request.event_id,
            ticket_type_id=request.ticket_type_id,
            quantity=request.quantity,
            buyer_address=request.buyer_address,
        )
        span.set_attribute('order.id', str(order.id))
        return OrderResponse.from_entity(order)


@router.post('/purchase')
@Logger.io
async def purchase(
    request: PurchaseRequest,
    use_case: ConfirmReservationUseCase = Depends(ConfirmReservationUseCase.depends),
) -> OrderResponse:
    order = await use_case.confirm_reservation(
        order_id=request.order_id, payment_signature=request.payment_signature
    )
    return OrderResponse.from_entity(order)


@router.delete('/reserve/{order_id}', status_code=status.HTTP_204_NO_CONTENT)
@Logger.io
async def cancel_reservation(
    order_id: UtilsUUID7,
    request: CancelReservationRequest,
    use_case: CancelReservationUseCase = Depends(CancelReservationUseCase.depends),
) -> Response:
    await use_case.cancel_reservation(
        order_id=order_id, requester_address=request.requester_address
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get('/reserve/{order_id}')
@Logger.io
async def get_reservation(
    order_id: UtilsUUID7,
    use_case: GetReservationUseCase = Depends(GetReservationUseCase.depends),
) -> ReservationResponse:
    view = await use_case.get_reservation(order_id=order_id)
    return ReservationResponse(
        **OrderResponse.from_entity(view.order).model_dump(),
        time_left_seconds=view.time_left_seconds,
    )


@router.get('/user/{buyer_address}')
@Logger.io
async def list_buyer_orders(
    buyer_address: str,
    order_status: Optional[OrderStatus] = Query(None, alias='status'),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    use_case: ListBuyerOrdersUseCase = Depends(ListBuyerOrdersUseCase.depends),
) -> BuyerOrdersResponse:
    page = await use_case.list_buyer_orders(
        buyer_address=buyer_address, status=order_status, limit=limit, offset=offset
    )
    return BuyerOrdersResponse(
        orders=[OrderResponse.from_entity(order) for order in page.orders],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.get('/availability/{event_id}/{ticket_type_id}')
@Logger.io
async def get_availability(
    event_id: str,
    ticket_type_id: UtilsUUID7,
    use_case: GetAvailabilityUseCase = Depends(GetAvailabilityUseCase.depends),
) -> AvailabilityResponse:
    availability = await use_case.get_availability(
        event_id=event_id, ticket_type_id=ticket_type_id
    )
    return AvailabilityResponse(
        event_id=availability.event_id,
        ticket_type_id=availability.ticket_type_id,
        available_supply=availability.available_supply,
        total_supply=availability.total_supply,
        reserved_supply=availability.reserved_supply,
        sold_supply=availability.sold_supply,
        unit_price_minor=availability.unit_price_minor,
        is_available=availability.is_available,
    )


@router.post('/admin/cleanup-expired')
@Logger.io
async def cleanup_expired_reservations(
    use_case: ExpireReservationsUseCase = Depends(ExpireReservationsUseCase.depends),
) -> CleanupReservationsResponse:
    cleaned = await use_case.expire_overdue()
    return CleanupReservationsResponse(cleaned_reservations=cleaned, timestamp=utc_now())
