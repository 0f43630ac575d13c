import pytest
import uuid_utils

from src.platform.exception.exceptions import ErrorCode, NotFoundError
from src.service.reservation.app.command.cancel_reservation_use_case import (
    CancelReservationUseCase,
)
from src.service.reservation.app.query.get_reservation_use_case import GetReservationUseCase
from src.service.reservation.app.query.list_buyer_orders_use_case import (
    ListBuyerOrdersUseCase,
)
from src.service.reservation.domain.enum.order_status import OrderStatus
from test.util_constant import ANOTHER_BUYER_ADDRESS, BUYER_ADDRESS


pytestmark = pytest.mark.unit


class TestGetReservation:
    @pytest.mark.asyncio
    async def test_time_left_counts_down(
        self, uow_factory, manual_clock, seed_ticket_type, place_hold
    ):
        ticket_type = await seed_ticket_type()
        order = await place_hold(ticket_type)
        use_case = GetReservationUseCase(uow_factory=uow_factory, clock=manual_clock)

        fresh = await use_case.get_reservation(order_id=order.id)
        manual_clock.advance(minutes=10)
        later = await use_case.get_reservation(order_id=order.id)
        manual_clock.advance(minutes=10)
        lapsed = await use_case.get_reservation(order_id=order.id)

        assert fresh.order == order
        assert fresh.time_left_seconds == 15 * 60
        assert later.time_left_seconds == 5 * 60
        # Not swept yet, still pending, but no time left
        assert lapsed.order.status is OrderStatus.PENDING
        assert lapsed.time_left_seconds == 0

    @pytest.mark.asyncio
    async def test_terminal_order_has_no_time_left(
        self, uow_factory, manual_clock, seed_ticket_type, place_hold
    ):
        ticket_type = await seed_ticket_type()
        order = await place_hold(ticket_type)
        await CancelReservationUseCase(
            uow_factory=uow_factory, clock=manual_clock
        ).cancel_reservation(order_id=order.id, requester_address=BUYER_ADDRESS)

        view = await GetReservationUseCase(
            uow_factory=uow_factory, clock=manual_clock
        ).get_reservation(order_id=order.id)

        assert view.order.status is OrderStatus.CANCELLED
        assert view.time_left_seconds == 0

    @pytest.mark.asyncio
    async def test_missing_order(self, uow_factory, manual_clock):
        with pytest.raises(NotFoundError) as exc_info:
            await GetReservationUseCase(
                uow_factory=uow_factory, clock=manual_clock
            ).get_reservation(order_id=uuid_utils.uuid7())
        assert exc_info.value.code is ErrorCode.ORDER_NOT_FOUND


class TestListBuyerOrders:
    @pytest.mark.asyncio
    async def test_newest_first_with_paging(
        self, uow_factory, manual_clock, seed_ticket_type, place_hold
    ):
        # Given: three holds for the buyer a minute apart, one for someone else
        ticket_type = await seed_ticket_type(total_supply=20)
        placed = []
        for _ in range(3):
            placed.append(await place_hold(ticket_type, quantity=1))
            manual_clock.advance(minutes=1)
        await place_hold(ticket_type, quantity=1, buyer_address=ANOTHER_BUYER_ADDRESS)
        use_case = ListBuyerOrdersUseCase(uow_factory=uow_factory)

        # When
        first = await use_case.list_buyer_orders(buyer_address=BUYER_ADDRESS, limit=2)
        rest = await use_case.list_buyer_orders(buyer_address=BUYER_ADDRESS, limit=2, offset=2)

        # Then
        assert [o.id for o in first.orders] == [placed[2].id, placed[1].id]
        assert [o.id for o in rest.orders] == [placed[0].id]
        assert first.total == rest.total == 3

    @pytest.mark.asyncio
    async def test_status_filter_and_address_case(
        self, uow_factory, manual_clock, seed_ticket_type, place_hold
    ):
        ticket_type = await seed_ticket_type()
        kept = await place_hold(ticket_type, quantity=1)
        dropped = await place_hold(ticket_type, quantity=1)
        await CancelReservationUseCase(
            uow_factory=uow_factory, clock=manual_clock
        ).cancel_reservation(order_id=dropped.id, requester_address=BUYER_ADDRESS)

        page = await ListBuyerOrdersUseCase(uow_factory=uow_factory).list_buyer_orders(
            buyer_address=BUYER_ADDRESS.upper().replace('0X', '0x'), status=OrderStatus.PENDING
        )

        assert [o.id for o in page.orders] == [kept.id]
        assert page.total == 1
