"""
Lifecycle properties of the reservation engine

Test Coverage:
1. No oversell under N concurrent holds against supply K < N
2. Release idempotence across repeated and concurrent sweeps
3. Hold honored, then lost after the deadline
4. Terminal finality of confirmed orders
5. End-to-end reserve -> confirm -> sold-out scenario
"""

import asyncio

import pytest

from src.platform.exception.exceptions import ConflictError, ErrorCode
from src.service.reservation.app.command.cancel_reservation_use_case import (
    CancelReservationUseCase,
)
from src.service.reservation.app.command.confirm_reservation_use_case import (
    ConfirmReservationUseCase,
)
from src.service.reservation.app.command.expire_reservations_use_case import (
    ExpireReservationsUseCase,
)
from src.service.reservation.domain.enum.order_status import OrderStatus
from test.shared.fakes import AcceptAllPaymentVerifier
from test.shared.fixtures import read_available_supply
from test.util_constant import ANOTHER_BUYER_ADDRESS, BUYER_ADDRESS


pytestmark = pytest.mark.unit


def _buyer(index: int) -> str:
    return f'0x{index:040x}'


async def _active_quantity(uow_factory, ticket_type_id) -> int:
    async with uow_factory() as uow:
        totals = await uow.order_query_repo.sum_quantity_by_status(ticket_type_id=ticket_type_id)
    return totals[OrderStatus.PENDING] + totals[OrderStatus.CONFIRMED]


class TestNoOversell:
    @pytest.mark.asyncio
    @pytest.mark.parametrize('supply, contenders', [(1, 10), (7, 25), (20, 60)])
    async def test_concurrent_holds_never_exceed_supply(
        self, uow_factory, seed_ticket_type, place_hold, supply, contenders
    ):
        # Given: K tickets and N > K buyers asking for one each at once
        ticket_type = await seed_ticket_type(total_supply=supply)

        # When
        results = await asyncio.gather(
            *(
                place_hold(ticket_type, quantity=1, buyer_address=_buyer(i))
                for i in range(contenders)
            ),
            return_exceptions=True,
        )

        # Then: exactly K succeed; every loser saw InsufficientInventory
        winners = [r for r in results if not isinstance(r, BaseException)]
        losers = [r for r in results if isinstance(r, BaseException)]
        assert len(winners) == supply
        assert all(
            isinstance(e, ConflictError) and e.code is ErrorCode.INSUFFICIENT_INVENTORY
            for e in losers
        )
        assert await read_available_supply(uow_factory, ticket_type.id) == 0
        assert await _active_quantity(uow_factory, ticket_type.id) == supply

    @pytest.mark.asyncio
    async def test_mixed_quantities_sum_within_supply(
        self, uow_factory, seed_ticket_type, place_hold
    ):
        ticket_type = await seed_ticket_type(total_supply=10)

        results = await asyncio.gather(
            *(
                place_hold(ticket_type, quantity=1 + i % 4, buyer_address=_buyer(i))
                for i in range(12)
            ),
            return_exceptions=True,
        )

        held = sum(r.quantity for r in results if not isinstance(r, BaseException))
        available = await read_available_supply(uow_factory, ticket_type.id)
        assert held + available == 10
        assert await _active_quantity(uow_factory, ticket_type.id) == held


class TestReleaseIdempotence:
    @pytest.mark.asyncio
    async def test_concurrent_sweeps_release_each_hold_once(
        self, uow_factory, manual_clock, seed_ticket_type, place_hold
    ):
        ticket_type = await seed_ticket_type(total_supply=10)
        for i in range(4):
            await place_hold(ticket_type, quantity=2, buyer_address=_buyer(i))
        manual_clock.advance(minutes=16)
        sweeps = [
            ExpireReservationsUseCase(uow_factory=uow_factory, clock=manual_clock, batch_size=50)
            for _ in range(3)
        ]

        expired_counts = await asyncio.gather(*(sweep.expire_overdue() for sweep in sweeps))

        assert sum(expired_counts) == 4
        assert await read_available_supply(uow_factory, ticket_type.id) == 10


class TestHoldHonoredThenLost:
    @pytest.mark.asyncio
    async def test_stock_returns_only_after_the_hold_elapses(
        self, uow_factory, manual_clock, seed_ticket_type, place_hold
    ):
        # Given: the buyer holds all 3 tickets
        ticket_type = await seed_ticket_type(total_supply=3)
        await place_hold(ticket_type, quantity=3, buyer_address=BUYER_ADDRESS)
        assert await read_available_supply(uow_factory, ticket_type.id) == 0

        # When: someone else tries within the hold window
        manual_clock.advance(minutes=14)
        with pytest.raises(ConflictError) as exc_info:
            await place_hold(ticket_type, quantity=1, buyer_address=ANOTHER_BUYER_ADDRESS)
        assert exc_info.value.code is ErrorCode.INSUFFICIENT_INVENTORY

        # Then: after the deadline and a sweep, stock is back and sells again
        manual_clock.advance(minutes=2)
        sweep = ExpireReservationsUseCase(
            uow_factory=uow_factory, clock=manual_clock, batch_size=10
        )
        assert await sweep.expire_overdue() == 1
        assert await read_available_supply(uow_factory, ticket_type.id) == 3

        order = await place_hold(ticket_type, quantity=1, buyer_address=ANOTHER_BUYER_ADDRESS)
        assert order.status is OrderStatus.PENDING


class TestTerminalFinality:
    @pytest.mark.asyncio
    async def test_confirmed_order_ignores_cancel_and_sweep(
        self, uow_factory, manual_clock, seed_ticket_type, place_hold
    ):
        ticket_type = await seed_ticket_type(total_supply=10)
        order = await place_hold(ticket_type, quantity=2)
        await ConfirmReservationUseCase(
            uow_factory=uow_factory,
            payment_verifier=AcceptAllPaymentVerifier(),
            clock=manual_clock,
        ).confirm_reservation(order_id=order.id, payment_signature='0xabc')

        with pytest.raises(ConflictError) as exc_info:
            await CancelReservationUseCase(
                uow_factory=uow_factory, clock=manual_clock
            ).cancel_reservation(order_id=order.id, requester_address=BUYER_ADDRESS)
        assert exc_info.value.code is ErrorCode.ALREADY_TERMINAL

        manual_clock.advance(hours=1)
        sweep = ExpireReservationsUseCase(
            uow_factory=uow_factory, clock=manual_clock, batch_size=10
        )
        assert await sweep.expire_overdue() == 0
        with pytest.raises(ConflictError) as exc_info:
            await sweep.expire_reservation(order_id=order.id)
        assert exc_info.value.code is ErrorCode.ALREADY_TERMINAL

        assert await read_available_supply(uow_factory, ticket_type.id) == 8


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_reserve_confirm_then_sold_out(
        self, uow_factory, manual_clock, seed_ticket_type, place_hold
    ):
        # Given: 10 tickets
        ticket_type = await seed_ticket_type(total_supply=10)

        # When: 2 are held
        order = await place_hold(ticket_type, quantity=2)
        assert order.status is OrderStatus.PENDING
        assert await read_available_supply(uow_factory, ticket_type.id) == 8

        # And: the hold is paid
        confirmed = await ConfirmReservationUseCase(
            uow_factory=uow_factory,
            payment_verifier=AcceptAllPaymentVerifier(),
            clock=manual_clock,
        ).confirm_reservation(order_id=order.id, payment_signature='0xabc')

        # Then: confirmed, stock not restored
        assert confirmed.status is OrderStatus.CONFIRMED
        assert await read_available_supply(uow_factory, ticket_type.id) == 8

        # And: 9 more cannot be held
        with pytest.raises(ConflictError) as exc_info:
            await place_hold(ticket_type, quantity=9, buyer_address=ANOTHER_BUYER_ADDRESS)
        assert exc_info.value.code is ErrorCode.INSUFFICIENT_INVENTORY
