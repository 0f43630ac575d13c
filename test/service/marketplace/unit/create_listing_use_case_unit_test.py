"""
Unit tests for CreateListingUseCase

Test Coverage:
1. Owner lists a ticket; original price defaults to the last paid price
2. Unknown ticket / someone else's ticket
3. At most one active listing per ticket; an overdue one is expired on relist
4. Price and expiry validation before the oracle is consulted
"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import (
    ConflictError,
    DomainError,
    ErrorCode,
    ForbiddenError,
    NotFoundError,
    UpstreamUnavailableError,
)
from src.service.marketplace.app.command.cancel_listing_use_case import CancelListingUseCase
from src.service.marketplace.app.command.create_listing_use_case import CreateListingUseCase
from src.service.marketplace.domain.entity.ticket_ownership_entity import TicketOwnership
from src.service.marketplace.domain.enum.listing_status import ListingStatus
from test.shared.fakes import T0, StaticOwnershipOracle
from test.util_constant import BUYER_ADDRESS, SELLER_ADDRESS, TICKET_ID


pytestmark = pytest.mark.unit


@pytest.fixture
def ownership_oracle() -> StaticOwnershipOracle:
    return StaticOwnershipOracle(
        {
            TICKET_ID: TicketOwnership(
                ticket_id=TICKET_ID, owner_address=SELLER_ADDRESS, price_minor=2500, updated_at=T0
            )
        }
    )


@pytest.fixture
def use_case(uow_factory, ownership_oracle, manual_clock) -> CreateListingUseCase:
    return CreateListingUseCase(
        uow_factory=uow_factory, ownership_oracle=ownership_oracle, clock=manual_clock
    )


class TestCreateListing:
    @pytest.mark.asyncio
    async def test_owner_lists_ticket(self, use_case, uow_factory):
        # When
        listing = await use_case.create_listing(
            ticket_id=TICKET_ID,
            seller_address=SELLER_ADDRESS,
            listing_price_minor=3000,
            expires_at=T0 + timedelta(days=1),
            description='Front row',
        )

        # Then: stored active, original price taken from the last paid price
        assert listing.status is ListingStatus.ACTIVE
        assert listing.original_price_minor == 2500
        assert listing.price_change_minor == 500
        async with uow_factory() as uow:
            stored = await uow.listing_query_repo.get_by_id(listing_id=listing.id)
        assert stored == listing

    @pytest.mark.asyncio
    async def test_explicit_original_price_wins(self, use_case):
        listing = await use_case.create_listing(
            ticket_id=TICKET_ID,
            seller_address=SELLER_ADDRESS,
            listing_price_minor=3000,
            original_price_minor=2000,
        )

        assert listing.original_price_minor == 2000

    @pytest.mark.asyncio
    async def test_unknown_last_price_falls_back_to_listing_price(
        self, use_case, ownership_oracle
    ):
        ownership_oracle.owners['ticket-free'] = TicketOwnership(
            ticket_id='ticket-free', owner_address=SELLER_ADDRESS, updated_at=T0
        )

        listing = await use_case.create_listing(
            ticket_id='ticket-free', seller_address=SELLER_ADDRESS, listing_price_minor=1800
        )

        assert listing.original_price_minor == 1800
        assert listing.price_change_percentage == 0.0

    @pytest.mark.asyncio
    async def test_unknown_ticket_is_not_found(self, use_case):
        with pytest.raises(NotFoundError) as exc_info:
            await use_case.create_listing(
                ticket_id='ticket-missing', seller_address=SELLER_ADDRESS, listing_price_minor=3000
            )
        assert exc_info.value.code is ErrorCode.TICKET_NOT_FOUND

    @pytest.mark.asyncio
    async def test_only_the_owner_can_list(self, use_case):
        with pytest.raises(ForbiddenError) as exc_info:
            await use_case.create_listing(
                ticket_id=TICKET_ID, seller_address=BUYER_ADDRESS, listing_price_minor=3000
            )
        assert exc_info.value.code is ErrorCode.NOT_OWNER

    @pytest.mark.asyncio
    async def test_second_active_listing_is_rejected(self, use_case):
        await use_case.create_listing(
            ticket_id=TICKET_ID, seller_address=SELLER_ADDRESS, listing_price_minor=3000
        )

        with pytest.raises(ConflictError) as exc_info:
            await use_case.create_listing(
                ticket_id=TICKET_ID, seller_address=SELLER_ADDRESS, listing_price_minor=2800
            )
        assert exc_info.value.code is ErrorCode.ALREADY_LISTED

    @pytest.mark.asyncio
    async def test_ticket_can_be_relisted_after_cancel(self, use_case, uow_factory, manual_clock):
        first = await use_case.create_listing(
            ticket_id=TICKET_ID, seller_address=SELLER_ADDRESS, listing_price_minor=3000
        )
        await CancelListingUseCase(uow_factory=uow_factory, clock=manual_clock).cancel_listing(
            listing_id=first.id, seller_address=SELLER_ADDRESS
        )

        second = await use_case.create_listing(
            ticket_id=TICKET_ID, seller_address=SELLER_ADDRESS, listing_price_minor=2800
        )

        assert second.id != first.id
        assert second.status is ListingStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_overdue_listing_is_expired_on_relist(self, use_case, uow_factory, manual_clock):
        # Given: an active listing past its deadline the sweep has not reached
        first = await use_case.create_listing(
            ticket_id=TICKET_ID,
            seller_address=SELLER_ADDRESS,
            listing_price_minor=3000,
            expires_at=T0 + timedelta(hours=1),
        )
        manual_clock.advance(hours=2)

        # When
        second = await use_case.create_listing(
            ticket_id=TICKET_ID, seller_address=SELLER_ADDRESS, listing_price_minor=2800
        )

        # Then
        assert second.status is ListingStatus.ACTIVE
        async with uow_factory() as uow:
            stored = await uow.listing_query_repo.get_by_id(listing_id=first.id)
        assert stored.status is ListingStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_listing_at_its_deadline_still_blocks_relist(self, use_case, manual_clock):
        await use_case.create_listing(
            ticket_id=TICKET_ID,
            seller_address=SELLER_ADDRESS,
            listing_price_minor=3000,
            expires_at=T0 + timedelta(hours=1),
        )
        manual_clock.advance(hours=1)

        with pytest.raises(ConflictError) as exc_info:
            await use_case.create_listing(
                ticket_id=TICKET_ID, seller_address=SELLER_ADDRESS, listing_price_minor=2800
            )
        assert exc_info.value.code is ErrorCode.ALREADY_LISTED

    @pytest.mark.asyncio
    async def test_invalid_terms_fail_before_asking_the_oracle(self, uow_factory, manual_clock):
        oracle = AsyncMock()
        use_case = CreateListingUseCase(
            uow_factory=uow_factory, ownership_oracle=oracle, clock=manual_clock
        )

        with pytest.raises(DomainError) as exc_info:
            await use_case.create_listing(
                ticket_id=TICKET_ID,
                seller_address=SELLER_ADDRESS,
                listing_price_minor=3000,
                expires_at=T0 - timedelta(minutes=1),
            )

        assert exc_info.value.code is ErrorCode.INVALID_EXPIRY
        oracle.get_owner.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_oracle_outage_propagates(self, uow_factory, manual_clock):
        oracle = AsyncMock()
        oracle.get_owner.side_effect = UpstreamUnavailableError('oracle down')
        use_case = CreateListingUseCase(
            uow_factory=uow_factory, ownership_oracle=oracle, clock=manual_clock
        )

        with pytest.raises(UpstreamUnavailableError):
            await use_case.create_listing(
                ticket_id=TICKET_ID, seller_address=SELLER_ADDRESS, listing_price_minor=3000
            )
