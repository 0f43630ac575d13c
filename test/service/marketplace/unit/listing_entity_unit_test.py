from datetime import timedelta

import pytest

from src.platform.exception.exceptions import ConflictError, DomainError, ErrorCode
from src.service.marketplace.domain.entity.listing_entity import Listing
from src.service.marketplace.domain.enum.listing_status import ListingEvent, ListingStatus
from src.service.marketplace.domain.listing_state_machine import (
    LISTING_TRANSITIONS,
    resolve_listing_transition,
)
from test.shared.fakes import T0
from test.util_constant import BUYER_ADDRESS, SELLER_ADDRESS, TICKET_ID, VALID_TX_DIGEST


pytestmark = pytest.mark.unit


def _listing(**overrides) -> Listing:
    fields = {
        'ticket_id': TICKET_ID,
        'seller_address': SELLER_ADDRESS,
        'listing_price_minor': 3000,
        'original_price_minor': 2500,
        'now': T0,
    }
    fields.update(overrides)
    return Listing.create(**fields)


class TestListingStateMachine:
    @pytest.mark.parametrize(
        'event, to_status',
        [
            (ListingEvent.PURCHASED, ListingStatus.SOLD),
            (ListingEvent.SELLER_CANCEL, ListingStatus.CANCELLED),
            (ListingEvent.LISTING_TIMEOUT, ListingStatus.EXPIRED),
        ],
    )
    def test_active_exits(self, event, to_status):
        assert resolve_listing_transition(current=ListingStatus.ACTIVE, event=event) is to_status

    @pytest.mark.parametrize(
        'terminal', [ListingStatus.SOLD, ListingStatus.CANCELLED, ListingStatus.EXPIRED]
    )
    @pytest.mark.parametrize('event', list(ListingEvent))
    def test_terminal_states_have_no_exits(self, terminal, event):
        with pytest.raises(ConflictError) as exc_info:
            resolve_listing_transition(current=terminal, event=event)
        assert exc_info.value.code is ErrorCode.LISTING_NOT_ACTIVE

    def test_only_active_appears_as_a_source(self):
        assert {source for source, _ in LISTING_TRANSITIONS} == {ListingStatus.ACTIVE}


class TestListingCreate:
    def test_new_listing_is_active_with_normalized_seller(self):
        listing = _listing(seller_address=SELLER_ADDRESS.upper().replace('0X', '0x'))

        assert listing.status is ListingStatus.ACTIVE
        assert listing.seller_address == SELLER_ADDRESS
        assert listing.created_at == listing.updated_at == T0
        assert listing.buyer_address is None

    @pytest.mark.parametrize('price', [0, -100])
    def test_non_positive_price_is_rejected(self, price):
        with pytest.raises(DomainError) as exc_info:
            _listing(listing_price_minor=price)
        assert exc_info.value.code is ErrorCode.INVALID_PRICE

    def test_negative_original_price_is_rejected(self):
        with pytest.raises(DomainError) as exc_info:
            _listing(original_price_minor=-1)
        assert exc_info.value.code is ErrorCode.INVALID_PRICE

    @pytest.mark.parametrize('offset', [timedelta(0), timedelta(minutes=-1)])
    def test_expiry_must_be_in_the_future(self, offset):
        with pytest.raises(DomainError) as exc_info:
            _listing(expires_at=T0 + offset)
        assert exc_info.value.code is ErrorCode.INVALID_EXPIRY

    def test_missing_ticket_id_is_rejected(self):
        with pytest.raises(DomainError):
            _listing(ticket_id='')


class TestListingPriceChange:
    def test_markup(self):
        listing = _listing(listing_price_minor=3000, original_price_minor=2500)

        assert listing.price_change_minor == 500
        assert listing.price_change_percentage == 20.0

    def test_discount_rounds_to_two_decimals(self):
        listing = _listing(listing_price_minor=2000, original_price_minor=3000)

        assert listing.price_change_minor == -1000
        assert listing.price_change_percentage == -33.33

    def test_free_original_reports_zero_percent(self):
        listing = _listing(listing_price_minor=100, original_price_minor=0)

        assert listing.price_change_percentage == 0.0


class TestListingApply:
    def test_purchase_records_buyer_and_sale_proof(self):
        listing = _listing()

        sold = listing.apply(
            ListingEvent.PURCHASED,
            now=T0 + timedelta(minutes=5),
            buyer_address=BUYER_ADDRESS.upper().replace('0X', '0x'),
            sale_transaction_hash=VALID_TX_DIGEST,
        )

        assert sold.status is ListingStatus.SOLD
        assert sold.buyer_address == BUYER_ADDRESS
        assert sold.sale_transaction_hash == VALID_TX_DIGEST
        assert sold.sold_at == T0 + timedelta(minutes=5)
        # The original value is untouched
        assert listing.status is ListingStatus.ACTIVE

    def test_purchase_without_proof_is_rejected(self):
        with pytest.raises(DomainError) as exc_info:
            _listing().apply(ListingEvent.PURCHASED, now=T0, buyer_address=BUYER_ADDRESS)
        assert exc_info.value.code is ErrorCode.INVALID_PAYMENT_PROOF

    def test_seller_cannot_buy_own_listing(self):
        with pytest.raises(DomainError) as exc_info:
            _listing().apply(
                ListingEvent.PURCHASED,
                now=T0,
                buyer_address=SELLER_ADDRESS,
                sale_transaction_hash=VALID_TX_DIGEST,
            )
        assert exc_info.value.code is ErrorCode.SELF_PURCHASE

    def test_cancel_stamps_cancelled_at(self):
        cancelled = _listing().apply(ListingEvent.SELLER_CANCEL, now=T0 + timedelta(hours=1))

        assert cancelled.status is ListingStatus.CANCELLED
        assert cancelled.cancelled_at == T0 + timedelta(hours=1)

    def test_timeout_only_changes_status(self):
        listing = _listing(expires_at=T0 + timedelta(hours=1))

        expired = listing.apply(ListingEvent.LISTING_TIMEOUT, now=T0 + timedelta(hours=2))

        assert expired.status is ListingStatus.EXPIRED
        assert expired.sold_at is None
        assert expired.cancelled_at is None


class TestListingOverdue:
    def test_open_ended_listing_never_overdue(self):
        assert not _listing().is_overdue(T0 + timedelta(days=365))

    def test_overdue_only_strictly_after_expiry(self):
        listing = _listing(expires_at=T0 + timedelta(hours=1))

        assert not listing.is_overdue(T0 + timedelta(hours=1))
        assert listing.is_overdue(T0 + timedelta(hours=1, seconds=1))

    def test_terminal_listing_is_not_overdue(self):
        listing = _listing(expires_at=T0 + timedelta(hours=1)).apply(
            ListingEvent.SELLER_CANCEL, now=T0
        )

        assert not listing.is_overdue(T0 + timedelta(days=1))

    def test_listed_by_ignores_case(self):
        assert _listing().is_listed_by(SELLER_ADDRESS.upper().replace('0X', '0x'))
        assert not _listing().is_listed_by(BUYER_ADDRESS)
