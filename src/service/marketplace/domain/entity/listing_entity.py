from datetime import datetime
from typing import Optional

import attrs
from uuid_utils import UUID
import uuid_utils

from src.platform.exception.exceptions import DomainError, ErrorCode
from src.service.marketplace.domain.enum.listing_status import ListingEvent, ListingStatus
from src.service.marketplace.domain.listing_state_machine import resolve_listing_transition
from src.service.shared_kernel.domain.value_object.wallet_address import (
    normalize_wallet_address,
)


@attrs.define(frozen=True)
class Listing:
    """
    A resale offer for one minted ticket.

    Prices are integer minor units. Status only moves through `apply`; the
    repository persists the result with a compare-and-set on the old status.
    """

    id: UUID
    ticket_id: str
    seller_address: str
    listing_price_minor: int
    original_price_minor: int
    status: ListingStatus
    created_at: datetime
    updated_at: datetime
    expires_at: Optional[datetime] = None
    buyer_address: Optional[str] = None
    sold_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    transaction_hash: Optional[str] = None
    sale_transaction_hash: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def create(
        cls,
        *,
        ticket_id: str,
        seller_address: str,
        listing_price_minor: int,
        original_price_minor: int,
        now: datetime,
        expires_at: Optional[datetime] = None,
        transaction_hash: Optional[str] = None,
        description: Optional[str] = None,
    ) -> 'Listing':
        if not ticket_id:
            raise DomainError('ticket_id is required')
        if original_price_minor < 0:
            raise DomainError('original price must be >= 0', code=ErrorCode.INVALID_PRICE)
        validate_listing_terms(
            listing_price_minor=listing_price_minor, expires_at=expires_at, now=now
        )

        return cls(
            id=uuid_utils.uuid7(),
            ticket_id=ticket_id,
            seller_address=normalize_wallet_address(seller_address, field='seller_address'),
            listing_price_minor=listing_price_minor,
            original_price_minor=original_price_minor,
            status=ListingStatus.ACTIVE,
            created_at=now,
            updated_at=now,
            expires_at=expires_at,
            transaction_hash=transaction_hash,
            description=description,
        )

    @property
    def price_change_minor(self) -> int:
        return self.listing_price_minor - self.original_price_minor

    @property
    def price_change_percentage(self) -> float:
        if self.original_price_minor <= 0:
            return 0.0
        return round(self.price_change_minor * 100 / self.original_price_minor, 2)

    def is_overdue(self, now: datetime) -> bool:
        return (
            self.status is ListingStatus.ACTIVE
            and self.expires_at is not None
            and now > self.expires_at
        )

    def is_listed_by(self, address: str) -> bool:
        return self.seller_address == normalize_wallet_address(address)

    def apply(
        self,
        event: ListingEvent,
        *,
        now: datetime,
        buyer_address: Optional[str] = None,
        sale_transaction_hash: Optional[str] = None,
    ) -> 'Listing':
        to_status = resolve_listing_transition(current=self.status, event=event)
        changes: dict = {'status': to_status, 'updated_at': now}

        if to_status is ListingStatus.SOLD:
            if not buyer_address or not sale_transaction_hash:
                raise DomainError(
                    'buyer_address and transaction_hash are required',
                    code=ErrorCode.INVALID_PAYMENT_PROOF,
                )
            buyer = normalize_wallet_address(buyer_address, field='buyer_address')
            if buyer == self.seller_address:
                raise DomainError(
                    'Cannot buy your own listing', code=ErrorCode.SELF_PURCHASE
                )
            changes |= {
                'buyer_address': buyer,
                'sale_transaction_hash': sale_transaction_hash,
                'sold_at': now,
            }
        elif to_status is ListingStatus.CANCELLED:
            changes['cancelled_at'] = now

        return attrs.evolve(self, **changes)


def validate_listing_terms(
    *, listing_price_minor: int, expires_at: Optional[datetime], now: datetime
) -> None:
    if listing_price_minor <= 0:
        raise DomainError('listing price must be positive', code=ErrorCode.INVALID_PRICE)
    if expires_at is not None and expires_at <= now:
        raise DomainError('expires_at must be in the future', code=ErrorCode.INVALID_EXPIRY)
