from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Tuple

from uuid_utils import UUID

from src.platform.database.in_memory_store import InMemoryStore, UndoAction
from src.platform.exception.exceptions import ConflictError, ErrorCode
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_listing_command_repo import IListingCommandRepo
from src.service.marketplace.app.interface.i_listing_query_repo import (
    IListingQueryRepo,
    ListingFilter,
    SalesSummary,
)
from src.service.marketplace.domain.entity.listing_entity import Listing
from src.service.marketplace.domain.enum.listing_status import ListingSort, ListingStatus


_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


def _sort_key(sort_by: ListingSort) -> Tuple[Callable[[Listing], Any], bool]:
    if sort_by is ListingSort.OLDEST:
        return (lambda listing: (listing.created_at, str(listing.id))), False
    if sort_by is ListingSort.PRICE_LOW:
        return (lambda listing: (listing.listing_price_minor, str(listing.id))), False
    if sort_by is ListingSort.PRICE_HIGH:
        return (lambda listing: (listing.listing_price_minor, str(listing.id))), True
    if sort_by is ListingSort.ENDING_SOON:
        # Nulls last, then newest first
        return (
            lambda listing: (
                listing.expires_at is None,
                listing.expires_at or _FAR_FUTURE,
                -listing.created_at.timestamp(),
            )
        ), False
    return (lambda listing: (listing.created_at, str(listing.id))), True


class InMemoryListingRepo(IListingCommandRepo, IListingQueryRepo):
    def __init__(
        self, *, store: InMemoryStore, record_undo: Callable[[UndoAction], None]
    ) -> None:
        self._store = store
        self._record_undo = record_undo

    @Logger.io
    async def create(self, *, listing: Listing) -> Listing:
        if any(
            existing.ticket_id == listing.ticket_id and existing.status is ListingStatus.ACTIVE
            for existing in self._store.listings.values()
        ):
            raise ConflictError('Ticket is already listed for sale', ErrorCode.ALREADY_LISTED)

        self._store.listings[listing.id] = listing
        self._record_undo(lambda: self._store.listings.pop(listing.id, None))
        return listing

    @Logger.io
    async def get_by_id(self, *, listing_id: UUID) -> Optional[Listing]:
        return self._store.listings.get(listing_id)

    @Logger.io
    async def get_active_by_ticket(self, *, ticket_id: str) -> Optional[Listing]:
        return next(
            (
                listing
                for listing in self._store.listings.values()
                if listing.ticket_id == ticket_id and listing.status is ListingStatus.ACTIVE
            ),
            None,
        )

    @Logger.io
    async def compare_and_set(
        self,
        *,
        updated: Listing,
        expected_status: ListingStatus,
        not_expired_at: Optional[datetime] = None,
        expired_at: Optional[datetime] = None,
    ) -> Optional[Listing]:
        current = self._store.listings.get(updated.id)
        if current is None or current.status is not expected_status:
            return None
        if (
            not_expired_at is not None
            and current.expires_at is not None
            and current.expires_at < not_expired_at
        ):
            return None
        if expired_at is not None and (
            current.expires_at is None or not current.expires_at < expired_at
        ):
            return None

        self._store.listings[updated.id] = updated

        def _undo() -> None:
            if self._store.listings.get(updated.id) is updated:
                self._store.listings[updated.id] = current

        self._record_undo(_undo)
        return updated

    @Logger.io
    async def list_overdue_ids(self, *, now: datetime, limit: int) -> List[UUID]:
        overdue = sorted(
            (
                listing
                for listing in self._store.listings.values()
                if listing.status is ListingStatus.ACTIVE
                and listing.expires_at is not None
                and listing.expires_at < now
            ),
            key=lambda listing: listing.expires_at,  # type: ignore[arg-type, return-value]
        )
        return [listing.id for listing in overdue[:limit]]

    @Logger.io
    async def list_listings(
        self, *, listing_filter: ListingFilter, now: datetime
    ) -> Tuple[List[Listing], int]:
        matching = [
            listing
            for listing in self._store.listings.values()
            if listing.status is listing_filter.status
            and (listing.expires_at is None or listing.expires_at > now)
            and (
                not listing_filter.seller_address
                or listing.seller_address == listing_filter.seller_address
            )
            and (
                listing_filter.min_price_minor is None
                or listing.listing_price_minor >= listing_filter.min_price_minor
            )
            and (
                listing_filter.max_price_minor is None
                or listing.listing_price_minor <= listing_filter.max_price_minor
            )
        ]
        key, reverse = _sort_key(listing_filter.sort_by)
        matching.sort(key=key, reverse=reverse)
        start = listing_filter.offset
        return matching[start : start + listing_filter.limit], len(matching)

    @Logger.io
    async def list_by_seller(self, *, seller_address: str) -> List[Listing]:
        return sorted(
            (
                listing
                for listing in self._store.listings.values()
                if listing.seller_address == seller_address
            ),
            key=lambda listing: (listing.created_at, str(listing.id)),
            reverse=True,
        )

    @Logger.io
    async def sales_summary(self, *, now: datetime, since: datetime) -> SalesSummary:
        listings = list(self._store.listings.values())
        recent = [
            listing
            for listing in listings
            if listing.status is ListingStatus.SOLD
            and listing.sold_at is not None
            and listing.sold_at >= since
        ]
        return SalesSummary(
            active_listings=sum(
                1
                for listing in listings
                if listing.status is ListingStatus.ACTIVE
                and (listing.expires_at is None or listing.expires_at > now)
            ),
            recent_sales=len(recent),
            recent_volume_minor=sum(listing.listing_price_minor for listing in recent),
        )
