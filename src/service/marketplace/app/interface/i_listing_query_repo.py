from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

import attrs
from uuid_utils import UUID

from src.service.marketplace.domain.entity.listing_entity import Listing
from src.service.marketplace.domain.enum.listing_status import ListingSort, ListingStatus


@attrs.define(frozen=True)
class ListingFilter:
    status: ListingStatus = ListingStatus.ACTIVE
    seller_address: Optional[str] = None
    min_price_minor: Optional[int] = None
    max_price_minor: Optional[int] = None
    sort_by: ListingSort = ListingSort.NEWEST
    limit: int = 20
    offset: int = 0


@attrs.define(frozen=True)
class SalesSummary:
    active_listings: int
    recent_sales: int
    recent_volume_minor: int


class IListingQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, listing_id: UUID) -> Optional[Listing]:
        pass

    @abstractmethod
    async def list_listings(
        self, *, listing_filter: ListingFilter, now: datetime
    ) -> Tuple[List[Listing], int]:
        """Filtered page plus total; listings past expires_at are left out."""

    @abstractmethod
    async def list_by_seller(self, *, seller_address: str) -> List[Listing]:
        """Every listing of the seller, newest first."""

    @abstractmethod
    async def sales_summary(self, *, now: datetime, since: datetime) -> SalesSummary:
        pass
