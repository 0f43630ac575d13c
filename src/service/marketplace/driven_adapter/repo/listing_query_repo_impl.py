from datetime import datetime
from typing import Any, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import to_std_uuid
from src.service.marketplace.app.interface.i_listing_query_repo import (
    IListingQueryRepo,
    ListingFilter,
    SalesSummary,
)
from src.service.marketplace.domain.entity.listing_entity import Listing
from src.service.marketplace.domain.enum.listing_status import ListingSort, ListingStatus
from src.service.marketplace.driven_adapter.model.listing_model import ListingModel
from src.service.marketplace.driven_adapter.repo.listing_row_mapper import (
    LISTING_COLUMNS,
    row_to_listing,
)


_SORT_ORDER: dict[ListingSort, tuple[Any, ...]] = {
    ListingSort.NEWEST: (ListingModel.created_at.desc(), ListingModel.id.desc()),
    ListingSort.OLDEST: (ListingModel.created_at.asc(), ListingModel.id.asc()),
    ListingSort.PRICE_LOW: (ListingModel.listing_price_minor.asc(), ListingModel.id.asc()),
    ListingSort.PRICE_HIGH: (ListingModel.listing_price_minor.desc(), ListingModel.id.desc()),
    ListingSort.ENDING_SOON: (
        ListingModel.expires_at.asc().nulls_last(),
        ListingModel.created_at.desc(),
    ),
}


def _not_expired(now: datetime) -> Any:
    return or_(ListingModel.expires_at.is_(None), ListingModel.expires_at > now)


class ListingQueryRepoImpl(IListingQueryRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def get_by_id(self, *, listing_id: UUID) -> Optional[Listing]:
        result = await self.session.execute(
            select(*LISTING_COLUMNS).where(ListingModel.id == to_std_uuid(listing_id))
        )
        row = result.first()
        return row_to_listing(row) if row else None

    @Logger.io
    async def list_listings(
        self, *, listing_filter: ListingFilter, now: datetime
    ) -> Tuple[List[Listing], int]:
        conditions = [ListingModel.status == listing_filter.status.value, _not_expired(now)]
        if listing_filter.seller_address:
            conditions.append(ListingModel.seller_address == listing_filter.seller_address)
        if listing_filter.min_price_minor is not None:
            conditions.append(ListingModel.listing_price_minor >= listing_filter.min_price_minor)
        if listing_filter.max_price_minor is not None:
            conditions.append(ListingModel.listing_price_minor <= listing_filter.max_price_minor)

        count_result = await self.session.execute(
            select(func.count()).select_from(ListingModel).where(*conditions)
        )
        total = count_result.scalar_one()

        result = await self.session.execute(
            select(*LISTING_COLUMNS)
            .where(*conditions)
            .order_by(*_SORT_ORDER[listing_filter.sort_by])
            .limit(listing_filter.limit)
            .offset(listing_filter.offset)
        )
        return [row_to_listing(row) for row in result], int(total)

    @Logger.io
    async def list_by_seller(self, *, seller_address: str) -> List[Listing]:
        result = await self.session.execute(
            select(*LISTING_COLUMNS)
            .where(ListingModel.seller_address == seller_address)
            .order_by(ListingModel.created_at.desc(), ListingModel.id.desc())
        )
        return [row_to_listing(row) for row in result]

    @Logger.io
    async def sales_summary(self, *, now: datetime, since: datetime) -> SalesSummary:
        active_result = await self.session.execute(
            select(func.count())
            .select_from(ListingModel)
            .where(ListingModel.status == ListingStatus.ACTIVE.value, _not_expired(now))
        )
        sales_result = await self.session.execute(
            select(
                func.count(),
                func.coalesce(func.sum(ListingModel.listing_price_minor), 0),
            ).where(
                ListingModel.status == ListingStatus.SOLD.value,
                ListingModel.sold_at >= since,
            )
        )
        recent_sales, volume = sales_result.one()
        return SalesSummary(
            active_listings=int(active_result.scalar_one()),
            recent_sales=int(recent_sales),
            recent_volume_minor=int(volume),
        )
