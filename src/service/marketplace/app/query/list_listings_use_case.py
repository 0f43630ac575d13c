from typing import List, Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.clock.utc_clock import Clock
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import DomainError, ErrorCode
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_listing_query_repo import ListingFilter
from src.service.marketplace.domain.entity.listing_entity import Listing
from src.service.marketplace.domain.enum.listing_status import ListingSort, ListingStatus
from src.service.shared_kernel.domain.value_object.wallet_address import (
    normalize_wallet_address,
)


@attrs.define(frozen=True)
class ListingsPage:
    listings: List[Listing]
    total: int
    has_more: bool


class ListListingsUseCase:
    """Browse listings; anything past its expires_at is hidden even before the sweep."""

    def __init__(self, *, uow_factory: UnitOfWorkFactory, clock: Clock) -> None:
        self.uow_factory = uow_factory
        self.clock = clock

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        clock: Clock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(uow_factory=uow_factory, clock=clock)

    @Logger.io
    async def list_listings(
        self,
        *,
        status: ListingStatus = ListingStatus.ACTIVE,
        seller_address: Optional[str] = None,
        min_price_minor: Optional[int] = None,
        max_price_minor: Optional[int] = None,
        sort_by: ListingSort = ListingSort.NEWEST,
        limit: int = 20,
        offset: int = 0,
    ) -> ListingsPage:
        if (
            min_price_minor is not None
            and max_price_minor is not None
            and min_price_minor > max_price_minor
        ):
            raise DomainError('min price exceeds max price', code=ErrorCode.INVALID_PRICE)

        listing_filter = ListingFilter(
            status=status,
            seller_address=(
                normalize_wallet_address(seller_address, field='seller_address')
                if seller_address
                else None
            ),
            min_price_minor=min_price_minor,
            max_price_minor=max_price_minor,
            sort_by=sort_by,
            limit=limit,
            offset=offset,
        )
        async with self.uow_factory() as uow:
            listings, total = await uow.listing_query_repo.list_listings(
                listing_filter=listing_filter, now=self.clock()
            )
        return ListingsPage(
            listings=listings, total=total, has_more=offset + len(listings) < total
        )
