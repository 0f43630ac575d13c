from datetime import timedelta
from typing import Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.clock.utc_clock import Clock
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger


RECENT_SALES_WINDOW = timedelta(hours=24)


@attrs.define(frozen=True)
class MarketplaceStats:
    total_listings: int
    total_volume_minor: int
    avg_price_minor: int
    recent_sales: int


class GetMarketplaceStatsUseCase:
    """Active listing count plus sales volume over the last 24 hours."""

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
    async def get_stats(self) -> MarketplaceStats:
        now = self.clock()
        async with self.uow_factory() as uow:
            summary = await uow.listing_query_repo.sales_summary(
                now=now, since=now - RECENT_SALES_WINDOW
            )

        avg_price = (
            round(summary.recent_volume_minor / summary.recent_sales)
            if summary.recent_sales
            else 0
        )
        return MarketplaceStats(
            total_listings=summary.active_listings,
            total_volume_minor=summary.recent_volume_minor,
            avg_price_minor=avg_price,
            recent_sales=summary.recent_sales,
        )
