import time
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.clock.utc_clock import Clock
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.marketplace.app.command.listing_transition import apply_listing_transition
from src.service.marketplace.domain.entity.listing_entity import Listing
from src.service.marketplace.domain.enum.listing_status import ListingEvent, ListingStatus


class ExpireListingsUseCase:
    """TTL sweep for listings: active -> expired once expires_at has passed."""

    def __init__(self, *, uow_factory: UnitOfWorkFactory, clock: Clock, batch_size: int) -> None:
        self.uow_factory = uow_factory
        self.clock = clock
        self.batch_size = batch_size
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        clock: Clock = Depends(Provide[Container.clock]),
        batch_size: int = Depends(Provide[Container.config_service.provided.SWEEP_BATCH_SIZE]),
    ) -> Self:
        return cls(uow_factory=uow_factory, clock=clock, batch_size=batch_size)

    async def expire_overdue(self) -> int:
        started = time.perf_counter()
        with self.tracer.start_as_current_span('use_case.expire_overdue_listings') as span:
            now = self.clock()
            async with self.uow_factory() as uow:
                overdue_ids = await uow.listing_command_repo.list_overdue_ids(
                    now=now, limit=self.batch_size
                )

            expired = 0
            for listing_id in overdue_ids:
                try:
                    if await self._expire_one(listing_id=listing_id) is not None:
                        expired += 1
                except CustomBaseError as e:
                    Logger.base.warning(f'⚠️ [SWEEP] listing {listing_id} skipped: {e.message}')

            span.set_attribute('sweep.expired', expired)
            metrics.record_sweep(
                entity='listing',
                result='ok',
                expired=expired,
                duration=time.perf_counter() - started,
            )
            if expired:
                Logger.base.info(f'🧹 [SWEEP] expired {expired} listing(s)')
            return expired

    async def _expire_one(self, *, listing_id: UUID) -> Optional[Listing]:
        now = self.clock()
        async with self.uow_factory() as uow:
            listing = await uow.listing_command_repo.get_by_id(listing_id=listing_id)
            if listing is None or listing.status is not ListingStatus.ACTIVE:
                return None

            expired = await apply_listing_transition(
                uow=uow,
                listing=listing,
                event=ListingEvent.LISTING_TIMEOUT,
                now=now,
                expired_at=now,
            )
            await uow.commit()
            return expired
