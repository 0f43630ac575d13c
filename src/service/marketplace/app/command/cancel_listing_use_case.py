from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.clock.utc_clock import Clock
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    ConflictError,
    ErrorCode,
    ForbiddenError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.command.listing_transition import apply_listing_transition
from src.service.marketplace.domain.entity.listing_entity import Listing
from src.service.marketplace.domain.enum.listing_status import ListingEvent
from src.service.shared_kernel.domain.value_object.wallet_address import (
    normalize_wallet_address,
)


class CancelListingUseCase:
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
    async def cancel_listing(self, *, listing_id: UUID, seller_address: str) -> Listing:
        seller = normalize_wallet_address(seller_address, field='seller_address')
        now = self.clock()

        async with self.uow_factory() as uow:
            listing = await uow.listing_command_repo.get_by_id(listing_id=listing_id)
            if listing is None:
                raise NotFoundError('Listing not found', ErrorCode.LISTING_NOT_FOUND)
            if not listing.is_listed_by(seller):
                raise ForbiddenError('Only the seller can cancel this listing')

            cancelled = await apply_listing_transition(
                uow=uow, listing=listing, event=ListingEvent.SELLER_CANCEL, now=now
            )
            if cancelled is None:
                raise ConflictError(
                    'Listing was finalized concurrently', ErrorCode.LISTING_NOT_ACTIVE
                )
            await uow.commit()

        Logger.base.info(f'🗑️ [LISTING] {listing_id} cancelled by seller')
        return cancelled
