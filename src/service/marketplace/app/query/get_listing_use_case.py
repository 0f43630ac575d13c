from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import ErrorCode, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.domain.entity.listing_entity import Listing


class GetListingUseCase:
    def __init__(self, *, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def get_listing(self, *, listing_id: UUID) -> Listing:
        async with self.uow_factory() as uow:
            listing = await uow.listing_query_repo.get_by_id(listing_id=listing_id)
        if listing is None:
            raise NotFoundError('Listing not found', ErrorCode.LISTING_NOT_FOUND)
        return listing
