from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.domain.entity.listing_entity import Listing
from src.service.shared_kernel.domain.value_object.wallet_address import (
    normalize_wallet_address,
)


class GetSellerListingsUseCase:
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
    async def get_seller_listings(self, *, seller_address: str) -> List[Listing]:
        seller = normalize_wallet_address(seller_address, field='seller_address')
        async with self.uow_factory() as uow:
            return await uow.listing_query_repo.list_by_seller(seller_address=seller)
