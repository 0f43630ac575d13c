from typing import List, Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.service.reservation.domain.entity.order_entity import Order
from src.service.reservation.domain.enum.order_status import OrderStatus
from src.service.shared_kernel.domain.value_object.wallet_address import (
    normalize_wallet_address,
)


@attrs.define(frozen=True)
class BuyerOrdersPage:
    orders: List[Order]
    total: int
    limit: int
    offset: int


class ListBuyerOrdersUseCase:
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
    async def list_buyer_orders(
        self,
        *,
        buyer_address: str,
        status: Optional[OrderStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> BuyerOrdersPage:
        buyer = normalize_wallet_address(buyer_address, field='buyer_address')
        async with self.uow_factory() as uow:
            orders, total = await uow.order_query_repo.list_by_buyer(
                buyer_address=buyer, status=status, limit=limit, offset=offset
            )
        return BuyerOrdersPage(orders=orders, total=total, limit=limit, offset=offset)
