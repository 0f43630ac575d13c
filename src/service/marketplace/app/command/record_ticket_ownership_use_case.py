from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.clock.utc_clock import Clock
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import DomainError, ErrorCode
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.domain.entity.ticket_ownership_entity import TicketOwnership
from src.service.shared_kernel.domain.value_object.wallet_address import (
    normalize_wallet_address,
)


class RecordTicketOwnershipUseCase:
    """Register the holder of a freshly minted ticket in the ownership registry."""

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
    async def record_ownership(
        self, *, ticket_id: str, owner_address: str, price_minor: Optional[int] = None
    ) -> TicketOwnership:
        if not ticket_id:
            raise DomainError('ticket_id is required')
        if price_minor is not None and price_minor < 0:
            raise DomainError('price must be >= 0', code=ErrorCode.INVALID_PRICE)

        ownership = TicketOwnership(
            ticket_id=ticket_id,
            owner_address=normalize_wallet_address(owner_address, field='owner_address'),
            price_minor=price_minor,
            updated_at=self.clock(),
        )
        async with self.uow_factory() as uow:
            await uow.ticket_ownership_repo.record(ownership=ownership)
            await uow.commit()
        return ownership
