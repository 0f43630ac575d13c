from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import ErrorCode, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.inventory.domain.entity.ticket_type_entity import TicketType


class GetTicketTypeUseCase:
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
    async def get_ticket_type(self, *, ticket_type_id: UUID) -> TicketType:
        async with self.uow_factory() as uow:
            ticket_type = await uow.inventory_ledger.get_by_id(ticket_type_id=ticket_type_id)
        if ticket_type is None:
            raise NotFoundError('Ticket type not found', ErrorCode.TICKET_TYPE_NOT_FOUND)
        return ticket_type
