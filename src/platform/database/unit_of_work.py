"""
Unit of Work - one transaction shared by every repository a use case touches

Usage:
    async with uow_factory() as uow:
        await uow.inventory_ledger.reserve(ticket_type_id=..., quantity=2)
        await uow.order_command_repo.create(order=order)
        await uow.commit()

Leaving the block without commit() rolls everything back.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Any, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.database.orm_db_setting import Database


if TYPE_CHECKING:
    from src.service.inventory.app.interface.i_inventory_ledger import IInventoryLedger
    from src.service.marketplace.app.interface.i_listing_command_repo import (
        IListingCommandRepo,
    )
    from src.service.marketplace.app.interface.i_listing_query_repo import IListingQueryRepo
    from src.service.marketplace.app.interface.i_ticket_ownership_repo import (
        ITicketOwnershipRepo,
    )
    from src.service.reservation.app.interface.i_order_command_repo import IOrderCommandRepo
    from src.service.reservation.app.interface.i_order_query_repo import IOrderQueryRepo


class AbstractUnitOfWork(abc.ABC):
    inventory_ledger: IInventoryLedger
    order_command_repo: IOrderCommandRepo
    order_query_repo: IOrderQueryRepo
    listing_command_repo: IListingCommandRepo
    listing_query_repo: IListingQueryRepo
    ticket_ownership_repo: ITicketOwnershipRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.rollback()

    async def commit(self) -> None:
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(self, database: Database) -> None:
        self._database = database
        self._session_cm: Optional[Any] = None
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        from src.service.inventory.driven_adapter.repo.inventory_ledger_impl import (
            InventoryLedgerImpl,
        )
        from src.service.marketplace.driven_adapter.repo.listing_command_repo_impl import (
            ListingCommandRepoImpl,
        )
        from src.service.marketplace.driven_adapter.repo.listing_query_repo_impl import (
            ListingQueryRepoImpl,
        )
        from src.service.marketplace.driven_adapter.repo.ticket_ownership_repo_impl import (
            TicketOwnershipRepoImpl,
        )
        from src.service.reservation.driven_adapter.repo.order_command_repo_impl import (
            OrderCommandRepoImpl,
        )
        from src.service.reservation.driven_adapter.repo.order_query_repo_impl import (
            OrderQueryRepoImpl,
        )

        self._session_cm = self._database.session()
        self.session = await self._session_cm.__aenter__()

        # Every repo shares the session, hence the transaction
        self.inventory_ledger = InventoryLedgerImpl(session=self.session)
        self.order_command_repo = OrderCommandRepoImpl(session=self.session)
        self.order_query_repo = OrderQueryRepoImpl(session=self.session)
        self.listing_command_repo = ListingCommandRepoImpl(session=self.session)
        self.listing_query_repo = ListingQueryRepoImpl(session=self.session)
        self.ticket_ownership_repo = TicketOwnershipRepoImpl(session=self.session)

        return self

    async def __aexit__(self, *args: Any) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            if self._session_cm is not None:
                await self._session_cm.__aexit__(*args)
            self._session_cm = None
            self.session = None

    async def _commit(self) -> None:
        assert self.session is not None, 'UnitOfWork used outside `async with`'
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()
