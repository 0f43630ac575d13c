"""
Single-process storage backend (STORE_BACKEND=memory)

The store is single-writer by construction: every repository primitive is a
check-and-set that runs without an await in between, so on one event loop no
two coroutines can interleave inside it. Each InMemoryUnitOfWork records an
undo entry per write and replays them in reverse on rollback.

Only valid for a single service instance; multi-instance deployments use the
SQLAlchemy backend.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

import attrs

from src.platform.database.unit_of_work import AbstractUnitOfWork


if TYPE_CHECKING:
    from uuid_utils import UUID

    from src.service.inventory.domain.entity.ticket_type_entity import TicketType
    from src.service.marketplace.domain.entity.listing_entity import Listing
    from src.service.marketplace.domain.entity.ticket_ownership_entity import TicketOwnership
    from src.service.reservation.domain.entity.order_entity import Order


UndoAction = Callable[[], None]


@attrs.define
class InMemoryStore:
    ticket_types: dict[UUID, TicketType] = attrs.field(factory=dict)
    orders: dict[UUID, Order] = attrs.field(factory=dict)
    listings: dict[UUID, Listing] = attrs.field(factory=dict)
    ticket_ownerships: dict[str, TicketOwnership] = attrs.field(factory=dict)

    def clear(self) -> None:
        self.ticket_types.clear()
        self.orders.clear()
        self.listings.clear()
        self.ticket_ownerships.clear()


class InMemoryUnitOfWork(AbstractUnitOfWork):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._undo_log: list[UndoAction] = []

    async def __aenter__(self) -> InMemoryUnitOfWork:
        from src.service.inventory.driven_adapter.repo.in_memory_inventory_ledger import (
            InMemoryInventoryLedger,
        )
        from src.service.marketplace.driven_adapter.repo.in_memory_listing_repo import (
            InMemoryListingRepo,
        )
        from src.service.marketplace.driven_adapter.repo.in_memory_ticket_ownership_repo import (
            InMemoryTicketOwnershipRepo,
        )
        from src.service.reservation.driven_adapter.repo.in_memory_order_repo import (
            InMemoryOrderRepo,
        )

        self._undo_log = []
        record = self._undo_log.append

        self.inventory_ledger = InMemoryInventoryLedger(store=self._store, record_undo=record)
        order_repo = InMemoryOrderRepo(store=self._store, record_undo=record)
        self.order_command_repo = order_repo
        self.order_query_repo = order_repo
        listing_repo = InMemoryListingRepo(store=self._store, record_undo=record)
        self.listing_command_repo = listing_repo
        self.listing_query_repo = listing_repo
        self.ticket_ownership_repo = InMemoryTicketOwnershipRepo(
            store=self._store, record_undo=record
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        await super().__aexit__(*args)

    async def _commit(self) -> None:
        self._undo_log.clear()

    async def rollback(self) -> None:
        while self._undo_log:
            self._undo_log.pop()()
