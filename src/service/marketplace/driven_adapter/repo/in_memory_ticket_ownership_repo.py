from typing import Callable, Optional

from src.platform.database.in_memory_store import InMemoryStore, UndoAction
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_ticket_ownership_repo import ITicketOwnershipRepo
from src.service.marketplace.domain.entity.ticket_ownership_entity import TicketOwnership


class InMemoryTicketOwnershipRepo(ITicketOwnershipRepo):
    def __init__(
        self, *, store: InMemoryStore, record_undo: Callable[[UndoAction], None]
    ) -> None:
        self._store = store
        self._record_undo = record_undo

    def _put(self, ownership: TicketOwnership) -> None:
        previous = self._store.ticket_ownerships.get(ownership.ticket_id)
        self._store.ticket_ownerships[ownership.ticket_id] = ownership

        def _undo() -> None:
            if self._store.ticket_ownerships.get(ownership.ticket_id) is not ownership:
                return
            if previous is None:
                self._store.ticket_ownerships.pop(ownership.ticket_id, None)
            else:
                self._store.ticket_ownerships[ownership.ticket_id] = previous

        self._record_undo(_undo)

    @Logger.io
    async def get(self, *, ticket_id: str) -> Optional[TicketOwnership]:
        return self._store.ticket_ownerships.get(ticket_id)

    @Logger.io
    async def record(self, *, ownership: TicketOwnership) -> TicketOwnership:
        self._put(ownership)
        return ownership

    @Logger.io
    async def transfer(self, *, from_address: str, ownership: TicketOwnership) -> bool:
        current = self._store.ticket_ownerships.get(ownership.ticket_id)
        if current is not None and current.owner_address != from_address:
            return False
        self._put(ownership)
        return True
