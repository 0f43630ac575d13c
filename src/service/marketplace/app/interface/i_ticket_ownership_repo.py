from abc import ABC, abstractmethod
from typing import Optional

from src.service.marketplace.domain.entity.ticket_ownership_entity import TicketOwnership


class ITicketOwnershipRepo(ABC):
    """Store-backed registry of who holds each minted ticket."""

    @abstractmethod
    async def get(self, *, ticket_id: str) -> Optional[TicketOwnership]:
        pass

    @abstractmethod
    async def record(self, *, ownership: TicketOwnership) -> TicketOwnership:
        """Insert or overwrite the owner of a ticket."""

    @abstractmethod
    async def transfer(self, *, from_address: str, ownership: TicketOwnership) -> bool:
        """
        Hand the ticket to `ownership.owner_address`.

        An untracked ticket starts being tracked. Returns False, writing
        nothing, when someone other than `from_address` holds it.
        """
