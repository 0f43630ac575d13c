from abc import ABC, abstractmethod
from typing import Optional

from src.service.marketplace.domain.entity.ticket_ownership_entity import TicketOwnership


class ITicketOwnershipOracle(ABC):
    """Answers "who owns this ticket right now" for listing authorization."""

    @abstractmethod
    async def get_owner(self, *, ticket_id: str) -> Optional[TicketOwnership]:
        """
        Returns:
            The current ownership, or None for an unknown ticket

        Raises:
            UpstreamUnavailableError: the oracle could not answer
        """
