from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from uuid_utils import UUID

from src.service.marketplace.domain.entity.listing_entity import Listing
from src.service.marketplace.domain.enum.listing_status import ListingStatus


class IListingCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, listing: Listing) -> Listing:
        """
        Raises:
            ConflictError(ALREADY_LISTED): the ticket already has an active listing
        """

    @abstractmethod
    async def get_by_id(self, *, listing_id: UUID) -> Optional[Listing]:
        pass

    @abstractmethod
    async def get_active_by_ticket(self, *, ticket_id: str) -> Optional[Listing]:
        pass

    @abstractmethod
    async def compare_and_set(
        self,
        *,
        updated: Listing,
        expected_status: ListingStatus,
        not_expired_at: Optional[datetime] = None,
        expired_at: Optional[datetime] = None,
    ) -> Optional[Listing]:
        """
        Persist `updated` iff the stored status is still `expected_status`.

        not_expired_at: also require expires_at IS NULL OR expires_at >= it
        expired_at: also require expires_at < it

        Returns None when the guard fails (another caller won).
        """

    @abstractmethod
    async def list_overdue_ids(self, *, now: datetime, limit: int) -> List[UUID]:
        pass
