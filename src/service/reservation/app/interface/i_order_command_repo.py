from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from uuid_utils import UUID

from src.service.reservation.domain.entity.order_entity import Order
from src.service.reservation.domain.enum.order_status import OrderStatus


class IOrderCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, order: Order) -> Order:
        pass

    @abstractmethod
    async def get_by_id(self, *, order_id: UUID) -> Optional[Order]:
        pass

    @abstractmethod
    async def compare_and_set(
        self,
        *,
        updated: Order,
        expected_status: OrderStatus,
        hold_active_at: Optional[datetime] = None,
        hold_elapsed_at: Optional[datetime] = None,
    ) -> Optional[Order]:
        """
        Persist `updated` iff the stored order still has `expected_status`.

        hold_active_at: additionally require expires_at >= hold_active_at
        hold_elapsed_at: additionally require expires_at < hold_elapsed_at

        Returns the stored order, or None when another caller won the race.
        """

    @abstractmethod
    async def list_overdue_ids(self, *, now: datetime, limit: int) -> List[UUID]:
        """Ids of pending orders with expires_at < now, oldest deadline first."""

    @abstractmethod
    async def sum_active_quantity_for_buyer(
        self, *, buyer_address: str, ticket_type_id: UUID
    ) -> int:
        """Tickets the buyer holds (pending) or owns (confirmed) for a ticket type."""
