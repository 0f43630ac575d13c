from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from uuid_utils import UUID

from src.service.reservation.domain.entity.order_entity import Order
from src.service.reservation.domain.enum.order_status import OrderStatus


class IOrderQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, order_id: UUID) -> Optional[Order]:
        pass

    @abstractmethod
    async def list_by_buyer(
        self,
        *,
        buyer_address: str,
        status: Optional[OrderStatus],
        limit: int,
        offset: int,
    ) -> Tuple[List[Order], int]:
        """Newest first; returns (page, total matching)."""

    @abstractmethod
    async def sum_quantity_by_status(self, *, ticket_type_id: UUID) -> Dict[OrderStatus, int]:
        pass
