from abc import ABC, abstractmethod
from typing import Optional

from uuid_utils import UUID

from src.service.inventory.domain.entity.ticket_type_entity import TicketType


class IInventoryLedger(ABC):
    """
    Sole writer of TicketType.available_supply.

    reserve/release are single atomic check-and-update operations against the
    store; implementations never read-modify-write across an await.
    """

    @abstractmethod
    async def create(self, *, ticket_type: TicketType) -> TicketType:
        pass

    @abstractmethod
    async def get_by_id(self, *, ticket_type_id: UUID) -> Optional[TicketType]:
        pass

    @abstractmethod
    async def reserve(self, *, ticket_type_id: UUID, quantity: int) -> TicketType:
        """
        Decrement available_supply by quantity iff available_supply >= quantity.

        Raises:
            ConflictError(INSUFFICIENT_INVENTORY): not enough stock, nothing changed
            NotFoundError(TICKET_TYPE_NOT_FOUND): unknown ticket type
        """

    @abstractmethod
    async def release(self, *, ticket_type_id: UUID, quantity: int) -> TicketType:
        """
        Increment available_supply by quantity.

        Raises:
            InvariantViolationError: the increment would exceed total_supply
            NotFoundError(TICKET_TYPE_NOT_FOUND): unknown ticket type
        """
