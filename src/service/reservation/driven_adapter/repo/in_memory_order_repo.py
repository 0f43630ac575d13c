from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from uuid_utils import UUID

from src.platform.database.in_memory_store import InMemoryStore, UndoAction
from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.interface.i_order_command_repo import IOrderCommandRepo
from src.service.reservation.app.interface.i_order_query_repo import IOrderQueryRepo
from src.service.reservation.domain.entity.order_entity import Order
from src.service.reservation.domain.enum.order_status import OrderStatus


_ACTIVE_STATUSES = (OrderStatus.PENDING, OrderStatus.CONFIRMED)


class InMemoryOrderRepo(IOrderCommandRepo, IOrderQueryRepo):
    def __init__(
        self, *, store: InMemoryStore, record_undo: Callable[[UndoAction], None]
    ) -> None:
        self._store = store
        self._record_undo = record_undo

    @Logger.io
    async def create(self, *, order: Order) -> Order:
        self._store.orders[order.id] = order
        self._record_undo(lambda: self._store.orders.pop(order.id, None))
        return order

    @Logger.io
    async def get_by_id(self, *, order_id: UUID) -> Optional[Order]:
        return self._store.orders.get(order_id)

    @Logger.io
    async def compare_and_set(
        self,
        *,
        updated: Order,
        expected_status: OrderStatus,
        hold_active_at: Optional[datetime] = None,
        hold_elapsed_at: Optional[datetime] = None,
    ) -> Optional[Order]:
        current = self._store.orders.get(updated.id)
        if current is None or current.status is not expected_status:
            return None
        if hold_active_at is not None and not current.expires_at >= hold_active_at:
            return None
        if hold_elapsed_at is not None and not current.expires_at < hold_elapsed_at:
            return None

        self._store.orders[updated.id] = updated

        def _undo() -> None:
            if self._store.orders.get(updated.id) is updated:
                self._store.orders[updated.id] = current

        self._record_undo(_undo)
        return updated

    @Logger.io
    async def list_overdue_ids(self, *, now: datetime, limit: int) -> List[UUID]:
        overdue = sorted(
            (
                order
                for order in self._store.orders.values()
                if order.status is OrderStatus.PENDING and order.expires_at < now
            ),
            key=lambda order: order.expires_at,
        )
        return [order.id for order in overdue[:limit]]

    @Logger.io
    async def sum_active_quantity_for_buyer(
        self, *, buyer_address: str, ticket_type_id: UUID
    ) -> int:
        return sum(
            order.quantity
            for order in self._store.orders.values()
            if order.buyer_address == buyer_address
            and order.ticket_type_id == ticket_type_id
            and order.status in _ACTIVE_STATUSES
        )

    @Logger.io
    async def list_by_buyer(
        self,
        *,
        buyer_address: str,
        status: Optional[OrderStatus],
        limit: int,
        offset: int,
    ) -> Tuple[List[Order], int]:
        matching = sorted(
            (
                order
                for order in self._store.orders.values()
                if order.buyer_address == buyer_address
                and (status is None or order.status is status)
            ),
            key=lambda order: (order.created_at, str(order.id)),
            reverse=True,
        )
        return matching[offset : offset + limit], len(matching)

    @Logger.io
    async def sum_quantity_by_status(self, *, ticket_type_id: UUID) -> Dict[OrderStatus, int]:
        totals = {status: 0 for status in OrderStatus}
        for order in self._store.orders.values():
            if order.ticket_type_id == ticket_type_id:
                totals[order.status] += order.quantity
        return totals
