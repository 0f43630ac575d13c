from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import from_std_uuid, to_std_uuid
from src.service.reservation.app.interface.i_order_command_repo import IOrderCommandRepo
from src.service.reservation.domain.entity.order_entity import Order
from src.service.reservation.domain.enum.order_status import OrderStatus
from src.service.reservation.driven_adapter.model.order_model import OrderModel
from src.service.reservation.driven_adapter.repo.order_row_mapper import (
    ORDER_COLUMNS,
    row_to_order,
)


class OrderCommandRepoImpl(IOrderCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def create(self, *, order: Order) -> Order:
        self.session.add(
            OrderModel(
                id=to_std_uuid(order.id),
                event_id=order.event_id,
                ticket_type_id=to_std_uuid(order.ticket_type_id),
                buyer_address=order.buyer_address,
                quantity=order.quantity,
                total_price_minor=order.total_price_minor,
                status=order.status.value,
                payment_signature=order.payment_signature,
                created_at=order.created_at,
                expires_at=order.expires_at,
                confirmed_at=order.confirmed_at,
                updated_at=order.updated_at or order.created_at,
            )
        )
        await self.session.flush()
        return order

    @Logger.io
    async def get_by_id(self, *, order_id: UUID) -> Optional[Order]:
        result = await self.session.execute(
            select(*ORDER_COLUMNS).where(OrderModel.id == to_std_uuid(order_id))
        )
        row = result.first()
        return row_to_order(row) if row else None

    @Logger.io
    async def compare_and_set(
        self,
        *,
        updated: Order,
        expected_status: OrderStatus,
        hold_active_at: Optional[datetime] = None,
        hold_elapsed_at: Optional[datetime] = None,
    ) -> Optional[Order]:
        conditions = [
            OrderModel.id == to_std_uuid(updated.id),
            OrderModel.status == expected_status.value,
        ]
        if hold_active_at is not None:
            conditions.append(OrderModel.expires_at >= hold_active_at)
        if hold_elapsed_at is not None:
            conditions.append(OrderModel.expires_at < hold_elapsed_at)

        result = await self.session.execute(
            update(OrderModel)
            .where(*conditions)
            .values(
                status=updated.status.value,
                payment_signature=updated.payment_signature,
                confirmed_at=updated.confirmed_at,
                updated_at=updated.updated_at,
            )
            .returning(*ORDER_COLUMNS)
            .execution_options(synchronize_session=False)
        )
        row = result.first()
        return row_to_order(row) if row else None

    @Logger.io
    async def list_overdue_ids(self, *, now: datetime, limit: int) -> List[UUID]:
        result = await self.session.execute(
            select(OrderModel.id)
            .where(
                OrderModel.status == OrderStatus.PENDING.value,
                OrderModel.expires_at < now,
            )
            .order_by(OrderModel.expires_at)
            .limit(limit)
        )
        return [from_std_uuid(order_id) for order_id in result.scalars()]

    @Logger.io
    async def sum_active_quantity_for_buyer(
        self, *, buyer_address: str, ticket_type_id: UUID
    ) -> int:
        result = await self.session.execute(
            select(func.coalesce(func.sum(OrderModel.quantity), 0)).where(
                OrderModel.buyer_address == buyer_address,
                OrderModel.ticket_type_id == to_std_uuid(ticket_type_id),
                OrderModel.status.in_([OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value]),
            )
        )
        return int(result.scalar_one())
