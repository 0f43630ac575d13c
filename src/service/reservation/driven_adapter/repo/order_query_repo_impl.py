from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import to_std_uuid
from src.service.reservation.app.interface.i_order_query_repo import IOrderQueryRepo
from src.service.reservation.domain.entity.order_entity import Order
from src.service.reservation.domain.enum.order_status import OrderStatus
from src.service.reservation.driven_adapter.model.order_model import OrderModel
from src.service.reservation.driven_adapter.repo.order_row_mapper import (
    ORDER_COLUMNS,
    row_to_order,
)


class OrderQueryRepoImpl(IOrderQueryRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def get_by_id(self, *, order_id: UUID) -> Optional[Order]:
        result = await self.session.execute(
            select(*ORDER_COLUMNS).where(OrderModel.id == to_std_uuid(order_id))
        )
        row = result.first()
        return row_to_order(row) if row else None

    @Logger.io
    async def list_by_buyer(
        self,
        *,
        buyer_address: str,
        status: Optional[OrderStatus],
        limit: int,
        offset: int,
    ) -> Tuple[List[Order], int]:
        conditions = [OrderModel.buyer_address == buyer_address]
        if status is not None:
            conditions.append(OrderModel.status == status.value)

        count_result = await self.session.execute(
            select(func.count()).select_from(OrderModel).where(*conditions)
        )
        total = count_result.scalar_one()
        result = await self.session.execute(
            select(*ORDER_COLUMNS)
            .where(*conditions)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return [row_to_order(row) for row in result], int(total)

    @Logger.io
    async def sum_quantity_by_status(self, *, ticket_type_id: UUID) -> Dict[OrderStatus, int]:
        result = await self.session.execute(
            select(OrderModel.status, func.sum(OrderModel.quantity))
            .where(OrderModel.ticket_type_id == to_std_uuid(ticket_type_id))
            .group_by(OrderModel.status)
        )
        totals = {status: 0 for status in OrderStatus}
        for status, quantity in result:
            totals[OrderStatus(status)] = int(quantity or 0)
        return totals
