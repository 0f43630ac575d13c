from datetime import datetime
from typing import Optional

import attrs
from uuid_utils import UUID
import uuid_utils

from src.platform.exception.exceptions import DomainError, ErrorCode


@attrs.define(frozen=True)
class TicketType:
    """
    A sellable ticket tier of an event.

    available_supply is owned by the inventory ledger; nothing else writes it.
    """

    id: UUID
    event_id: str
    name: str
    unit_price_minor: int
    total_supply: int
    available_supply: int
    sale_start_at: Optional[datetime] = None
    sale_end_at: Optional[datetime] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        event_id: str,
        name: str,
        unit_price_minor: int,
        total_supply: int,
        sale_start_at: Optional[datetime] = None,
        sale_end_at: Optional[datetime] = None,
        is_active: bool = True,
        now: datetime,
    ) -> 'TicketType':
        if not event_id:
            raise DomainError('event_id is required')
        if not name:
            raise DomainError('name is required')
        if unit_price_minor < 0:
            raise DomainError('unit_price_minor must be >= 0', code=ErrorCode.INVALID_PRICE)
        if total_supply < 0:
            raise DomainError('total_supply must be >= 0', code=ErrorCode.INVALID_QUANTITY)
        if sale_start_at and sale_end_at and sale_end_at < sale_start_at:
            raise DomainError('sale_end_at must not precede sale_start_at')

        return cls(
            id=uuid_utils.uuid7(),
            event_id=event_id,
            name=name,
            unit_price_minor=unit_price_minor,
            total_supply=total_supply,
            available_supply=total_supply,
            sale_start_at=sale_start_at,
            sale_end_at=sale_end_at,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )

    def is_within_sale_window(self, now: datetime) -> bool:
        if self.sale_start_at and now < self.sale_start_at:
            return False
        if self.sale_end_at and now > self.sale_end_at:
            return False
        return True

    def ensure_on_sale(self, now: datetime) -> None:
        if not self.is_active:
            raise DomainError('Ticket type is not active', code=ErrorCode.TICKET_TYPE_INACTIVE)
        if not self.is_within_sale_window(now):
            raise DomainError(
                'Ticket type is outside its sale window', code=ErrorCode.SALE_WINDOW_CLOSED
            )
