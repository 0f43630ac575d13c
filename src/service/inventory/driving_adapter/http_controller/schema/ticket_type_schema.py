from datetime import datetime
from typing import Optional

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.inventory.domain.entity.ticket_type_entity import TicketType
from src.service.shared_kernel.driving_adapter.schema.camel_model import CamelModel


class TicketTypeCreateRequest(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            'example': {
                'eventId': 'evt-2025-sui-summit',
                'name': 'General Admission',
                'unitPriceMinor': 2500,
                'totalSupply': 100,
                'saleStartAt': '2025-01-01T00:00:00Z',
                'saleEndAt': '2025-03-01T00:00:00Z',
                'isActive': True,
            }
        },
    )

    event_id: str
    name: str
    unit_price_minor: int
    total_supply: int
    sale_start_at: Optional[datetime] = None
    sale_end_at: Optional[datetime] = None
    is_active: bool = True


class TicketTypeResponse(CamelModel):
    id: UtilsUUID7
    event_id: str
    name: str
    unit_price_minor: int
    total_supply: int
    available_supply: int
    sale_start_at: Optional[datetime] = None
    sale_end_at: Optional[datetime] = None
    is_active: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, ticket_type: TicketType) -> 'TicketTypeResponse':
        return cls(
            id=ticket_type.id,
            event_id=ticket_type.event_id,
            name=ticket_type.name,
            unit_price_minor=ticket_type.unit_price_minor,
            total_supply=ticket_type.total_supply,
            available_supply=ticket_type.available_supply,
            sale_start_at=ticket_type.sale_start_at,
            sale_end_at=ticket_type.sale_end_at,
            is_active=ticket_type.is_active,
            created_at=ticket_type.created_at,
        )


class AvailabilityResponse(CamelModel):
    event_id: str
    ticket_type_id: UtilsUUID7
    available_supply: int
    total_supply: int
    reserved_supply: int
    sold_supply: int
    unit_price_minor: int
    is_available: bool
