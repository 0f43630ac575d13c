from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.inventory.app.command.create_ticket_type_use_case import (
    CreateTicketTypeUseCase,
)
from src.service.inventory.app.query.get_ticket_type_use_case import GetTicketTypeUseCase
from src.service.inventory.driving_adapter.http_controller.schema.ticket_type_schema import (
    TicketTypeCreateRequest,
    TicketTypeResponse,
)


router = APIRouter()


@router.post('/ticket-types', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_ticket_type(
    request: TicketTypeCreateRequest,
    use_case: CreateTicketTypeUseCase = Depends(CreateTicketTypeUseCase.depends),
) -> TicketTypeResponse:
    ticket_type = await use_case.create_ticket_type(
        event_id=request.event_id,
        name=request.name,
        unit_price_minor=request.unit_price_minor,
        total_supply=request.total_supply,
        sale_start_at=request.sale_start_at,
        sale_end_at=request.sale_end_at,
        is_active=request.is_active,
    )
    return TicketTypeResponse.from_entity(ticket_type)


@router.get('/ticket-types/{ticket_type_id}')
@Logger.io
async def get_ticket_type(
    ticket_type_id: UtilsUUID7,
    use_case: GetTicketTypeUseCase = Depends(GetTicketTypeUseCase.depends),
) -> TicketTypeResponse:
    ticket_type = await use_case.get_ticket_type(ticket_type_id=ticket_type_id)
    return TicketTypeResponse.from_entity(ticket_type)
