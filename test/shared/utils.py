from typing import Any, Dict

from fastapi.testclient import TestClient

from src.platform.constant.route_constant import (
    BOOKING_RESERVE,
    MARKETPLACE_OWNERSHIP,
    TICKET_TYPE_CREATE,
)
from test.util_constant import EVENT_ID, TICKET_TYPE_NAME, UNIT_PRICE_MINOR


def extract_table_data(step) -> Dict[str, Any]:
    rows = step.data_table.rows
    headers = [cell.value for cell in rows[0].cells]
    values = [cell.value for cell in rows[1].cells]
    return dict(zip(headers, values, strict=True))


def extract_single_value(step, row_index: int = 0, col_index: int = 0) -> str:
    rows = step.data_table.rows
    return rows[row_index].cells[col_index].value


def assert_response_status(response, expected_status: int, message: str | None = None):
    response_text = getattr(response, 'text', getattr(response, 'content', 'N/A'))
    assert response.status_code == expected_status, (
        message or f'Expected {expected_status}, got {response.status_code}: {response_text}'
    )


def create_ticket_type(
    client: TestClient,
    *,
    total_supply: int,
    event_id: str = EVENT_ID,
    unit_price_minor: int = UNIT_PRICE_MINOR,
    is_active: bool = True,
) -> Dict[str, Any]:
    response = client.post(
        TICKET_TYPE_CREATE,
        json={
            'eventId': event_id,
            'name': TICKET_TYPE_NAME,
            'unitPriceMinor': unit_price_minor,
            'totalSupply': total_supply,
            'isActive': is_active,
        },
    )
    assert_response_status(response, 201, 'Failed to create ticket type')
    return response.json()


def reserve(
    client: TestClient, *, ticket_type: Dict[str, Any], quantity: int, buyer_address: str
):
    return client.post(
        BOOKING_RESERVE,
        json={
            'eventId': ticket_type['eventId'],
            'ticketTypeId': ticket_type['id'],
            'quantity': quantity,
            'buyerAddress': buyer_address,
        },
    )


def record_ownership(
    client: TestClient, *, ticket_id: str, owner_address: str, price_minor: int | None = None
) -> None:
    response = client.post(
        MARKETPLACE_OWNERSHIP,
        json={'ticketId': ticket_id, 'ownerAddress': owner_address, 'priceMinor': price_minor},
    )
    assert_response_status(response, 204, 'Failed to record ticket ownership')
