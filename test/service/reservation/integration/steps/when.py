from typing import Any

from fastapi.testclient import TestClient
from pytest_bdd import when
from pytest_bdd.model import Step

from src.platform.constant.route_constant import (
    BOOKING_CLEANUP_EXPIRED,
    BOOKING_PURCHASE,
    BOOKING_RESERVATION,
)
from test.shared.utils import extract_single_value, reserve
from test.util_constant import ANOTHER_BUYER_ADDRESS, BUYER_ADDRESS


def _reserve_as(client: TestClient, context: dict[str, Any], step: Step, address: str) -> None:
    response = reserve(
        client,
        ticket_type=context['ticket_type'],
        quantity=int(extract_single_value(step)),
        buyer_address=address,
    )
    context['response'] = response
    if response.status_code == 201:
        context.setdefault('orders', []).append(response.json())
        # The first hold is "the order" of the scenario
        context.setdefault('order', response.json())


def _cancel_as(client: TestClient, context: dict[str, Any], address: str) -> None:
    context['response'] = client.request(
        'DELETE',
        BOOKING_RESERVATION.format(order_id=context['order']['id']),
        json={'requesterAddress': address},
    )


@when('the buyer reserves tickets:')
def buyer_reserves_tickets(step: Step, client: TestClient, context: dict[str, Any]) -> None:
    _reserve_as(client, context, step, BUYER_ADDRESS)


@when('another buyer reserves tickets:')
def another_buyer_reserves_tickets(
    step: Step, client: TestClient, context: dict[str, Any]
) -> None:
    _reserve_as(client, context, step, ANOTHER_BUYER_ADDRESS)


@when('the buyer confirms the order with signature:')
def buyer_confirms_order(step: Step, client: TestClient, context: dict[str, Any]) -> None:
    context['response'] = client.post(
        BOOKING_PURCHASE,
        json={
            'orderId': context['order']['id'],
            'paymentSignature': extract_single_value(step),
        },
    )


@when('the buyer cancels the order')
def buyer_cancels_order(client: TestClient, context: dict[str, Any]) -> None:
    _cancel_as(client, context, BUYER_ADDRESS)


@when('another buyer cancels the order')
def another_buyer_cancels_order(client: TestClient, context: dict[str, Any]) -> None:
    _cancel_as(client, context, ANOTHER_BUYER_ADDRESS)


@when('the expired reservations are cleaned up')
def expired_reservations_cleaned_up(client: TestClient, context: dict[str, Any]) -> None:
    context['response'] = client.post(BOOKING_CLEANUP_EXPIRED)
