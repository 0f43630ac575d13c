from datetime import timedelta
from typing import Any, Optional

from fastapi.testclient import TestClient
from pytest_bdd import when
from pytest_bdd.model import Step

from src.platform.constant.route_constant import (
    LISTING_BUY,
    LISTING_CANCEL,
    LISTINGS,
    MARKETPLACE_CLEANUP_EXPIRED,
)
from test.shared.utils import extract_single_value, extract_table_data
from test.util_constant import ANOTHER_BUYER_ADDRESS, BUYER_ADDRESS, SELLER_ADDRESS


def _list_as(
    client: TestClient,
    context: dict[str, Any],
    *,
    seller_address: str,
    price: int,
    expires_in_minutes: Optional[int] = None,
) -> None:
    payload: dict[str, Any] = {
        'ticketId': context['ticket_id'],
        'sellerAddress': seller_address,
        'listingPriceMinor': price,
    }
    if expires_in_minutes is not None:
        expires_at = context['clock']() + timedelta(minutes=expires_in_minutes)
        payload['expiresAt'] = expires_at.isoformat()
    response = client.post(LISTINGS, json=payload)
    context['response'] = response
    if response.status_code == 201:
        context.setdefault('listing', response.json())


def _buy_as(client: TestClient, context: dict[str, Any], step: Step, address: str) -> None:
    context['response'] = client.post(
        LISTING_BUY.format(listing_id=context['listing']['id']),
        json={'buyerAddress': address, 'transactionHash': extract_single_value(step)},
    )


@when('the seller lists the ticket at price:')
def seller_lists_ticket(step: Step, client: TestClient, context: dict[str, Any]) -> None:
    _list_as(
        client, context, seller_address=SELLER_ADDRESS, price=int(extract_single_value(step))
    )


@when('the buyer lists the ticket at price:')
def buyer_lists_ticket(step: Step, client: TestClient, context: dict[str, Any]) -> None:
    _list_as(client, context, seller_address=BUYER_ADDRESS, price=int(extract_single_value(step)))


@when('the seller lists the ticket at price expiring in minutes:')
def seller_lists_ticket_with_expiry(
    step: Step, client: TestClient, context: dict[str, Any]
) -> None:
    data = extract_table_data(step)
    _list_as(
        client,
        context,
        seller_address=SELLER_ADDRESS,
        price=int(data['price']),
        expires_in_minutes=int(data['minutes']),
    )


@when('the buyer buys the listing with transaction:')
def buyer_buys_listing(step: Step, client: TestClient, context: dict[str, Any]) -> None:
    _buy_as(client, context, step, BUYER_ADDRESS)


@when('another buyer buys the listing with transaction:')
def another_buyer_buys_listing(step: Step, client: TestClient, context: dict[str, Any]) -> None:
    _buy_as(client, context, step, ANOTHER_BUYER_ADDRESS)


@when('the seller buys the listing with transaction:')
def seller_buys_listing(step: Step, client: TestClient, context: dict[str, Any]) -> None:
    _buy_as(client, context, step, SELLER_ADDRESS)


@when('the seller cancels the listing')
def seller_cancels_listing(client: TestClient, context: dict[str, Any]) -> None:
    context['response'] = client.put(
        LISTING_CANCEL.format(listing_id=context['listing']['id']),
        json={'sellerAddress': SELLER_ADDRESS},
    )


@when('the expired listings are cleaned up')
def expired_listings_cleaned_up(client: TestClient, context: dict[str, Any]) -> None:
    context['response'] = client.post(MARKETPLACE_CLEANUP_EXPIRED)
