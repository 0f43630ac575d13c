"""
Wire Modules Configuration

Every module whose `depends` classmethods use `Provide[Container.x]`.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.inventory.app.command import create_ticket_type_use_case
from src.service.inventory.app.query import get_availability_use_case, get_ticket_type_use_case
from src.service.marketplace.app.command import (
    buy_listing_use_case,
    cancel_listing_use_case,
    create_listing_use_case,
    expire_listings_use_case,
    record_ticket_ownership_use_case,
)
from src.service.marketplace.app.query import (
    get_listing_use_case,
    get_marketplace_stats_use_case,
    get_seller_listings_use_case,
    list_listings_use_case,
)
from src.service.reservation.app.command import (
    cancel_reservation_use_case,
    confirm_reservation_use_case,
    create_reservation_use_case,
    expire_reservations_use_case,
)
from src.service.reservation.app.query import (
    get_reservation_use_case,
    list_buyer_orders_use_case,
)


WIRE_MODULES: list[ModuleType] = [
    create_ticket_type_use_case,
    get_ticket_type_use_case,
    get_availability_use_case,
    create_reservation_use_case,
    confirm_reservation_use_case,
    cancel_reservation_use_case,
    expire_reservations_use_case,
    get_reservation_use_case,
    list_buyer_orders_use_case,
    create_listing_use_case,
    buy_listing_use_case,
    cancel_listing_use_case,
    expire_listings_use_case,
    record_ticket_ownership_use_case,
    get_listing_use_case,
    list_listings_use_case,
    get_seller_listings_use_case,
    get_marketplace_stats_use_case,
]
