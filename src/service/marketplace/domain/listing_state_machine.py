"""
Listing lifecycle

    active --purchased-------> sold        (ownership moves to the buyer)
    active --seller_cancel---> cancelled
    active --listing_timeout-> expired

Terminal states have no exits.
"""

from src.platform.exception.exceptions import ConflictError, ErrorCode
from src.service.marketplace.domain.enum.listing_status import ListingEvent, ListingStatus


LISTING_TRANSITIONS: dict[tuple[ListingStatus, ListingEvent], ListingStatus] = {
    (ListingStatus.ACTIVE, ListingEvent.PURCHASED): ListingStatus.SOLD,
    (ListingStatus.ACTIVE, ListingEvent.SELLER_CANCEL): ListingStatus.CANCELLED,
    (ListingStatus.ACTIVE, ListingEvent.LISTING_TIMEOUT): ListingStatus.EXPIRED,
}


def resolve_listing_transition(*, current: ListingStatus, event: ListingEvent) -> ListingStatus:
    to_status = LISTING_TRANSITIONS.get((current, event))
    if to_status is not None:
        return to_status
    if current.is_terminal:
        raise ConflictError(f'Listing is {current}, not active', ErrorCode.LISTING_NOT_ACTIVE)
    raise ConflictError(
        f'Event {event} is not allowed from {current}', ErrorCode.INVALID_TRANSITION
    )
