from datetime import datetime
from typing import Optional

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.metrics.ticketing_metrics import metrics
from src.service.marketplace.domain.entity.listing_entity import Listing
from src.service.marketplace.domain.enum.listing_status import ListingEvent


async def apply_listing_transition(
    *,
    uow: AbstractUnitOfWork,
    listing: Listing,
    event: ListingEvent,
    now: datetime,
    buyer_address: Optional[str] = None,
    sale_transaction_hash: Optional[str] = None,
    not_expired_at: Optional[datetime] = None,
    expired_at: Optional[datetime] = None,
) -> Optional[Listing]:
    """Compare-and-set one listing transition; None when another caller won."""
    updated = listing.apply(
        event,
        now=now,
        buyer_address=buyer_address,
        sale_transaction_hash=sale_transaction_hash,
    )
    stored = await uow.listing_command_repo.compare_and_set(
        updated=updated,
        expected_status=listing.status,
        not_expired_at=not_expired_at,
        expired_at=expired_at,
    )
    if stored is not None:
        metrics.record_listing_transition(from_status=listing.status, to_status=stored.status)
    return stored
