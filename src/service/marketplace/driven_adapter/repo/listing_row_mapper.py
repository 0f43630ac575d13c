from typing import Any

from src.platform.clock.utc_clock import ensure_utc
from src.platform.types.uuid7_utils_types import from_std_uuid, to_std_uuid
from src.service.marketplace.domain.entity.listing_entity import Listing
from src.service.marketplace.domain.enum.listing_status import ListingStatus
from src.service.marketplace.driven_adapter.model.listing_model import ListingModel


LISTING_COLUMNS = tuple(ListingModel.__table__.c)


def row_to_listing(row: Any) -> Listing:
    return Listing(
        id=from_std_uuid(row.id),
        ticket_id=row.ticket_id,
        seller_address=row.seller_address,
        buyer_address=row.buyer_address,
        listing_price_minor=row.listing_price_minor,
        original_price_minor=row.original_price_minor,
        status=ListingStatus(row.status),
        description=row.description,
        transaction_hash=row.transaction_hash,
        sale_transaction_hash=row.sale_transaction_hash,
        expires_at=ensure_utc(row.expires_at),
        created_at=ensure_utc(row.created_at),
        sold_at=ensure_utc(row.sold_at),
        cancelled_at=ensure_utc(row.cancelled_at),
        updated_at=ensure_utc(row.updated_at),
    )


def listing_to_model(listing: Listing) -> ListingModel:
    return ListingModel(
        id=to_std_uuid(listing.id),
        ticket_id=listing.ticket_id,
        seller_address=listing.seller_address,
        buyer_address=listing.buyer_address,
        listing_price_minor=listing.listing_price_minor,
        original_price_minor=listing.original_price_minor,
        status=listing.status.value,
        description=listing.description,
        transaction_hash=listing.transaction_hash,
        sale_transaction_hash=listing.sale_transaction_hash,
        expires_at=listing.expires_at,
        created_at=listing.created_at,
        sold_at=listing.sold_at,
        cancelled_at=listing.cancelled_at,
        updated_at=listing.updated_at,
    )
