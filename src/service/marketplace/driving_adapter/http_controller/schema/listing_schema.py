from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.marketplace.domain.entity.listing_entity import Listing
from src.service.shared_kernel.driving_adapter.schema.camel_model import CamelModel


class ListingCreateRequest(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            'example': {
                'ticketId': 'ticket-0x51a3',
                'sellerAddress': '0x7d2f9c1e4b6a8d0f3e5c7a9b1d3f5e7c9a1b3d5f',
                'listingPriceMinor': 3000,
                'originalPriceMinor': 2500,
                'expiresAt': '2025-02-01T00:00:00Z',
                'description': 'Front row',
            }
        },
    )

    ticket_id: str
    seller_address: str
    listing_price_minor: int
    original_price_minor: Optional[int] = None
    expires_at: Optional[datetime] = None
    transaction_hash: Optional[str] = None
    description: Optional[str] = None


class BuyListingRequest(CamelModel):
    buyer_address: str
    transaction_hash: str


class CancelListingRequest(CamelModel):
    seller_address: str


class RecordOwnershipRequest(CamelModel):
    ticket_id: str
    owner_address: str
    price_minor: Optional[int] = None


class ListingResponse(CamelModel):
    id: UtilsUUID7
    ticket_id: str
    seller_address: str
    buyer_address: Optional[str] = None
    listing_price_minor: int
    original_price_minor: int
    price_change: int
    price_change_percentage: float
    status: str
    description: Optional[str] = None
    transaction_hash: Optional[str] = None
    sale_transaction_hash: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    sold_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, listing: Listing) -> 'ListingResponse':
        return cls(
            id=listing.id,
            ticket_id=listing.ticket_id,
            seller_address=listing.seller_address,
            buyer_address=listing.buyer_address,
            listing_price_minor=listing.listing_price_minor,
            original_price_minor=listing.original_price_minor,
            price_change=listing.price_change_minor,
            price_change_percentage=listing.price_change_percentage,
            status=listing.status.value,
            description=listing.description,
            transaction_hash=listing.transaction_hash,
            sale_transaction_hash=listing.sale_transaction_hash,
            expires_at=listing.expires_at,
            created_at=listing.created_at,
            updated_at=listing.updated_at,
            sold_at=listing.sold_at,
            cancelled_at=listing.cancelled_at,
        )


class ListingsPageResponse(CamelModel):
    listings: List[ListingResponse]
    total: int
    has_more: bool


class MarketplaceStatsResponse(CamelModel):
    total_listings: int
    total_volume: int
    avg_price: int
    recent_sales: int


class CleanupListingsResponse(CamelModel):
    expired_listings: int
    timestamp: datetime
