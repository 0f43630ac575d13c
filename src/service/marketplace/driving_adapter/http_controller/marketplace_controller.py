from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from src.platform.clock.utc_clock import utc_now
from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.marketplace.app.command.buy_listing_use_case import BuyListingUseCase
from src.service.marketplace.app.command.cancel_listing_use_case import CancelListingUseCase
from src.service.marketplace.app.command.create_listing_use_case import CreateListingUseCase
from src.service.marketplace.app.command.expire_listings_use_case import ExpireListingsUseCase
from src.service.marketplace.app.command.record_ticket_ownership_use_case import (
    RecordTicketOwnershipUseCase,
)
from src.service.marketplace.app.query.get_listing_use_case import GetListingUseCase
from src.service.marketplace.app.query.get_marketplace_stats_use_case import (
    GetMarketplaceStatsUseCase,
)
from src.service.marketplace.app.query.get_seller_listings_use_case import (
    GetSellerListingsUseCase,
)
from src.service.marketplace.app.query.list_listings_use_case import ListListingsUseCase
from src.service.marketplace.domain.enum.listing_status import ListingSort, ListingStatus
from src.service.marketplace.driving_adapter.http_controller.schema.listing_schema import (
    BuyListingRequest,
    CancelListingRequest,
    CleanupListingsResponse,
    ListingCreateRequest,
    ListingResponse,
    ListingsPageResponse,
    MarketplaceStatsResponse,
    RecordOwnershipRequest,
)


router = APIRouter()


@router.post('/listings', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_listing(
    request: ListingCreateRequest,
    use_case: CreateListingUseCase = Depends(CreateListingUseCase.depends),
) -> ListingResponse:
    listing = await use_case.create_listing(
        ticket_id=request.ticket_id,
        seller_address=request.seller_address,
        listing_price_minor=request.listing_price_minor,
        original_price_minor=request.original_price_minor,
        expires_at=request.expires_at,
        transaction_hash=request.transaction_hash,
        description=request.description,
    )
    return ListingResponse.from_entity(listing)


@router.get('/listings')
@Logger.io
async def list_listings(
    listing_status: ListingStatus = Query(ListingStatus.ACTIVE, alias='status'),
    seller_address: Optional[str] = Query(None, alias='sellerAddress'),
    min_price: Optional[int] = Query(None, alias='minPrice', ge=0),
    max_price: Optional[int] = Query(None, alias='maxPrice', ge=0),
    sort_by: ListingSort = Query(ListingSort.NEWEST, alias='sortBy'),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    use_case: ListListingsUseCase = Depends(ListListingsUseCase.depends),
) -> ListingsPageResponse:
    page = await use_case.list_listings(
        status=listing_status,
        seller_address=seller_address,
        min_price_minor=min_price,
        max_price_minor=max_price,
        sort_by=sort_by,
        limit=limit,
        offset=offset,
    )
    return ListingsPageResponse(
        listings=[ListingResponse.from_entity(listing) for listing in page.listings],
        total=page.total,
        has_more=page.has_more,
    )


@router.get('/listings/{listing_id}')
@Logger.io
async def get_listing(
    listing_id: UtilsUUID7,
    use_case: GetListingUseCase = Depends(GetListingUseCase.depends),
) -> ListingResponse:
    listing = await use_case.get_listing(listing_id=listing_id)
    return ListingResponse.from_entity(listing)


@router.post('/listings/{listing_id}/buy')
@Logger.io
async def buy_listing(
    listing_id: UtilsUUID7,
    request: BuyListingRequest,
    use_case: BuyListingUseCase = Depends(BuyListingUseCase.depends),
) -> ListingResponse:
    listing = await use_case.buy_listing(
        listing_id=listing_id,
        buyer_address=request.buyer_address,
        transaction_hash=request.transaction_hash,
    )
    return ListingResponse.from_entity(listing)


@router.put('/listings/{listing_id}/cancel')
@Logger.io
async def cancel_listing(
    listing_id: UtilsUUID7,
    request: CancelListingRequest,
    use_case: CancelListingUseCase = Depends(CancelListingUseCase.depends),
) -> ListingResponse:
    listing = await use_case.cancel_listing(
        listing_id=listing_id, seller_address=request.seller_address
    )
    return ListingResponse.from_entity(listing)


@router.get('/sellers/{seller_address}/listings')
@Logger.io
async def get_seller_listings(
    seller_address: str,
    use_case: GetSellerListingsUseCase = Depends(GetSellerListingsUseCase.depends),
) -> List[ListingResponse]:
    listings = await use_case.get_seller_listings(seller_address=seller_address)
    return [ListingResponse.from_entity(listing) for listing in listings]


@router.get('/stats')
@Logger.io
async def get_marketplace_stats(
    use_case: GetMarketplaceStatsUseCase = Depends(GetMarketplaceStatsUseCase.depends),
) -> MarketplaceStatsResponse:
    stats = await use_case.get_stats()
    return MarketplaceStatsResponse(
        total_listings=stats.total_listings,
        total_volume=stats.total_volume_minor,
        avg_price=stats.avg_price_minor,
        recent_sales=stats.recent_sales,
    )


@router.post('/ownership', status_code=status.HTTP_204_NO_CONTENT)
@Logger.io
async def record_ownership(
    request: RecordOwnershipRequest,
    use_case: RecordTicketOwnershipUseCase = Depends(RecordTicketOwnershipUseCase.depends),
) -> Response:
    await use_case.record_ownership(
        ticket_id=request.ticket_id,
        owner_address=request.owner_address,
        price_minor=request.price_minor,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post('/admin/cleanup-expired')
@Logger.io
async def cleanup_expired_listings(
    use_case: ExpireListingsUseCase = Depends(ExpireListingsUseCase.depends),
) -> CleanupListingsResponse:
    expired = await use_case.expire_overdue()
    return CleanupListingsResponse(expired_listings=expired, timestamp=utc_now())
