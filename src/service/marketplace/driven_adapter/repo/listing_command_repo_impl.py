from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID

from src.platform.exception.exceptions import ConflictError, ErrorCode
from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import from_std_uuid, to_std_uuid
from src.service.marketplace.app.interface.i_listing_command_repo import IListingCommandRepo
from src.service.marketplace.domain.entity.listing_entity import Listing
from src.service.marketplace.domain.enum.listing_status import ListingStatus
from src.service.marketplace.driven_adapter.model.listing_model import ListingModel
from src.service.marketplace.driven_adapter.repo.listing_row_mapper import (
    LISTING_COLUMNS,
    listing_to_model,
    row_to_listing,
)


# PostgreSQL reports the index name, SQLite the indexed column
_ACTIVE_TICKET_INDEX_MARKERS = (
    'uq_marketplace_listing_active_ticket',
    'marketplace_listing.ticket_id',
)


class ListingCommandRepoImpl(IListingCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def create(self, *, listing: Listing) -> Listing:
        self.session.add(listing_to_model(listing))
        try:
            await self.session.flush()
        except IntegrityError as e:
            if any(marker in str(e.orig) for marker in _ACTIVE_TICKET_INDEX_MARKERS):
                raise ConflictError(
                    'Ticket is already listed for sale', ErrorCode.ALREADY_LISTED
                ) from e
            raise
        return listing

    @Logger.io
    async def get_by_id(self, *, listing_id: UUID) -> Optional[Listing]:
        result = await self.session.execute(
            select(*LISTING_COLUMNS).where(ListingModel.id == to_std_uuid(listing_id))
        )
        row = result.first()
        return row_to_listing(row) if row else None

    @Logger.io
    async def get_active_by_ticket(self, *, ticket_id: str) -> Optional[Listing]:
        result = await self.session.execute(
            select(*LISTING_COLUMNS).where(
                ListingModel.ticket_id == ticket_id,
                ListingModel.status == ListingStatus.ACTIVE.value,
            )
        )
        row = result.first()
        return row_to_listing(row) if row else None

    @Logger.io
    async def compare_and_set(
        self,
        *,
        updated: Listing,
        expected_status: ListingStatus,
        not_expired_at: Optional[datetime] = None,
        expired_at: Optional[datetime] = None,
    ) -> Optional[Listing]:
        conditions = [
            ListingModel.id == to_std_uuid(updated.id),
            ListingModel.status == expected_status.value,
        ]
        if not_expired_at is not None:
            conditions.append(
                or_(ListingModel.expires_at.is_(None), ListingModel.expires_at >= not_expired_at)
            )
        if expired_at is not None:
            conditions.append(ListingModel.expires_at < expired_at)

        result = await self.session.execute(
            update(ListingModel)
            .where(*conditions)
            .values(
                status=updated.status.value,
                buyer_address=updated.buyer_address,
                sale_transaction_hash=updated.sale_transaction_hash,
                sold_at=updated.sold_at,
                cancelled_at=updated.cancelled_at,
                updated_at=updated.updated_at,
            )
            .returning(*LISTING_COLUMNS)
            .execution_options(synchronize_session=False)
        )
        row = result.first()
        return row_to_listing(row) if row else None

    @Logger.io
    async def list_overdue_ids(self, *, now: datetime, limit: int) -> List[UUID]:
        result = await self.session.execute(
            select(ListingModel.id)
            .where(
                ListingModel.status == ListingStatus.ACTIVE.value,
                ListingModel.expires_at.is_not(None),
                ListingModel.expires_at < now,
            )
            .order_by(ListingModel.expires_at)
            .limit(limit)
        )
        return [from_std_uuid(listing_id) for listing_id in result.scalars()]
