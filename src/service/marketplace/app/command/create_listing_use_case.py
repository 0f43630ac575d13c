from datetime import datetime
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.clock.utc_clock import Clock, ensure_utc
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, UnitOfWorkFactory
from src.platform.exception.exceptions import ErrorCode, ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.command.listing_transition import apply_listing_transition
from src.service.marketplace.app.interface.i_ticket_ownership_oracle import (
    ITicketOwnershipOracle,
)
from src.service.marketplace.domain.entity.listing_entity import Listing, validate_listing_terms
from src.service.marketplace.domain.enum.listing_status import ListingEvent
from src.service.shared_kernel.domain.value_object.wallet_address import (
    normalize_wallet_address,
)


class CreateListingUseCase:
    """
    Put a minted ticket up for resale.

    The seller must be the ticket's current owner per the ownership oracle.
    "At most one active listing per ticket" is enforced by the store on insert,
    so two concurrent listings of the same ticket cannot both land.
    An active listing already past its deadline is expired in the same unit of
    work, so relisting does not wait for the sweep.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        ownership_oracle: ITicketOwnershipOracle,
        clock: Clock,
    ) -> None:
        self.uow_factory = uow_factory
        self.ownership_oracle = ownership_oracle
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        ownership_oracle: ITicketOwnershipOracle = Depends(Provide[Container.ownership_oracle]),
        clock: Clock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(uow_factory=uow_factory, ownership_oracle=ownership_oracle, clock=clock)

    @Logger.io
    async def create_listing(
        self,
        *,
        ticket_id: str,
        seller_address: str,
        listing_price_minor: int,
        original_price_minor: Optional[int] = None,
        expires_at: Optional[datetime] = None,
        transaction_hash: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Listing:
        seller = normalize_wallet_address(seller_address, field='seller_address')
        expires_at = ensure_utc(expires_at)
        now = self.clock()
        validate_listing_terms(
            listing_price_minor=listing_price_minor, expires_at=expires_at, now=now
        )

        with self.tracer.start_as_current_span(
            'use_case.create_listing', attributes={'ticket.id': ticket_id}
        ):
            ownership = await self.ownership_oracle.get_owner(ticket_id=ticket_id)
            if ownership is None:
                raise NotFoundError('Ticket not found', ErrorCode.TICKET_NOT_FOUND)
            if ownership.owner_address != seller:
                raise ForbiddenError('You can only list your own tickets')

            if original_price_minor is None:
                original_price_minor = (
                    ownership.price_minor
                    if ownership.price_minor is not None
                    else listing_price_minor
                )

            listing = Listing.create(
                ticket_id=ticket_id,
                seller_address=seller,
                listing_price_minor=listing_price_minor,
                original_price_minor=original_price_minor,
                expires_at=expires_at,
                transaction_hash=transaction_hash,
                description=description,
                now=now,
            )
            async with self.uow_factory() as uow:
                await self._expire_overdue_listing(uow=uow, ticket_id=ticket_id, now=now)
                await uow.listing_command_repo.create(listing=listing)
                await uow.commit()

        Logger.base.info(
            f'🏪 [LISTING] {listing.id} lists ticket {ticket_id} at {listing_price_minor}'
        )
        return listing

    async def _expire_overdue_listing(
        self, *, uow: AbstractUnitOfWork, ticket_id: str, now: datetime
    ) -> None:
        # A past-deadline listing the sweep has not reached yet must not block relisting
        current = await uow.listing_command_repo.get_active_by_ticket(ticket_id=ticket_id)
        if current is None or not current.is_overdue(now):
            return
        expired = await apply_listing_transition(
            uow=uow,
            listing=current,
            event=ListingEvent.LISTING_TIMEOUT,
            now=now,
            expired_at=now,
        )
        if expired is not None:
            Logger.base.info(f'⌛ [LISTING] {current.id} expired on relist of ticket {ticket_id}')
