from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.clock.utc_clock import Clock
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, UnitOfWorkFactory
from src.platform.exception.exceptions import (
    ConflictError,
    DomainError,
    ErrorCode,
    GoneError,
    NotFoundError,
    PaymentRejectedError,
)
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.command.listing_transition import apply_listing_transition
from src.service.marketplace.domain.entity.listing_entity import Listing
from src.service.marketplace.domain.entity.ticket_ownership_entity import TicketOwnership
from src.service.marketplace.domain.enum.listing_status import ListingEvent, ListingStatus
from src.service.shared_kernel.app.interface.i_payment_verifier import IPaymentVerifier
from src.service.shared_kernel.domain.value_object.wallet_address import (
    normalize_wallet_address,
)


class BuyListingUseCase:
    """
    Buy an active listing with an already-submitted on-chain payment.

    The chain transaction is the prepare step: it is verified first, outside
    any database transaction. The commit step is one unit of work that flips
    active -> sold (compare-and-set, not past expires_at) and moves the ticket
    to the buyer in the ownership registry. Concurrent buyers race on the
    compare-and-set; exactly one wins.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        payment_verifier: IPaymentVerifier,
        clock: Clock,
    ) -> None:
        self.uow_factory = uow_factory
        self.payment_verifier = payment_verifier
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        payment_verifier: IPaymentVerifier = Depends(Provide[Container.payment_verifier]),
        clock: Clock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(uow_factory=uow_factory, payment_verifier=payment_verifier, clock=clock)

    @Logger.io
    async def buy_listing(
        self, *, listing_id: UUID, buyer_address: str, transaction_hash: str
    ) -> Listing:
        buyer = normalize_wallet_address(buyer_address, field='buyer_address')
        proof = (transaction_hash or '').strip()
        if not proof:
            raise DomainError(
                'transaction_hash is required', code=ErrorCode.INVALID_PAYMENT_PROOF
            )

        with self.tracer.start_as_current_span(
            'use_case.buy_listing', attributes={'listing.id': str(listing_id)}
        ):
            listing = await self._load_active_or_expire(listing_id=listing_id)
            if listing.is_listed_by(buyer):
                raise DomainError('Cannot buy your own listing', code=ErrorCode.SELF_PURCHASE)

            accepted = await self.payment_verifier.verify(
                proof=proof, amount_minor=listing.listing_price_minor, reference=str(listing.id)
            )
            if not accepted:
                Logger.base.warning(f'🚫 [BUY] payment rejected for listing {listing_id}')
                raise PaymentRejectedError('Transaction verification failed')

            sold = await self._settle(listing=listing, buyer=buyer, proof=proof)

        Logger.base.info(f'🤝 [BUY] listing {listing_id} sold to {buyer}')
        return sold

    async def _load_active_or_expire(self, *, listing_id: UUID) -> Listing:
        now = self.clock()
        async with self.uow_factory() as uow:
            listing = await uow.listing_command_repo.get_by_id(listing_id=listing_id)
            if listing is None:
                raise NotFoundError('Listing not found', ErrorCode.LISTING_NOT_FOUND)
            if listing.status is not ListingStatus.ACTIVE:
                raise ConflictError(
                    'Listing is not available for purchase', ErrorCode.LISTING_NOT_ACTIVE
                )
            if listing.is_overdue(now):
                await self._expire(uow=uow, listing=listing)
            return listing

    async def _settle(self, *, listing: Listing, buyer: str, proof: str) -> Listing:
        now = self.clock()
        async with self.uow_factory() as uow:
            sold = await apply_listing_transition(
                uow=uow,
                listing=listing,
                event=ListingEvent.PURCHASED,
                now=now,
                buyer_address=buyer,
                sale_transaction_hash=proof,
                not_expired_at=now,
            )
            if sold is None:
                current = await uow.listing_command_repo.get_by_id(listing_id=listing.id)
                if current is not None and current.is_overdue(now):
                    await self._expire(uow=uow, listing=current)
                raise ConflictError(
                    'Listing is not available for purchase', ErrorCode.LISTING_NOT_ACTIVE
                )

            transferred = await uow.ticket_ownership_repo.transfer(
                from_address=listing.seller_address,
                ownership=TicketOwnership(
                    ticket_id=listing.ticket_id,
                    owner_address=buyer,
                    price_minor=listing.listing_price_minor,
                    updated_at=now,
                ),
            )
            if not transferred:
                # Leaving without commit rolls the sold flip back
                raise ConflictError(
                    'Seller no longer holds this ticket', ErrorCode.LISTING_NOT_ACTIVE
                )
            await uow.commit()
            return sold

    async def _expire(self, *, uow: AbstractUnitOfWork, listing: Listing) -> None:
        now = self.clock()
        await apply_listing_transition(
            uow=uow,
            listing=listing,
            event=ListingEvent.LISTING_TIMEOUT,
            now=now,
            expired_at=now,
        )
        await uow.commit()
        raise GoneError('Listing has expired', ErrorCode.LISTING_EXPIRED)
