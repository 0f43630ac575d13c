from datetime import timedelta
from pathlib import Path
from typing import AsyncGenerator, Awaitable, Callable, Optional

from dependency_injector import providers
import pytest

from src.platform.config.di import container
from src.platform.database.in_memory_store import InMemoryStore, InMemoryUnitOfWork
from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.service.inventory.domain.entity.ticket_type_entity import TicketType
from src.service.marketplace.app.command.create_listing_use_case import CreateListingUseCase
from src.service.marketplace.app.command.record_ticket_ownership_use_case import (
    RecordTicketOwnershipUseCase,
)
from src.service.marketplace.domain.entity.listing_entity import Listing
from src.service.marketplace.domain.entity.ticket_ownership_entity import TicketOwnership
from src.service.marketplace.driven_adapter.ownership.store_ticket_ownership_oracle import (
    StoreTicketOwnershipOracle,
)
from src.service.reservation.app.command.create_reservation_use_case import (
    CreateReservationUseCase,
)
from src.service.reservation.domain.entity.order_entity import Order
from src.service.reservation.domain.reservation_policy import ReservationPolicy
from test.shared.fakes import ManualClock
from test.util_constant import (
    BUYER_ADDRESS,
    EVENT_ID,
    SELLER_ADDRESS,
    TICKET_ID,
    TICKET_TYPE_NAME,
    UNIT_PRICE_MINOR,
)


@pytest.fixture
def manual_clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def controlled_clock(manual_clock: ManualClock) -> ManualClock:
    """The manual clock, also installed as the app's clock (reset after each test)."""
    container.clock.override(providers.Object(manual_clock))
    return manual_clock


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow_factory(store: InMemoryStore) -> UnitOfWorkFactory:
    return lambda: InMemoryUnitOfWork(store=store)


@pytest.fixture
def reservation_policy() -> ReservationPolicy:
    return ReservationPolicy(
        hold_duration=timedelta(minutes=15), max_tickets_per_order=10, max_tickets_per_buyer=20
    )


@pytest.fixture
def seed_ticket_type(
    uow_factory: UnitOfWorkFactory, manual_clock: ManualClock
) -> Callable[..., Awaitable[TicketType]]:
    """Register a ticket type straight through the ledger."""

    async def _seed(
        *,
        total_supply: int = 10,
        event_id: str = EVENT_ID,
        unit_price_minor: int = UNIT_PRICE_MINOR,
        is_active: bool = True,
        **kwargs,
    ) -> TicketType:
        ticket_type = TicketType.create(
            event_id=event_id,
            name=TICKET_TYPE_NAME,
            unit_price_minor=unit_price_minor,
            total_supply=total_supply,
            is_active=is_active,
            now=manual_clock(),
            **kwargs,
        )
        async with uow_factory() as uow:
            await uow.inventory_ledger.create(ticket_type=ticket_type)
            await uow.commit()
        return ticket_type

    return _seed


async def read_available_supply(uow_factory: UnitOfWorkFactory, ticket_type_id) -> int:
    async with uow_factory() as uow:
        ticket_type = await uow.inventory_ledger.get_by_id(ticket_type_id=ticket_type_id)
    assert ticket_type is not None
    return ticket_type.available_supply


@pytest.fixture
def place_hold(
    uow_factory: UnitOfWorkFactory,
    reservation_policy: ReservationPolicy,
    manual_clock: ManualClock,
) -> Callable[..., Awaitable[Order]]:
    """Open a pending order through the real reservation use case."""
    create = CreateReservationUseCase(
        uow_factory=uow_factory, policy=reservation_policy, clock=manual_clock
    )

    async def _place(
        ticket_type: TicketType, *, quantity: int = 2, buyer_address: str = BUYER_ADDRESS
    ) -> Order:
        return await create.create_reservation(
            event_id=ticket_type.event_id,
            ticket_type_id=ticket_type.id,
            quantity=quantity,
            buyer_address=buyer_address,
        )

    return _place


@pytest.fixture
def give_ticket(
    uow_factory: UnitOfWorkFactory, manual_clock: ManualClock
) -> Callable[..., Awaitable[TicketOwnership]]:
    """Record a minted ticket's holder in the ownership registry."""

    async def _give(
        *,
        ticket_id: str = TICKET_ID,
        owner_address: str = SELLER_ADDRESS,
        price_minor: Optional[int] = UNIT_PRICE_MINOR,
    ) -> TicketOwnership:
        return await RecordTicketOwnershipUseCase(
            uow_factory=uow_factory, clock=manual_clock
        ).record_ownership(
            ticket_id=ticket_id, owner_address=owner_address, price_minor=price_minor
        )

    return _give


@pytest.fixture
def list_ticket(
    uow_factory: UnitOfWorkFactory,
    manual_clock: ManualClock,
    give_ticket: Callable[..., Awaitable[TicketOwnership]],
) -> Callable[..., Awaitable[Listing]]:
    """Give the seller a ticket and list it through the real listing use case."""
    create = CreateListingUseCase(
        uow_factory=uow_factory,
        ownership_oracle=StoreTicketOwnershipOracle(uow_factory=uow_factory),
        clock=manual_clock,
    )

    async def _list(
        *,
        ticket_id: str = TICKET_ID,
        seller_address: str = SELLER_ADDRESS,
        listing_price_minor: int = 3000,
        expires_in: Optional[timedelta] = None,
    ) -> Listing:
        await give_ticket(ticket_id=ticket_id, owner_address=seller_address)
        return await create.create_listing(
            ticket_id=ticket_id,
            seller_address=seller_address,
            listing_price_minor=listing_price_minor,
            expires_at=manual_clock() + expires_in if expires_in else None,
        )

    return _list


async def read_listing(uow_factory: UnitOfWorkFactory, listing_id) -> Listing:
    async with uow_factory() as uow:
        listing = await uow.listing_command_repo.get_by_id(listing_id=listing_id)
    assert listing is not None
    return listing


async def read_owner(uow_factory: UnitOfWorkFactory, ticket_id: str) -> Optional[str]:
    async with uow_factory() as uow:
        ownership = await uow.ticket_ownership_repo.get(ticket_id=ticket_id)
    return ownership.owner_address if ownership else None


@pytest.fixture
async def sqlite_database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    """A throwaway file-backed SQLite schema for the SQLAlchemy repositories."""
    database = Database(url=f'sqlite+aiosqlite:///{tmp_path}/reservation.db')
    await database.create_db_and_tables()
    yield database
    await database.dispose()
