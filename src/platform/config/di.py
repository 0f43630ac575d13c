"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html

Use cases are not registered here: each exposes a `depends` classmethod that
pulls these providers through `Provide[Container.x]`.
"""

from dependency_injector import containers, providers

from src.platform.clock.utc_clock import utc_now
from src.platform.config.core_setting import Settings, StoreBackend
from src.platform.database.in_memory_store import InMemoryStore, InMemoryUnitOfWork
from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.marketplace.driven_adapter.ownership.http_ticket_ownership_oracle import (
    HttpTicketOwnershipOracle,
)
from src.service.marketplace.driven_adapter.ownership.store_ticket_ownership_oracle import (
    StoreTicketOwnershipOracle,
)
from src.service.reservation.domain.reservation_policy import ReservationPolicy
from src.service.shared_kernel.driven_adapter.payment.http_payment_verifier import (
    HttpPaymentVerifier,
)
from src.service.shared_kernel.driven_adapter.payment.signature_format_payment_verifier import (
    SignatureFormatPaymentVerifier,
)


def _store_backend(settings: Settings) -> str:
    return settings.STORE_BACKEND.value


def _payment_verifier_kind(settings: Settings) -> str:
    return 'http' if settings.PAYMENT_VERIFIER_URL else 'format'


def _ownership_oracle_kind(settings: Settings) -> str:
    return 'http' if settings.OWNERSHIP_ORACLE_URL else 'store'


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)
    clock = providers.Object(utc_now)

    # Storage
    database = providers.Singleton(Database)
    in_memory_store = providers.Singleton(InMemoryStore)

    # Inject `uow_factory.provider` to get a fresh unit of work per call
    uow_factory = providers.Selector(
        providers.Callable(_store_backend, config_service),
        postgres=providers.Factory(SqlAlchemyUnitOfWork, database=database),
        memory=providers.Factory(InMemoryUnitOfWork, store=in_memory_store),
    )

    # Policies
    reservation_policy = providers.Singleton(ReservationPolicy.from_settings, config_service)

    # External collaborators
    payment_verifier = providers.Selector(
        providers.Callable(_payment_verifier_kind, config_service),
        http=providers.Singleton(
            HttpPaymentVerifier,
            base_url=config_service.provided.PAYMENT_VERIFIER_URL,
            timeout_seconds=config_service.provided.UPSTREAM_TIMEOUT_SECONDS,
        ),
        format=providers.Singleton(SignatureFormatPaymentVerifier),
    )
    ownership_oracle = providers.Selector(
        providers.Callable(_ownership_oracle_kind, config_service),
        http=providers.Singleton(
            HttpTicketOwnershipOracle,
            base_url=config_service.provided.OWNERSHIP_ORACLE_URL,
            timeout_seconds=config_service.provided.UPSTREAM_TIMEOUT_SECONDS,
        ),
        store=providers.Singleton(StoreTicketOwnershipOracle, uow_factory=uow_factory.provider),
    )


container = Container()


def setup() -> None:
    container.config_service()
    if container.config_service().STORE_BACKEND is StoreBackend.POSTGRES:
        container.database()


def cleanup() -> None:
    container.reset_singletons()
