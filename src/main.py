"""
Production FastAPI Application

Reservation, order lifecycle and resale endpoints plus the two expiry sweepers.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import StoreBackend, settings
from src.platform.config.di import cleanup, container, setup
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.platform.scheduler.expiry_sweeper import ExpirySweeper
from src.service.marketplace.app.command.expire_listings_use_case import ExpireListingsUseCase
from src.service.reservation.app.command.expire_reservations_use_case import (
    ExpireReservationsUseCase,
)


def build_sweepers() -> list[ExpirySweeper]:
    order_expiry = ExpireReservationsUseCase(
        uow_factory=container.uow_factory,
        clock=container.clock(),
        batch_size=settings.SWEEP_BATCH_SIZE,
    )
    listing_expiry = ExpireListingsUseCase(
        uow_factory=container.uow_factory,
        clock=container.clock(),
        batch_size=settings.SWEEP_BATCH_SIZE,
    )
    return [
        ExpirySweeper(
            entity='order',
            sweep=order_expiry.expire_overdue,
            interval_seconds=settings.ORDER_SWEEP_INTERVAL_SECONDS,
        ),
        ExpirySweeper(
            entity='listing',
            sweep=listing_expiry.expire_overdue,
            interval_seconds=settings.LISTING_SWEEP_INTERVAL_SECONDS,
        ),
    ]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    Logger.base.info('🚀 [Reservation Service] Starting up...')

    tracing = TracingConfig(service_name='reservation-service')
    tracing.setup()
    Logger.base.info('📊 [Reservation Service] OpenTelemetry tracing configured')

    setup()
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Reservation Service] Dependency injection wired')

    if settings.STORE_BACKEND is StoreBackend.POSTGRES:
        database = container.database()
        tracing.instrument_sqlalchemy(engine=database.engine)
        if settings.CREATE_TABLES_ON_STARTUP:
            await database.create_db_and_tables()
        Logger.base.info('🗄️  [Reservation Service] Database engine ready + instrumented')
    else:
        Logger.base.warning(
            '⚠️ [Reservation Service] In-memory store: single instance only, data is not durable'
        )

    async with anyio.create_task_group() as tg:
        if settings.ENABLE_EXPIRY_SWEEPER:
            for sweeper in build_sweepers():
                await sweeper.start(task_group=tg)

        Logger.base.info('✅ [Reservation Service] Ready to serve requests')
        yield

        Logger.base.info('🛑 [Reservation Service] Shutting down...')
        tg.cancel_scope.cancel()

    if settings.STORE_BACKEND is StoreBackend.POSTGRES:
        await container.database().dispose()
        Logger.base.info('🗄️  [Reservation Service] Database engine disposed')

    tracing.shutdown()
    container.unwire()
    cleanup()
    Logger.base.info('👋 [Reservation Service] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
