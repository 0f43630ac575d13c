from datetime import datetime
from typing import Optional
import uuid

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class ListingModel(Base):
    __tablename__ = 'marketplace_listing'
    __table_args__ = (
        CheckConstraint('listing_price_minor > 0', name='ck_marketplace_listing_price_positive'),
        CheckConstraint(
            "status IN ('active', 'sold', 'cancelled', 'expired')",
            name='ck_marketplace_listing_status',
        ),
        CheckConstraint(
            "status <> 'sold' OR buyer_address <> seller_address",
            name='ck_marketplace_listing_no_self_purchase',
        ),
        # At most one active listing per ticket
        Index(
            'uq_marketplace_listing_active_ticket',
            'ticket_id',
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
        Index('ix_marketplace_listing_status_expires_at', 'status', 'expires_at'),
        Index('ix_marketplace_listing_seller_address', 'seller_address'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    ticket_id: Mapped[str] = mapped_column(String(128), nullable=False)
    seller_address: Mapped[str] = mapped_column(String(128), nullable=False)
    buyer_address: Mapped[Optional[str]] = mapped_column(String(128))
    listing_price_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    original_price_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='active')
    description: Mapped[Optional[str]] = mapped_column(Text)
    transaction_hash: Mapped[Optional[str]] = mapped_column(String(256))
    sale_transaction_hash: Mapped[Optional[str]] = mapped_column(String(256))
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    sold_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), index=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
