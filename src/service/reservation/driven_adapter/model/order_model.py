from datetime import datetime
from typing import Optional
import uuid

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class OrderModel(Base):
    __tablename__ = 'ticket_order'
    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_ticket_order_quantity_positive'),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'expired', 'failed')",
            name='ck_ticket_order_status',
        ),
        # Expiry sweep: pending orders by deadline
        Index('ix_ticket_order_status_expires_at', 'status', 'expires_at'),
        Index('ix_ticket_order_buyer_ticket_type', 'buyer_address', 'ticket_type_id'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    event_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    ticket_type_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey('ticket_type.id', ondelete='RESTRICT'), nullable=False, index=True
    )
    buyer_address: Mapped[str] = mapped_column(String(128), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    total_price_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='pending')
    payment_signature: Mapped[Optional[str]] = mapped_column(String(512))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
