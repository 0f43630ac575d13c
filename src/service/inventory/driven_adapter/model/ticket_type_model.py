from datetime import datetime
from typing import Optional
import uuid

from sqlalchemy import BigInteger, Boolean, CheckConstraint, DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class TicketTypeModel(Base):
    __tablename__ = 'ticket_type'
    __table_args__ = (
        CheckConstraint('total_supply >= 0', name='ck_ticket_type_total_supply_non_negative'),
        CheckConstraint(
            'available_supply >= 0 AND available_supply <= total_supply',
            name='ck_ticket_type_available_supply_bounds',
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    event_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_price_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    total_supply: Mapped[int] = mapped_column(Integer, nullable=False)
    available_supply: Mapped[int] = mapped_column(Integer, nullable=False)
    sale_start_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    sale_end_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
