from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class TicketOwnershipModel(Base):
    __tablename__ = 'ticket_ownership'

    ticket_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    owner_address: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    price_minor: Mapped[Optional[int]] = mapped_column(BigInteger)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
