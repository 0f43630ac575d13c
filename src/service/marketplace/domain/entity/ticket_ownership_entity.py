from datetime import datetime
from typing import Optional

import attrs


@attrs.define(frozen=True)
class TicketOwnership:
    """Current holder of a minted ticket as the marketplace knows it."""

    ticket_id: str
    owner_address: str
    updated_at: datetime
    # Last price paid (mint or resale), used as a listing's default original price
    price_minor: Optional[int] = None
