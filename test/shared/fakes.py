"""Hand-driven collaborators for tests: a settable clock and canned upstreams."""

from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

from src.service.marketplace.app.interface.i_ticket_ownership_oracle import (
    ITicketOwnershipOracle,
)
from src.service.marketplace.domain.entity.ticket_ownership_entity import TicketOwnership
from src.service.shared_kernel.app.interface.i_payment_verifier import IPaymentVerifier


T0 = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


class ManualClock:
    """Callable clock; deadlines move only when a test advances it."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class AcceptAllPaymentVerifier(IPaymentVerifier):
    def __init__(self) -> None:
        self.calls: list[tuple[str, int, str]] = []

    async def verify(self, *, proof: str, amount_minor: int, reference: str) -> bool:
        self.calls.append((proof, amount_minor, reference))
        return True


class HookedPaymentVerifier(IPaymentVerifier):
    """Runs `hook` while the proof is "in flight", then answers `accepted`."""

    def __init__(self, *, hook: Callable[[], Awaitable[None]], accepted: bool = True) -> None:
        self._hook = hook
        self._accepted = accepted

    async def verify(self, *, proof: str, amount_minor: int, reference: str) -> bool:
        await self._hook()
        return self._accepted


class StaticOwnershipOracle(ITicketOwnershipOracle):
    def __init__(self, owners: Optional[dict[str, TicketOwnership]] = None) -> None:
        self.owners = owners or {}

    async def get_owner(self, *, ticket_id: str) -> Optional[TicketOwnership]:
        return self.owners.get(ticket_id)
