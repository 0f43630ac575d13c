from typing import Optional
from urllib.parse import quote

import httpx
import orjson

from src.platform.clock.utc_clock import utc_now
from src.platform.exception.exceptions import UpstreamUnavailableError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_ticket_ownership_oracle import (
    ITicketOwnershipOracle,
)
from src.service.marketplace.domain.entity.ticket_ownership_entity import TicketOwnership
from src.service.shared_kernel.domain.value_object.wallet_address import (
    normalize_wallet_address,
)


class HttpTicketOwnershipOracle(ITicketOwnershipOracle):
    """
    GET {base_url}/tickets/{ticket_id}/owner -> {"ownerAddress": str, "priceMinor": int | null}

    404 means the ticket does not exist. Any other failure is
    UpstreamUnavailableError.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip('/')
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @Logger.io
    async def get_owner(self, *, ticket_id: str) -> Optional[TicketOwnership]:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.get(f'/tickets/{quote(ticket_id, safe="")}/owner')
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f'Ownership oracle unreachable: {e}') from e

        if response.status_code == 404:
            return None
        if not response.is_success:
            raise UpstreamUnavailableError(
                f'Ownership oracle responded with HTTP {response.status_code}'
            )

        try:
            payload = orjson.loads(response.content)
            owner_address = payload['ownerAddress']
            price_minor = payload.get('priceMinor')
        except (orjson.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            raise UpstreamUnavailableError('Ownership oracle returned malformed JSON') from e

        if not isinstance(owner_address, str) or not owner_address:
            raise UpstreamUnavailableError('Ownership oracle response lacks `ownerAddress`')
        return TicketOwnership(
            ticket_id=ticket_id,
            owner_address=normalize_wallet_address(owner_address),
            price_minor=price_minor if isinstance(price_minor, int) else None,
            updated_at=utc_now(),
        )
