from typing import Optional

import httpx
import orjson

from src.platform.exception.exceptions import UpstreamUnavailableError
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.interface.i_payment_verifier import IPaymentVerifier


class HttpPaymentVerifier(IPaymentVerifier):
    """
    POST {base_url}/verify {"proof", "amountMinor", "reference"} -> {"accepted": bool}

    Anything other than a 2xx with a boolean `accepted` is ambiguous and raised
    as UpstreamUnavailableError.
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
    async def verify(self, *, proof: str, amount_minor: int, reference: str) -> bool:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(
                    '/verify',
                    content=orjson.dumps(
                        {'proof': proof, 'amountMinor': amount_minor, 'reference': reference}
                    ),
                    headers={'Content-Type': 'application/json'},
                )
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f'Payment verifier unreachable: {e}') from e

        if not response.is_success:
            raise UpstreamUnavailableError(
                f'Payment verifier responded with HTTP {response.status_code}'
            )

        try:
            accepted = orjson.loads(response.content).get('accepted')
        except (orjson.JSONDecodeError, AttributeError) as e:
            raise UpstreamUnavailableError('Payment verifier returned malformed JSON') from e

        if not isinstance(accepted, bool):
            raise UpstreamUnavailableError('Payment verifier response lacks `accepted`')
        return accepted
