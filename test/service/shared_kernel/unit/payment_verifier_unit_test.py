import httpx
import orjson
import pytest

from src.platform.exception.exceptions import UpstreamUnavailableError
from src.service.shared_kernel.driven_adapter.payment.http_payment_verifier import (
    HttpPaymentVerifier,
)
from src.service.shared_kernel.driven_adapter.payment.signature_format_payment_verifier import (
    SignatureFormatPaymentVerifier,
)
from test.util_constant import INVALID_SIGNATURE, VALID_TX_DIGEST


pytestmark = pytest.mark.unit


def _verifier(handler) -> HttpPaymentVerifier:
    return HttpPaymentVerifier(
        base_url='http://payments.test/',
        timeout_seconds=1.0,
        transport=httpx.MockTransport(handler),
    )


async def _verify(verifier) -> bool:
    return await verifier.verify(proof=VALID_TX_DIGEST, amount_minor=5000, reference='order-1')


class TestHttpPaymentVerifier:
    @pytest.mark.asyncio
    @pytest.mark.parametrize('accepted', [True, False])
    async def test_answer_is_passed_through(self, accepted):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen['url'] = str(request.url)
            seen['body'] = orjson.loads(request.content)
            return httpx.Response(200, json={'accepted': accepted})

        assert await _verify(_verifier(handler)) is accepted
        assert seen['url'] == 'http://payments.test/verify'
        assert seen['body'] == {
            'proof': VALID_TX_DIGEST,
            'amountMinor': 5000,
            'reference': 'order-1',
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize('status_code', [400, 404, 500, 503])
    async def test_non_success_status_is_upstream_failure(self, status_code):
        verifier = _verifier(lambda request: httpx.Response(status_code, json={'accepted': True}))

        with pytest.raises(UpstreamUnavailableError):
            await _verify(verifier)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'content',
        [b'not json', b'[]', b'{}', b'{"accepted": "yes"}'],
    )
    async def test_ambiguous_body_is_upstream_failure(self, content):
        verifier = _verifier(lambda request: httpx.Response(200, content=content))

        with pytest.raises(UpstreamUnavailableError):
            await _verify(verifier)

    @pytest.mark.asyncio
    async def test_connection_error_is_upstream_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError('connection refused', request=request)

        with pytest.raises(UpstreamUnavailableError):
            await _verify(_verifier(handler))

    @pytest.mark.asyncio
    async def test_timeout_is_upstream_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout('slow', request=request)

        with pytest.raises(UpstreamUnavailableError):
            await _verify(_verifier(handler))


class TestSignatureFormatPaymentVerifier:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'proof',
        [VALID_TX_DIGEST, VALID_TX_DIGEST.upper().replace('0X', '0x'), 's' * 21],
    )
    async def test_accepts_well_formed_proofs(self, proof):
        verifier = SignatureFormatPaymentVerifier()

        assert await verifier.verify(proof=proof, amount_minor=1, reference='r') is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize('proof', [INVALID_SIGNATURE, '', '   ', 's' * 20])
    async def test_rejects_short_proofs(self, proof):
        verifier = SignatureFormatPaymentVerifier()

        assert await verifier.verify(proof=proof, amount_minor=1, reference='r') is False
