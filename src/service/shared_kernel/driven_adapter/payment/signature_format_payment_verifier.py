import re

from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.interface.i_payment_verifier import IPaymentVerifier


# 0x-prefixed 32-byte transaction digest
_TX_DIGEST_PATTERN = re.compile(r'^0x[0-9a-fA-F]{64}$')
MIN_SIGNATURE_LENGTH = 21


class SignatureFormatPaymentVerifier(IPaymentVerifier):
    """
    Local verifier used when no payment service is configured.

    Accepts a 0x-prefixed 64-hex-digit digest or any signature longer than 20
    characters. Chain-level verification belongs to the payment collaborator.
    """

    @Logger.io
    async def verify(self, *, proof: str, amount_minor: int, reference: str) -> bool:
        proof = (proof or '').strip()
        return bool(_TX_DIGEST_PATTERN.match(proof)) or len(proof) >= MIN_SIGNATURE_LENGTH
