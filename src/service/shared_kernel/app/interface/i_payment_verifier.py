from abc import ABC, abstractmethod


class IPaymentVerifier(ABC):
    """
    Payment/signing collaborator.

    The proof (payment signature or transaction hash) is opaque here; the
    collaborator decides accept/reject.
    """

    @abstractmethod
    async def verify(self, *, proof: str, amount_minor: int, reference: str) -> bool:
        """
        Returns:
            True if the proof is accepted, False if it is rejected

        Raises:
            UpstreamUnavailableError: verification could not be completed
        """
