from enum import StrEnum


class ErrorCode(StrEnum):
    # Validation
    VALIDATION_ERROR = 'VALIDATION_ERROR'
    INVALID_QUANTITY = 'INVALID_QUANTITY'
    TICKET_TYPE_INACTIVE = 'TICKET_TYPE_INACTIVE'
    SALE_WINDOW_CLOSED = 'SALE_WINDOW_CLOSED'
    BUYER_LIMIT_EXCEEDED = 'BUYER_LIMIT_EXCEEDED'
    INVALID_PAYMENT_PROOF = 'INVALID_PAYMENT_PROOF'
    INVALID_PRICE = 'INVALID_PRICE'
    INVALID_EXPIRY = 'INVALID_EXPIRY'
    SELF_PURCHASE = 'SELF_PURCHASE'

    # Not found
    TICKET_TYPE_NOT_FOUND = 'TICKET_TYPE_NOT_FOUND'
    ORDER_NOT_FOUND = 'ORDER_NOT_FOUND'
    LISTING_NOT_FOUND = 'LISTING_NOT_FOUND'
    TICKET_NOT_FOUND = 'TICKET_NOT_FOUND'

    # Authorization
    NOT_OWNER = 'NOT_OWNER'

    # Contention
    INSUFFICIENT_INVENTORY = 'INSUFFICIENT_INVENTORY'
    ALREADY_TERMINAL = 'ALREADY_TERMINAL'
    INVALID_TRANSITION = 'INVALID_TRANSITION'
    ALREADY_LISTED = 'ALREADY_LISTED'
    LISTING_NOT_ACTIVE = 'LISTING_NOT_ACTIVE'

    # Deadlines
    RESERVATION_EXPIRED = 'RESERVATION_EXPIRED'
    LISTING_EXPIRED = 'LISTING_EXPIRED'

    # Collaborators
    PAYMENT_REJECTED = 'PAYMENT_REJECTED'
    UPSTREAM_UNAVAILABLE = 'UPSTREAM_UNAVAILABLE'

    INTERNAL_ERROR = 'INTERNAL_ERROR'


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(
        self,
        message: str,
        status_code: int,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ) -> None:
        super().__init__(message, status_code, code)


class PaymentRejectedError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 402, ErrorCode.PAYMENT_REJECTED)


class ForbiddenError(CustomBaseError):
    def __init__(self, message: str, code: ErrorCode = ErrorCode.NOT_OWNER) -> None:
        super().__init__(message, 403, code)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str, code: ErrorCode) -> None:
        super().__init__(message, 404, code)


class ConflictError(CustomBaseError):
    """Contention under concurrent load; retrying is the caller's decision."""

    def __init__(self, message: str, code: ErrorCode) -> None:
        super().__init__(message, 409, code)


class GoneError(CustomBaseError):
    def __init__(self, message: str, code: ErrorCode) -> None:
        super().__init__(message, 410, code)


class UpstreamUnavailableError(CustomBaseError):
    """A collaborator timed out or failed; the record keeps its current state."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 503, ErrorCode.UPSTREAM_UNAVAILABLE)


class InvariantViolationError(Exception):
    """
    A ledger or state-machine invariant was broken.

    Not a CustomBaseError: @Logger.io logs it with a traceback and the HTTP layer
    renders it as 500.
    """
