from enum import StrEnum


class OrderStatus(StrEnum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    EXPIRED = 'expired'
    FAILED = 'failed'

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.PENDING


class OrderEvent(StrEnum):
    PAYMENT_CONFIRMED = 'payment_confirmed'
    PAYMENT_REJECTED = 'payment_rejected'
    BUYER_CANCEL = 'buyer_cancel'
    HOLD_TIMEOUT = 'hold_timeout'
