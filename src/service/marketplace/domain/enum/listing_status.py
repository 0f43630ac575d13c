from enum import StrEnum


class ListingStatus(StrEnum):
    ACTIVE = 'active'
    SOLD = 'sold'
    CANCELLED = 'cancelled'
    EXPIRED = 'expired'

    @property
    def is_terminal(self) -> bool:
        return self is not ListingStatus.ACTIVE


class ListingEvent(StrEnum):
    PURCHASED = 'purchased'
    SELLER_CANCEL = 'seller_cancel'
    LISTING_TIMEOUT = 'listing_timeout'


class ListingSort(StrEnum):
    NEWEST = 'newest'
    OLDEST = 'oldest'
    PRICE_LOW = 'price_low'
    PRICE_HIGH = 'price_high'
    ENDING_SOON = 'ending_soon'
