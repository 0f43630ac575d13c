from datetime import timedelta

import attrs

from src.platform.config.core_setting import Settings


@attrs.define(frozen=True)
class ReservationPolicy:
    hold_duration: timedelta = timedelta(minutes=15)
    max_tickets_per_order: int = 5
    max_tickets_per_buyer: int = 10

    @classmethod
    def from_settings(cls, settings: Settings) -> 'ReservationPolicy':
        return cls(
            hold_duration=timedelta(minutes=settings.HOLD_DURATION_MINUTES),
            max_tickets_per_order=settings.MAX_TICKETS_PER_ORDER,
            max_tickets_per_buyer=settings.MAX_TICKETS_PER_BUYER,
        )
