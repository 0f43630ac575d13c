from prometheus_client import Counter, Histogram


class TicketingMetrics:
    """
    Reservation engine metrics, exposed on GET /metrics.

    Label values are bounded: statuses, error codes and entity names only,
    never ids or addresses.
    """

    def __init__(self) -> None:
        # ========== Reservation ==========
        self.reservation_requests = Counter(
            'reservation_requests_total',
            'createReservation outcomes',
            ['result'],  # created | <ErrorCode>
        )

        self.reserved_tickets = Counter(
            'reserved_tickets_total',
            'Tickets debited from the inventory ledger by new holds',
        )

        # ========== State machines ==========
        self.order_transitions = Counter(
            'order_transitions_total',
            'Order state transitions that committed',
            ['from_status', 'to_status'],
        )

        self.listing_transitions = Counter(
            'listing_transitions_total',
            'Marketplace listing state transitions that committed',
            ['from_status', 'to_status'],
        )

        # ========== Expiry sweeps ==========
        self.sweep_runs = Counter(
            'expiry_sweep_runs_total',
            'Expiry sweep executions',
            ['entity', 'result'],  # entity: order/listing, result: ok/error
        )

        self.sweep_expired = Counter(
            'expiry_sweep_expired_total',
            'Records expired by the sweeps',
            ['entity'],
        )

        self.sweep_duration = Histogram(
            'expiry_sweep_duration_seconds',
            'Expiry sweep duration',
            ['entity'],
            buckets=[0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
        )

    # ========== Helper Methods ==========

    def record_reservation(self, *, result: str, quantity: int = 0) -> None:
        self.reservation_requests.labels(result=result).inc()
        if quantity:
            self.reserved_tickets.inc(quantity)

    def record_order_transition(self, *, from_status: str, to_status: str) -> None:
        self.order_transitions.labels(from_status=from_status, to_status=to_status).inc()

    def record_listing_transition(self, *, from_status: str, to_status: str) -> None:
        self.listing_transitions.labels(from_status=from_status, to_status=to_status).inc()

    def record_sweep(self, *, entity: str, result: str, expired: int, duration: float) -> None:
        self.sweep_runs.labels(entity=entity, result=result).inc()
        if expired:
            self.sweep_expired.labels(entity=entity).inc(expired)
        self.sweep_duration.labels(entity=entity).observe(duration)


# Global metrics instance
metrics = TicketingMetrics()
