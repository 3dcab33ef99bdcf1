"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking attempts',
    ['status']  # success, conflict, rejected, error
)

booking_latency = Histogram(
    'booking_latency_seconds',
    'Booking request latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

booking_cancellations = Counter(
    'booking_cancellations_total',
    'Booking cancellations',
    ['result']  # cancelled, already_cancelled
)

# Seat ledger metrics
seat_ledger_retries = Counter(
    'seat_ledger_retry_attempts_total',
    'Seat reservation retries after a concurrent change was detected'
)

booking_ref_collisions = Counter(
    'booking_ref_collisions_total',
    'Booking reference collisions that forced a regenerate'
)

# Moderation metrics
moderation_actions = Counter(
    'event_moderation_actions_total',
    'Admin moderation actions on events',
    ['action']  # approve, reject, resubmit
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss/stored
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(status: str):
    """Record booking attempt. Status: success, conflict, rejected, error"""
    booking_attempts.labels(status=status).inc()


def record_cancellation(already_cancelled: bool):
    result = "already_cancelled" if already_cancelled else "cancelled"
    booking_cancellations.labels(result=result).inc()


def record_moderation(action: str):
    moderation_actions.labels(action=action).inc()


def record_cache_operation(operation: str, result: str):
    """Record cache operation. Result: hit, miss (get) or stored (set)"""
    cache_operations.labels(operation=operation, result=result).inc()
