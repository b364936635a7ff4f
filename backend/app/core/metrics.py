"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at the /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Occupancy metrics
occupancy_transitions = Counter(
    'occupancy_transitions_total',
    'Seat/finish/remove attempts on tables',
    ['transition', 'outcome']  # seat|finish|remove, success|conflict|not_found|error
)

occupancy_latency = Histogram(
    'occupancy_transaction_seconds',
    'Latency of the atomic seat/finish unit of work',
    ['transition'],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Admission metrics
reservation_rejections = Counter(
    'reservation_rejections_total',
    'Reservation payloads rejected by the validator',
    ['field']
)

reservations_created = Counter(
    'reservations_created_total',
    'Reservations accepted and stored'
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set/invalidate, hit/miss/error
)


def metrics_endpoint() -> Response:
    """Prometheus scrape target."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_transition(transition: str, outcome: str):
    """Record an occupancy attempt. Outcome: success, conflict, not_found, error"""
    occupancy_transitions.labels(transition=transition, outcome=outcome).inc()


def record_rejection(field: str):
    reservation_rejections.labels(field=field).inc()


def record_cache_operation(operation: str, result: str):
    cache_operations.labels(operation=operation, result=result).inc()
