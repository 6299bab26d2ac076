"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Booking metrics
booking_attempts = Counter(
    'venue_booking_attempts_total',
    'Total booking attempts',
    ['status']  # success, rejected, conflict, error
)

booking_latency = Histogram(
    'venue_booking_latency_seconds',
    'Booking creation latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

booking_cancellations = Counter(
    'venue_booking_cancellations_total',
    'Bookings cancelled'
)

booking_reschedules = Counter(
    'venue_booking_reschedules_total',
    'Reschedule attempts',
    ['status']  # success, rejected, conflict
)

availability_checks = Counter(
    'venue_availability_checks_total',
    'Availability checks',
    ['available']  # true, false
)

# Database metrics
db_retries = Counter(
    'venue_calendar_retry_attempts_total',
    'Calendar write retries due to venue version conflicts'
)

consistency_faults = Counter(
    'venue_calendar_consistency_faults_total',
    'Venue calendar and booking store disagreements',
    ['operation']
)

# Cache metrics
cache_operations = Counter(
    'venue_cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
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
    """Record booking attempt. Status: success, rejected, conflict, error"""
    booking_attempts.labels(status=status).inc()


def record_reschedule(status: str):
    booking_reschedules.labels(status=status).inc()


def record_availability_check(available: bool):
    availability_checks.labels(available=str(available).lower()).inc()


def record_consistency_fault(operation: str):
    consistency_faults.labels(operation=operation).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
