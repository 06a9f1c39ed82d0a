"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at the /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking attempts',
    ['outcome']  # success, validation, conflict, authorization, not_found, internal
)

booking_latency = Histogram(
    'booking_latency_seconds',
    'Booking request latency',
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

signin_attempts = Counter(
    'signin_attempts_total',
    'Signin attempts',
    ['result']  # success, failure
)

email_notifications = Counter(
    'email_notifications_total',
    'Outbound email notifications',
    ['result']  # sent, failed, skipped
)


def metrics_endpoint() -> Response:
    """Render the default registry in Prometheus text format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(outcome: str):
    booking_attempts.labels(outcome=outcome).inc()


def record_signin(success: bool):
    signin_attempts.labels(result="success" if success else "failure").inc()


def record_email(result: str):
    """Record email dispatch result. Result: sent, failed, skipped"""
    email_notifications.labels(result=result).inc()
