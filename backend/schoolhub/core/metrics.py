"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Application workflow
application_submissions = Counter(
    'application_submissions_total',
    'Application submission attempts',
    ['result']  # accepted, not_found, capacity, team_size, duplicate, conflict
)

# Leaderboard engine
scores_recorded = Counter(
    'scores_recorded_total',
    'Performance scores recorded',
    ['level']
)

students_promoted = Counter(
    'students_promoted_total',
    'Students promoted to a higher competition level',
    ['level']  # destination level
)

# Notification relay
notifications = Counter(
    'notifications_total',
    'Live notifications published',
    ['event', 'result']  # sent, failed
)

# Cache
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

# HTTP
request_latency = Histogram(
    'http_request_latency_seconds',
    'HTTP request latency',
    ['method', 'status'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_submission(result: str):
    application_submissions.labels(result=result).inc()


def record_notification(event: str, sent: bool):
    notifications.labels(event=event, result="sent" if sent else "failed").inc()


def record_cache_operation(operation: str, hit: bool):
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
