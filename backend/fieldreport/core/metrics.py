"""Prometheus collectors"""

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "fieldreport_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "fieldreport_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
SUBMISSIONS_CREATED = Counter(
    "fieldreport_submissions_created_total",
    "Visit reports submitted",
    ["type"],
)
