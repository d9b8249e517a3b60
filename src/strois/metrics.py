"""Prometheus metrics for the strois client."""

from prometheus_client import Counter, Histogram

# Request metrics
requests_total = Counter(
    "strois_requests_total",
    "Total number of S3 requests",
    ["operation", "result"],
)

request_duration_seconds = Histogram(
    "strois_request_duration_seconds",
    "Duration of S3 requests in seconds",
    ["operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Error metrics
s3_errors_total = Counter(
    "strois_s3_errors_total",
    "Total number of S3 fault responses by error code",
    ["code"],
)

transport_errors_total = Counter(
    "strois_transport_errors_total",
    "Total number of connection-level failures",
    ["operation"],
)
