"""
Prometheus metrics for the license service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Histogram

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# License metrics
licenses_activated_total = Counter(
    "licenses_activated_total",
    "Total licenses activated",
)

license_status_changes_total = Counter(
    "license_status_changes_total",
    "Total license status transitions",
    ["status"],
)

# Billing metrics
webhook_events_total = Counter(
    "webhook_events_total",
    "Total billing webhook events processed",
    ["event_type", "outcome"],
)

reconciliation_resolutions_total = Counter(
    "reconciliation_resolutions_total",
    "License resolutions by winning strategy",
    ["strategy"],
)

billing_provider_calls_total = Counter(
    "billing_provider_calls_total",
    "Total billing provider API calls",
    ["operation", "outcome"],
)

billing_provider_call_duration_seconds = Histogram(
    "billing_provider_call_duration_seconds",
    "Billing provider API call duration in seconds",
    ["operation"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Cache metrics
cache_hits_total = Counter(
    "cache_hits_total",
    "Total cache hits",
    ["cache_key"],
)

cache_misses_total = Counter(
    "cache_misses_total",
    "Total cache misses",
    ["cache_key"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
)
