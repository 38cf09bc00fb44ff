# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics: single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "registry_requests_total",
    "Total HTTP requests to the volunteer registry",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "registry_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "registry_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
GROUPS_REGISTERED = Counter(
    "registry_groups_registered_total",
    "Total groups registered",
)
VOLUNTEERS_JOINED = Counter(
    "registry_volunteers_joined_total",
    "Total volunteers that joined a group",
    ["service"],
)
MEMBERS_LEFT = Counter(
    "registry_members_left_total",
    "Total members that left a group",
)
REGISTRY_ERRORS = Counter(
    "registry_operation_errors_total",
    "Registry operations rejected, by error kind",
    ["operation", "kind"],
)
ACTIVE_GROUPS = Gauge(
    "registry_active_groups",
    "Number of registered groups",
)
OPERATION_LATENCY = Histogram(
    "registry_operation_duration_seconds",
    "Time spent inside a registry operation, lock included",
    ["operation"],
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)
