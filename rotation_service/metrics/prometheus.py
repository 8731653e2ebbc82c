# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics — single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "rotation_requests_total",
    "Total HTTP requests to rotation service",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "rotation_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "rotation_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
ROTATIONS_TOTAL = Counter(
    "rotation_rounds_total",
    "Total rotation rounds executed",
    ["kind", "status"],
)
MEMBERS_PICKED = Counter(
    "rotation_members_picked_total",
    "Total members picked by rotations",
    ["kind"],
)
SELECTION_RESETS = Counter(
    "rotation_selection_resets_total",
    "Total selection resets after pool exhaustion",
    ["kind"],
)
REPLACEMENTS_TOTAL = Counter(
    "rotation_replacements_total",
    "Total manual replacements",
    ["kind", "outcome"],
)
NOTIFICATIONS_SENT = Counter(
    "rotation_notifications_total",
    "Total outbound chat notifications",
    ["operation", "outcome"],
)
PERSISTENCE_FAILURES = Counter(
    "rotation_persistence_failures_total",
    "Total failed writes of selection state",
    ["store"],
)
SCHEDULED_JOBS = Gauge(
    "rotation_scheduled_jobs",
    "Number of scheduled rotation jobs",
)
