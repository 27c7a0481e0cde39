"""
Prometheus metrics collection.
"""

from prometheus_client import Counter, Gauge, Histogram

# ============================================================
# HTTP Metrics
# ============================================================

http_requests_total = Counter(
    "glaneur_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "glaneur_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

http_errors_total = Counter(
    "glaneur_http_errors_total",
    "Total HTTP errors",
    ["method", "endpoint", "error_type"],
)

# ============================================================
# Auth Metrics
# ============================================================

challenges_issued_total = Counter(
    "glaneur_challenges_issued_total",
    "Total sign-in challenges issued",
)

signature_verifications_total = Counter(
    "glaneur_signature_verifications_total",
    "Signature verification attempts",
    ["result"],
)

users_created_total = Counter(
    "glaneur_users_created_total",
    "Users created on first sign-in",
)

# ============================================================
# Collect Metrics
# ============================================================

rate_limit_rejections_total = Counter(
    "glaneur_rate_limit_rejections_total",
    "Collect attempts rejected by a rate limit",
    ["scope"],
)

collect_requests_total = Counter(
    "glaneur_collect_requests_total",
    "Collect requests by outcome",
    ["outcome"],
)

collection_transitions_total = Counter(
    "glaneur_collection_transitions_total",
    "Pending collections resolved to a terminal status",
    ["status", "source"],
)

pending_collections = Gauge(
    "glaneur_pending_collections",
    "Pending collections seen by the last reconciliation sweep",
)

# ============================================================
# Blockchain Metrics
# ============================================================

blockchain_requests_total = Counter(
    "glaneur_blockchain_requests_total",
    "Total Solana RPC requests",
    ["operation"],
)

blockchain_errors_total = Counter(
    "glaneur_blockchain_errors_total",
    "Total Solana RPC errors",
    ["operation", "error_type"],
)

blockchain_request_duration_seconds = Histogram(
    "glaneur_blockchain_request_duration_seconds",
    "Solana RPC request duration in seconds",
    ["operation"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)
