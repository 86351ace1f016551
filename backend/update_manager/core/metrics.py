"""Prometheus metrics for the Update Manager API.

Metrics are exposed at the /metrics endpoint.

Metrics Categories:
- HTTP request metrics (latency, count, in-flight)
- Agent channel metrics (ingestions, heartbeats, auth failures)
- Task queue metrics (claims, reported results)
"""

from prometheus_client import Counter, Gauge, Histogram, Info

# Application info
APP_INFO = Info("updmgr_app", "Update Manager application information")

# HTTP Request metrics
HTTP_REQUESTS_TOTAL = Counter(
    "updmgr_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "updmgr_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

HTTP_REQUESTS_IN_PROGRESS = Gauge(
    "updmgr_http_requests_in_progress",
    "Number of HTTP requests currently in progress",
    ["method", "endpoint"],
)

# Agent channel metrics
AGENT_AUTH_FAILURES_TOTAL = Counter(
    "updmgr_agent_auth_failures_total",
    "Rejected bearer tokens",
    ["surface", "reason"],  # surface: agent, dashboard; reason: missing, invalid
)

INGESTIONS_TOTAL = Counter(
    "updmgr_ingestions_total",
    "Update snapshots ingested",
    ["source", "compliance_status"],  # source: ingest, update_data
)

UPDATE_LOG_WRITE_FAILURES_TOTAL = Counter(
    "updmgr_update_log_write_failures_total",
    "Update log writes that failed and were skipped",
)

HEARTBEATS_TOTAL = Counter(
    "updmgr_heartbeats_total",
    "Heartbeats recorded",
)

# Task queue metrics
TASKS_CLAIMED_TOTAL = Counter(
    "updmgr_tasks_claimed_total",
    "Tasks handed to agents",
    ["reclaimed"],  # "true" when the task's previous lease had expired
)

TASK_RESULTS_TOTAL = Counter(
    "updmgr_task_results_total",
    "Task results reported by agents",
    ["status"],  # pending, in_progress, completed, failed or other
)


def set_app_info(version: str, environment: str) -> None:
    """Set application info metric."""
    APP_INFO.info({"version": version, "environment": environment})


def normalize_endpoint(path: str) -> str:
    """Collapse path segments that look like identifiers to keep label cardinality low."""
    parts = []
    for part in path.split("/"):
        if part.isdigit() or (len(part) == 36 and part.count("-") == 4):
            parts.append("{id}")
        else:
            parts.append(part)
    return "/".join(parts)
