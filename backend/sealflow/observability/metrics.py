"""Prometheus metrics for SealFlow.

Defines operational metrics for monitoring the approval workflows.
"""

from prometheus_client import Counter, Histogram

# Workflow metrics
application_transitions_total = Counter(
    "sealflow_application_transitions_total",
    "Application status changes",
    ["kind", "status"]  # kind: usage|creation, status: PENDING|APPROVED|REJECTED|COMPLETED|WITHDRAWN|DELETED
)

application_actions_failed_total = Counter(
    "sealflow_application_actions_failed_total",
    "Workflow actions that were reported as failures instead of raising",
    ["kind", "action", "reason"]  # action: withdraw|batch_approve, reason: error kind
)

approval_duration_hours = Histogram(
    "sealflow_approval_duration_hours",
    "Hours between submission and decision",
    ["kind"],
    buckets=[1, 4, 8, 24, 72, 168, 336, 720]
)

# HTTP metrics
http_request_duration_seconds = Histogram(
    "sealflow_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "status"]
)

# Seal registry metrics
seals_minted_total = Counter(
    "sealflow_seals_minted_total",
    "Seals created by approving a creation application"
)


def record_transition(kind: str, status: str) -> None:
    application_transitions_total.labels(kind=kind, status=status).inc()


def record_action_failure(kind: str, action: str, reason: str) -> None:
    application_actions_failed_total.labels(kind=kind, action=action, reason=reason).inc()


def record_decision(kind: str, hours: float) -> None:
    approval_duration_hours.labels(kind=kind).observe(max(hours, 0.0))
