"""Prometheus metrics for payment sessions, installment plans and HTTP latency"""

from prometheus_client import Counter, Histogram

# Payment session metrics
sessions_opened_counter = Counter(
    "payment_sessions_opened_total",
    "Payment sessions opened",
)

session_item_counter = Counter(
    "payment_session_items_total",
    "Payment session queue items processed",
    ["outcome"],  # paid | skipped
)

mark_paid_failure_counter = Counter(
    "payment_session_mark_paid_failures_total",
    "Failed attempts to persist a paid flag",
)

# Installment metrics
installment_plans_counter = Counter(
    "installment_plans_created_total",
    "Installment plans created",
    ["type"],  # income | expense
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_session_item(outcome: str) -> None:
    """Count a queue item as paid or skipped"""
    session_item_counter.labels(outcome=outcome).inc()
