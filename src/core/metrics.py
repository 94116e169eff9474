"""Prometheus metrics for the settlement service.

Business Metrics (for Finance/Operations):
- coop_deductions_total: Deduction attempts by kind and outcome
- coop_deducted_amount_total: Amount deducted from savings by kind
- coop_settlement_runs_total: Settlement runs by status
- coop_settlement_last_success_timestamp: When the last run completed

Technical Metrics (for Engineering/SRE):
- coop_settlement_run_duration_seconds: Wall-clock time of a run
- coop_deduction_retry_total: Aborted commits retried
- coop_admin_alert_latency_seconds: Admin alert delivery latency
- coop_admin_alert_retry_total: Admin alert retries
- coop_admin_alert_total: Admin alert deliveries by status
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Histogram, Gauge, REGISTRY, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST


# =============================================================================
# Business Metrics
# =============================================================================

deductions_total = Counter(
    "coop_deductions_total",
    "Total number of deduction attempts",
    ["kind", "outcome"],  # loan/commodity x success/insufficient_balance/...
)

deducted_amount_total = Counter(
    "coop_deducted_amount_total",
    "Total amount deducted from savings in minor currency units",
    ["kind"],
)

settlement_runs_total = Counter(
    "coop_settlement_runs_total",
    "Total number of settlement runs",
    ["status"],  # completed, failed
)

last_success_timestamp = Gauge(
    "coop_settlement_last_success_timestamp",
    "Unix time of the last completed settlement run",
)


# =============================================================================
# Technical Metrics
# =============================================================================

settlement_run_duration = Histogram(
    "coop_settlement_run_duration_seconds",
    "Settlement run duration in seconds",
    buckets=[1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0, 600.0, 900.0],
)

deduction_retries = Counter(
    "coop_deduction_retry_total",
    "Total number of aborted deductions retried",
)

admin_alert_latency = Histogram(
    "coop_admin_alert_latency_seconds",
    "Admin alert delivery latency in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

admin_alert_retries = Counter(
    "coop_admin_alert_retry_total",
    "Total number of admin alert retries",
)

admin_alert_total = Counter(
    "coop_admin_alert_total",
    "Admin alert deliveries by status",
    ["status"],  # success, failure
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_deduction(kind: str, outcome: str, amount: int = 0) -> None:
    """Record one per-item outcome."""
    deductions_total.labels(kind=kind, outcome=outcome).inc()
    if amount > 0:
        deducted_amount_total.labels(kind=kind).inc(amount)


def record_deduction_retry() -> None:
    """Record a retried deduction commit."""
    deduction_retries.inc()


def record_run(completed: bool) -> None:
    """Record the end of a settlement run."""
    settlement_runs_total.labels(status="completed" if completed else "failed").inc()
    if completed:
        last_success_timestamp.set_to_current_time()


@contextmanager
def track_run_duration() -> Generator[None, None, None]:
    """Context manager to track settlement run duration."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        settlement_run_duration.observe(duration)


@contextmanager
def track_admin_alert_latency() -> Generator[None, None, None]:
    """Context manager to track admin alert latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        admin_alert_latency.observe(duration)


def record_admin_alert_retry() -> None:
    """Record an admin alert retry attempt."""
    admin_alert_retries.inc()


def record_admin_alert_success() -> None:
    """Record a delivered admin alert."""
    admin_alert_total.labels(status="success").inc()


def record_admin_alert_failure() -> None:
    """Record an admin alert that failed after all retries."""
    admin_alert_total.labels(status="failure").inc()


def get_metrics() -> bytes:
    """Get current metrics in Prometheus format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST
