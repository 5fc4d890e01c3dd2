"""Prometheus metrics for invoice reconciliation passes and forecast webhooks"""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconciliation_counter = Counter(
    "invoice_reconciliation_total",
    "Reconciliation passes executed",
    ["pass_name"],  # allocation_preview | allocation_correct | orphan_correct | validate_invoices
)

corrected_transactions_counter = Counter(
    "invoice_transactions_corrected_total",
    "Transactions moved to a different invoice period",
    ["pass_name"],
)

invoice_drift_histogram = Histogram(
    "invoice_total_drift_cents",
    "Absolute drift between cached and recomputed card invoice totals",
    buckets=[1, 100, 1_000, 10_000, 100_000, 1_000_000],
)

# Forecast webhook metrics
forecast_webhook_latency_histogram = Histogram(
    "forecast_webhook_latency_seconds",
    "Forecast invalidation webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

forecast_webhook_failure_counter = Counter(
    "forecast_webhook_failures_total",
    "Failed forecast invalidation deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_reconciliation(pass_name: str, corrected: int = 0) -> None:
    """Count a pass and the transactions it moved"""
    reconciliation_counter.labels(pass_name=pass_name).inc()
    if corrected > 0:
        corrected_transactions_counter.labels(pass_name=pass_name).inc(corrected)


def record_invoice_drift(difference_cents: int) -> None:
    if difference_cents != 0:
        invoice_drift_histogram.observe(abs(difference_cents))
