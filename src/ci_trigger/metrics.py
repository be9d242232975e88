"""
Prometheus metrics for the CI trigger application.

This module defines the metrics collected while webhooks are dispatched into
builds, so that the rate of triggered builds and of rejected calls can be
monitored.
"""

from prometheus_client import Counter, Histogram, Gauge
import time


# Webhook reception metrics
webhooks_received_total = Counter(
    "ci_trigger_webhooks_received_total",
    "Total number of webhooks received",
    ["hook_type"],  # hook_type = github|gitlab|bitbucket|generic|<unknown>
)

webhook_dispatch_duration_seconds = Histogram(
    "ci_trigger_webhook_dispatch_duration_seconds",
    "Time spent dispatching webhooks",
    ["hook_type"],
)

webhook_dispatch_errors_total = Counter(
    "ci_trigger_webhook_dispatch_errors_total",
    "Total number of webhook dispatch errors",
    ["hook_type", "error_type"],
)

# Build metrics
builds_instantiated_total = Counter(
    "ci_trigger_builds_instantiated_total",
    "Total number of builds created from webhooks",
    ["hook_type"],
)

webhooks_skipped_total = Counter(
    "ci_trigger_webhooks_skipped_total",
    "Total number of accepted webhooks that did not start a build",
    ["hook_type"],
)

build_serialization_errors_total = Counter(
    "ci_trigger_build_serialization_errors_total",
    "Total number of created builds that could not be encoded into the response",
)

# Health check metrics
health_check_status = Gauge(
    "ci_trigger_health_check_status",
    "Health check status (1 = healthy, 0 = unhealthy)",
)


class MetricsContext:
    """Context manager for timing operations and handling errors with metrics."""

    def __init__(self, histogram, error_counter, error_labels=None):
        self.histogram = histogram
        self.error_counter = error_counter
        self.error_labels = error_labels or []
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            duration = time.time() - self.start_time
            self.histogram.observe(duration)

        if exc_type is not None:
            error_type = exc_type.__name__
            self.error_counter.labels(*self.error_labels, error_type).inc()

        return False  # Don't suppress exceptions


def track_webhook_dispatch(hook_type: str):
    """Context manager for tracking webhook dispatch metrics."""
    return MetricsContext(
        webhook_dispatch_duration_seconds.labels(hook_type),
        webhook_dispatch_errors_total,
        error_labels=[hook_type],
    )
