"""Prometheus metrics for platform calls and tracking jobs."""

from prometheus_client import Counter, Histogram, Info, generate_latest

# --- Metrics ---

APP_INFO = Info("geotrack", "AI search visibility tracker info")
APP_INFO.info({"version": "0.1.0", "name": "geotrack"})

PLATFORM_CALLS = Counter(
    "geotrack_platform_calls_total",
    "Total AI platform calls",
    ["platform", "status"],
)

PLATFORM_LATENCY = Histogram(
    "geotrack_platform_call_duration_seconds",
    "AI platform call duration in seconds",
    ["platform"],
    buckets=[0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30, 60, 120],
)

TRACKING_JOBS = Counter(
    "geotrack_tracking_jobs_total",
    "Total tracking job runs",
    ["outcome"],
)

PARSED_RESULTS = Counter(
    "geotrack_parsed_results_total",
    "Parsed platform responses",
    ["mentioned"],
)


def record_platform_call(platform: str, ok: bool, elapsed_ms: int) -> None:
    PLATFORM_CALLS.labels(platform=platform, status="success" if ok else "error").inc()
    PLATFORM_LATENCY.labels(platform=platform).observe(elapsed_ms / 1000)


def metrics_text() -> bytes:
    """Prometheus exposition payload for the current process."""
    return generate_latest()
