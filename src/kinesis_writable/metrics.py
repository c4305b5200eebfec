"""
Prometheus collectors for the Kinesis writable stream.

Import-time registration in the global REGISTRY; label by stream name.
"""

from prometheus_client import Counter, Gauge, Histogram

RECORDS_TOTAL = Counter(
    "kinesis_writable_records_total",
    "Records submitted to PutRecords, by per-record outcome",
    ["stream", "outcome"],
)

FLUSH_CYCLES_TOTAL = Counter(
    "kinesis_writable_flush_cycles_total",
    "Completed flush cycles, by terminal outcome",
    ["stream", "outcome"],
)

PUT_RECORDS_LATENCY_MS = Histogram(
    "kinesis_writable_put_records_latency_ms",
    "PutRecords call latency in milliseconds",
    ["stream"],
    buckets=[1, 2.5, 5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000],
)

QUEUE_DEPTH = Gauge(
    "kinesis_writable_queue_depth",
    "Records queued and not yet acknowledged",
    ["stream"],
)


class MetricsRegistry:
    """Structured access to the writable's collectors."""

    records_total = RECORDS_TOTAL
    flush_cycles_total = FLUSH_CYCLES_TOTAL
    put_records_latency_ms = PUT_RECORDS_LATENCY_MS
    queue_depth = QUEUE_DEPTH


# Singleton instance
metrics_registry = MetricsRegistry()
