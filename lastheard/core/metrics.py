"""Prometheus instruments for the ingestion pipeline and maintenance jobs."""
from prometheus_client import Counter, Gauge, Histogram

FEED_EVENTS = Counter(
    "lastheard_feed_events_total",
    "Feed events seen, by outcome (accepted or rejection reason)",
    ["outcome"],
)

CALL_RECORDS_INSERTED = Counter(
    "lastheard_call_records_inserted_total",
    "Call records written to the store",
)

CALL_RECORD_INSERT_ERRORS = Counter(
    "lastheard_call_record_insert_errors_total",
    "Call records dropped because the store rejected the write",
)

FEED_CONNECTED = Gauge(
    "lastheard_feed_connected",
    "1 while the Brandmeister feed connection is up",
)

LAST_CALL_TIMESTAMP = Gauge(
    "lastheard_last_call_timestamp",
    "Unix timestamp of the last stored call record",
)

MAINTENANCE_RUNS = Counter(
    "lastheard_maintenance_runs_total",
    "Maintenance job runs",
    ["job", "status"],
)

MAINTENANCE_DURATION = Histogram(
    "lastheard_maintenance_duration_seconds",
    "Time spent in maintenance jobs",
    ["job"],
    buckets=(0.1, 0.5, 1, 5, 10, 30, 60, 300),
)
