"""Central registry for Prometheus metrics used across the pipeline."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


REQUEST_COUNTER = Counter(
	"contentguard_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"contentguard_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

SCAN_JOBS_TOTAL = Counter(
	"contentguard_scan_jobs_total",
	"Analyzer invocations by content category and result status",
	["type", "status"],
)

SCAN_FAILURES_TOTAL = Counter(
	"contentguard_scan_failures_total",
	"Analyzer failures by content category and reason",
	["type", "reason"],
)

SCAN_LATENCY_SECONDS = Histogram(
	"contentguard_scan_latency_seconds",
	"Analyzer latency in seconds",
	["type"],
	buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)

PIPELINE_ITEMS_TOTAL = Counter(
	"contentguard_pipeline_items_total",
	"Content items processed by terminal stage and result",
	["stage", "result"],
)

RECORDS_PERSISTED_TOTAL = Counter(
	"contentguard_records_persisted_total",
	"Moderation record writes",
	["result"],
)

ALERTS_PUBLISHED_TOTAL = Counter(
	"contentguard_alerts_published_total",
	"Inappropriate content alerts published",
	["result"],
)

BATCHES_TOTAL = Counter(
	"contentguard_batches_total",
	"Inbound content-stored batches handled",
	["result"],
)


def observe_request(route: str, method: str, status: int, latency_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(latency_seconds)


def observe_scan(category: str, status: str, latency_seconds: float) -> None:
	SCAN_JOBS_TOTAL.labels(category, status).inc()
	SCAN_LATENCY_SECONDS.labels(category).observe(latency_seconds)
