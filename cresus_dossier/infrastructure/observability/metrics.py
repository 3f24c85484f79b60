"""Prometheus metrics for monitoring submissions, attachment uploads and exports"""

from prometheus_client import Counter, Histogram

# Submission metrics
submission_counter = Counter(
    "cresus_dossier_submissions_total",
    "Total dossier submissions",
    ["outcome"],  # stored | refused | failed
)

residual_bucket_counter = Counter(
    "cresus_dossier_residual_bucket",
    "Monthly residual of submitted dossiers by bucket",
    ["bucket"],  # negative, 0-300€, 300-800€, 800€+
)

# Attachment metrics
attachment_counter = Counter(
    "cresus_attachment_uploads_total",
    "Attachment uploads by outcome",
    ["outcome"],  # uploaded | failed | rejected
)

storage_latency_histogram = Histogram(
    "storage_request_seconds",
    "Object storage response time",
    ["operation"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

storage_failure_counter = Counter(
    "storage_failures_total",
    "Failed object storage calls",
    ["operation"],
)

# Advisor actions
deletion_counter = Counter(
    "cresus_dossier_deletions_total",
    "Dossiers deleted by advisors",
)

pdf_render_histogram = Histogram(
    "cresus_pdf_render_seconds",
    "PDF rendering time",
    ["template"],  # report | snapshot
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_submission(residual_cents: int) -> None:
    """Record a stored dossier and bucket its residual for follow-up of hardship levels"""
    submission_counter.labels(outcome="stored").inc()

    if residual_cents < 0:
        bucket = "negative"
    elif residual_cents <= 30_000:
        bucket = "0-300€"
    elif residual_cents <= 80_000:
        bucket = "300-800€"
    else:
        bucket = "800€+"

    residual_bucket_counter.labels(bucket=bucket).inc()
