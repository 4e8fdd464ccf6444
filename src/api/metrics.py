from prometheus_client import Counter, Histogram, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        # Try to create it
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        # If it already exists, retrieve it from the registry
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "todo_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "todo_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

TASKS_EXTRACTED_TOTAL = get_or_create_metric(
    "todo_tasks_extracted_total", "Total tasks stored from text extraction", Counter
)

CANDIDATES_DROPPED_TOTAL = get_or_create_metric(
    "todo_candidates_dropped_total",
    "Extracted candidates dropped because storing them failed",
    Counter,
)

EXTRACTION_ERRORS_TOTAL = get_or_create_metric(
    "todo_extraction_errors_total",
    "Failed extraction calls",
    Counter,
    labelnames=["kind"],
)
