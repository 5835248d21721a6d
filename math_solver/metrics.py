from prometheus_client import Counter, Gauge, Histogram

# === Common HTTP Metrics ===

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "endpoint", "method", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["service", "endpoint", "method"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

service_health_status = Gauge(
    "service_health_status",
    "Current health status of the service (2=healthy, 1=degraded, 0=down)",
    ["service"],
)

# === Solver Metrics ===

solver_llm_calls_total = Counter(
    "solver_llm_calls_total",
    "Total LLM calls made",
    ["call", "status"],
)

solver_llm_duration_seconds = Histogram(
    "solver_llm_duration_seconds",
    "LLM call duration in seconds",
    ["call"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)

solver_outcomes_total = Counter(
    "solver_outcomes_total",
    "Solve requests by final outcome",
    ["outcome"],
)

solver_fields_extracted_total = Counter(
    "solver_fields_extracted_total",
    "Structured fields found in (or defaulted from) model output",
    ["field", "matched"],
)

solver_suspicious_results_total = Counter(
    "solver_suspicious_results_total",
    "Derivative results that consisted only of digits",
)

solver_errors_total = Counter(
    "solver_errors_total",
    "Total errors",
    ["error_type"],
)
