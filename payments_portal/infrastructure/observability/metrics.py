"""Prometheus metrics for monitoring portal outcomes and HubSpot API health"""

from prometheus_client import Counter, Histogram

# Portal outcome metrics
portal_outcome_counter = Counter(
    "portal_outcome_total",
    "Portal requests by resolution outcome",
    ["outcome"],  # missing_email | no_account | no_programs | deal_not_found | single_portal | selection_needed | error
)

portal_deal_count_histogram = Histogram(
    "portal_deals_per_contact",
    "Deals found per contact lookup",
    buckets=[0, 1, 2, 3, 5, 10, 25],
)

# HubSpot API metrics
hubspot_latency_histogram = Histogram(
    "hubspot_request_latency_seconds",
    "HubSpot API response time",
    ["operation"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

hubspot_failure_counter = Counter(
    "hubspot_request_failures_total",
    "Failed HubSpot API calls",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_outcome(outcome: str, deal_count: int | None = None) -> None:
    """Record how a portal request was resolved"""
    portal_outcome_counter.labels(outcome=outcome).inc()

    if deal_count is not None:
        portal_deal_count_histogram.observe(deal_count)
