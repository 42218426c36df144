"""
Prometheus metrics for recipe searches, Edamam API usage and favourites.
Exposed via /metrics endpoint for Prometheus scraping.
"""

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Response time histogram (seconds)
external_query_duration_seconds = Histogram(
    "meal_planner_external_query_duration_seconds",
    "Edamam API query duration in seconds",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 10.0),
)

# Searches by diet filter
recipe_search_total = Counter(
    "meal_planner_search_total",
    "Recipe search requests by diet filter",
    ["diet"],
)

# Edamam API success/failure
recipe_api_calls_total = Counter(
    "meal_planner_recipe_api_calls_total",
    "Edamam API calls by status",
    ["status"],  # success/failure
)

favourite_operations_total = Counter(
    "meal_planner_favourite_operations_total",
    "Favourite operations by outcome",
    ["operation", "outcome"],  # list/create/remove
)


def record_external_duration(seconds: float) -> None:
    """Record Edamam API query duration."""
    external_query_duration_seconds.observe(seconds)


def record_recipe_search(diet_label: str) -> None:
    """Record a recipe search by diet filter (none, a known diet, or other)."""
    recipe_search_total.labels(diet=diet_label).inc()


def record_recipe_api(success: bool) -> None:
    """Record Edamam API call result."""
    status = "success" if success else "failure"
    recipe_api_calls_total.labels(status=status).inc()


def record_favourite_operation(operation: str, outcome: str) -> None:
    favourite_operations_total.labels(operation=operation, outcome=outcome).inc()


def render_latest() -> tuple[bytes, str]:
    """Return (body, content type) for the /metrics endpoint."""
    return generate_latest(), CONTENT_TYPE_LATEST
