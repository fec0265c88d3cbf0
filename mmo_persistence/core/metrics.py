"""
Prometheus metrics for the persistence engine.

Tracks how long composite saves and loads take, how often rows are dropped
while loading, and how effective the guild cache is.
"""

from prometheus_client import (
    Counter,
    Histogram,
    CollectorRegistry,
    generate_latest,
)

# Create a custom registry for our metrics
REGISTRY = CollectorRegistry()

# =============================================================================
# ACCOUNT METRICS
# =============================================================================

login_attempts_total = Counter(
    "mmo_login_attempts_total",
    "Total number of account login attempts",
    ["status"],  # status: success, created, rejected
    registry=REGISTRY,
)

# =============================================================================
# CHARACTER METRICS
# =============================================================================

character_load_duration_seconds = Histogram(
    "mmo_character_load_duration_seconds",
    "Time spent loading a full character",
    registry=REGISTRY,
)

character_save_duration_seconds = Histogram(
    "mmo_character_save_duration_seconds",
    "Time spent saving characters",
    ["mode"],  # mode: single, batch
    registry=REGISTRY,
)

character_loads_total = Counter(
    "mmo_character_loads_total",
    "Total number of character load attempts",
    ["status"],  # status: success, not_found, missing_class
    registry=REGISTRY,
)

skipped_rows_total = Counter(
    "mmo_skipped_rows_total",
    "Rows dropped while loading because they no longer fit the game data",
    ["table", "reason"],  # reason: stale_reference, out_of_range
    registry=REGISTRY,
)

# =============================================================================
# GUILD METRICS
# =============================================================================

guild_cache_lookups_total = Counter(
    "mmo_guild_cache_lookups_total",
    "Guild cache lookups",
    ["result"],  # result: hit, miss
    registry=REGISTRY,
)


def get_metrics() -> bytes:
    """Render every registered metric in the Prometheus text format."""
    return generate_latest(REGISTRY)
