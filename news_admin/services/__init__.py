"""Query, statistics and session services."""
