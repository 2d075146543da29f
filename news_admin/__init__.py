"""News Admin: filtering, monitoring and statistics API for aggregated news."""

__version__ = "1.0.0"
