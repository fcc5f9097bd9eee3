"""Daily CPI inflation cache with bounded BLS backfill."""

__version__ = "1.0.0"
