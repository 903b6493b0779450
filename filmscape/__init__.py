"""
Filmscape: movie review and watchlist backend.

This package contains the REST API, the database layer, and the rating
aggregation that keeps movie scores consistent with their reviews.
"""

__version__ = "1.0.0"
