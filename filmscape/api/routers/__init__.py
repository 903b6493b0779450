"""
API route handlers.
"""

from filmscape.api.routers import users, movies, reviews, system

__all__ = ["users", "movies", "reviews", "system"]
