"""
Database models.
"""
from cryptotracker.models.user import User
from cryptotracker.models.favorite import Favorite

__all__ = [
    "User",
    "Favorite",
]
