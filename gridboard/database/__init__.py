"""
Database module initialization
"""
from gridboard.database.config import database, get_db
from gridboard.database.transaction import transaction

__all__ = ["database", "get_db", "transaction"]
