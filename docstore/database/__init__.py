"""
Database module - MongoDB connection and collection registry.
"""
from docstore.database.connections import close_client, open_client
from docstore.database.registry import Database

__all__ = [
    "Database",
    "open_client",
    "close_client",
]
