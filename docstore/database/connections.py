"""
MongoDB connection management.
"""
import logging
from typing import Any, Optional

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from docstore.core.exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)


def open_client(connection_url: Optional[str] = None, **client_options: Any) -> MongoClient:
    """
    Create a MongoDB client and check that the server answers.

    Args:
        connection_url: MongoDB connection string (None lets the options
            carry host/credentials on their own)
        **client_options: Keyword settings passed to MongoClient

    Returns:
        Connected MongoClient

    Raises:
        DatabaseConnectionError: If the server cannot be reached
    """
    try:
        client = MongoClient(connection_url, **client_options)
        client.admin.command("ping")
    except PyMongoError as e:
        logger.error(f"Could not connect to MongoDB: {e}")
        raise DatabaseConnectionError(f"Could not connect to MongoDB: {e}") from e

    logger.info("Connected to MongoDB")
    return client


def close_client(client: Optional[MongoClient]) -> None:
    """Close a MongoDB client if there is one."""
    if client is not None:
        client.close()
        logger.info("Disconnected from MongoDB")
