"""MongoDB client and database access.

The MongoClient is thread-safe and pools connections, so one instance is
shared by the whole process. It is created lazily from Settings and closed
in the application lifespan.
"""

import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from cocoon.core.settings import get_settings

logger = logging.getLogger(__name__)

_client: MongoClient | None = None


class Collections:
    """Collection names."""

    USERS = "users"
    ORDERS = "orders"
    PRODUCTS = "products"
    CATEGORIES = "categories"
    SUBSCRIPTIONS = "subscriptions"


def get_client() -> MongoClient:
    global _client
    if _client is None:
        settings = get_settings()
        _client = MongoClient(settings.mongodb_url, tz_aware=True)
    return _client


def get_database() -> Database:
    """FastAPI dependency returning the application database."""
    return get_client()[get_settings().mongodb_db]


def close_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None


def ensure_indexes(db: Database) -> None:
    """Create the indexes the application relies on.

    Unique indexes back the duplicate-email checks; the rest serve the order
    and catalog queries.
    """
    db[Collections.USERS].create_index("user_email", unique=True)
    db[Collections.SUBSCRIPTIONS].create_index("email", unique=True)
    db[Collections.ORDERS].create_index(
        [("user_id", ASCENDING), ("createdAt", DESCENDING)]
    )
    db[Collections.ORDERS].create_index("order_id")
    db[Collections.PRODUCTS].create_index([("createdAt", DESCENDING)])
    db[Collections.PRODUCTS].create_index("product_category")
    logger.info("MongoDB indexes ensured")
