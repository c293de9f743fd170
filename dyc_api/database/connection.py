import logging
from typing import Optional

from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from dyc_api import config

logger = logging.getLogger(__name__)

POLITICIANS = "politicians"
REFERIDOS = "referidos"
AUDIT_LOGS = "audit_logs"
USER_SESSIONS = "user_sessions"
ADMINS = "admins"

# (collection, keys, unique)
INDEXES = [
    (POLITICIANS, [("uuid", ASCENDING)], True),
    (POLITICIANS, [("documentoIdentidad", ASCENDING)], True),
    (POLITICIANS, [("email", ASCENDING)], True),
    (POLITICIANS, [("isCandidato", ASCENDING), ("isActive", ASCENDING)], False),
    (REFERIDOS, [("uuid", ASCENDING)], True),
    (REFERIDOS, [("documentoIdentidad", ASCENDING)], True),
    (REFERIDOS, [("email", ASCENDING)], True),
    (REFERIDOS, [("politicianId", ASCENDING), ("isActive", ASCENDING)], False),
    (REFERIDOS, [("createdAt", ASCENDING), ("isActive", ASCENDING)], False),
    (AUDIT_LOGS, [("uuid", ASCENDING)], True),
    (AUDIT_LOGS, [("entityType", ASCENDING), ("entityId", ASCENDING)], False),
    (AUDIT_LOGS, [("userId", ASCENDING), ("timestamp", ASCENDING)], False),
    (AUDIT_LOGS, [("action", ASCENDING), ("timestamp", ASCENDING)], False),
    (USER_SESSIONS, [("uuid", ASCENDING)], True),
    (USER_SESSIONS, [("token", ASCENDING)], True),
    (USER_SESSIONS, [("politicianId", ASCENDING), ("isActive", ASCENDING)], False),
    (ADMINS, [("uuid", ASCENDING)], True),
    (ADMINS, [("username", ASCENDING)], True),
    (ADMINS, [("email", ASCENDING)], True),
]

_client: Optional[MongoClient] = None


def get_client() -> MongoClient:
    global _client
    if _client is None:
        _client = MongoClient(config.MONGO_URI, maxPoolSize=10, serverSelectionTimeoutMS=5000)
        logger.info("MongoDB client created for database %s", config.MONGO_DB)
    return _client


def get_db() -> Database:
    """FastAPI dependency returning the application database."""
    return get_client()[config.MONGO_DB]


def close_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("MongoDB connection closed")


def ensure_indexes(db: Database) -> None:
    for collection, keys, unique in INDEXES:
        db[collection].create_index(keys, unique=unique)
    logger.info("Ensured %d indexes on %s", len(INDEXES), db.name)


def ping(db: Database) -> bool:
    try:
        db.command("ping")
        return True
    except Exception as e:
        logger.error(f"MongoDB ping failed: {e}")
        return False
