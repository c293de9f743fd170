import logging
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from dyc_api import config
from dyc_api.database.connection import ADMINS, POLITICIANS, USER_SESSIONS
from dyc_api.models.admin_model import Admin, Permission
from dyc_api.models.politician_model import Politician
from dyc_api.models.session_model import UserSession
from dyc_api.security import hash_password, verify_password
from dyc_api.utils import utcnow

logger = logging.getLogger(__name__)


# Create or reset an admin with a hashed password
def upsert_admin(
    db: Database,
    username: str,
    password: str,
    email: Optional[str] = None,
    permissions: Optional[Iterable[str]] = None,
) -> Dict[str, Any]:
    perms = [Permission(p) for p in (permissions or [Permission.SYSTEM_ADMIN])]
    existing = db[ADMINS].find_one({"username": username})
    if existing:
        return db[ADMINS].find_one_and_update(
            {"_id": existing["_id"]},
            {"$set": {
                "hashedPassword": hash_password(password),
                "permissions": [p.value for p in perms],
                "isActive": True,
                "updatedAt": utcnow(),
            }},
            return_document=ReturnDocument.AFTER,
        )

    admin = Admin(
        username=username,
        email=email or f"{username}@dyc.com",
        hashed_password=hash_password(password),
        permissions=perms,
    ).to_document()
    db[ADMINS].insert_one(admin)
    logger.info(f"Admin {username} created")
    return admin


def _bootstrap_admin(db: Database, username: str, password: str) -> Optional[Dict[str, Any]]:
    """The configured admin is provisioned on its first successful login.

    An existing record, deactivated or not, is never touched here.
    """
    if username != config.ADMIN_USER or password != config.ADMIN_PASS:
        return None
    if db[ADMINS].find_one({"username": username}):
        return None
    try:
        return upsert_admin(db, username, password)
    except DuplicateKeyError:
        # Another request provisioned it first
        return db[ADMINS].find_one({"username": username, "isActive": True})


# Login admin
def authenticate_admin(db: Database, username: str, password: str) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    admin = db[ADMINS].find_one({"username": username, "isActive": True})
    if not admin:
        admin = _bootstrap_admin(db, username, password)
        if not admin:
            return None, "Credenciales inválidas"
        return admin, None

    if not verify_password(password, admin.get("hashedPassword")):
        return None, "Credenciales inválidas"
    return admin, None


def mark_admin_login(db: Database, admin: Dict[str, Any]) -> None:
    now = utcnow()
    db[ADMINS].update_one({"_id": admin["_id"]}, {"$set": {"lastLogin": now, "updatedAt": now}})
    admin["lastLogin"] = now


def create_session(
    db: Database,
    politician_id: str,
    token: str,
    expires_at: datetime,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Dict[str, Any]:
    session = UserSession(
        politician_id=politician_id,
        token=token,
        expires_at=expires_at.replace(tzinfo=None),
        ip_address=ip_address,
        user_agent=user_agent,
    ).to_document()
    db[USER_SESSIONS].insert_one(session)
    return session


def deactivate_sessions(db: Database, politician_id: str) -> int:
    result = db[USER_SESSIONS].update_many(
        {"politicianId": politician_id, "isActive": True},
        {"$set": {"isActive": False, "lastActivity": utcnow()}},
    )
    return result.modified_count


def insert_politicians(db: Database, records: Iterable[Dict[str, Any]]) -> Tuple[int, int]:
    """Insert politicians given as camelCase dicts, skipping existing email or document.

    Returns ``(inserted, skipped)``.
    """
    inserted = skipped = 0
    for record in records:
        politician = Politician.model_validate({**record, "createdBy": "admin_script"}).to_document()
        duplicate = db[POLITICIANS].find_one({"$or": [
            {"email": politician["email"]},
            {"documentoIdentidad": politician["documentoIdentidad"]},
        ]})
        if duplicate:
            logger.warning(f"Skipping politician {politician['email']}: already exists")
            skipped += 1
            continue
        db[POLITICIANS].insert_one(politician)
        inserted += 1
    return inserted, skipped
