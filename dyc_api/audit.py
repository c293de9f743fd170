import logging
from typing import Any, Dict, Optional

from fastapi import Request
from pymongo.database import Database

from dyc_api.database.connection import AUDIT_LOGS
from dyc_api.models.audit_model import AuditAction, AuditLog, EntityType
from dyc_api.utils import client_ip, user_agent

logger = logging.getLogger(__name__)


def record_audit(
    db: Database,
    action: AuditAction,
    entity_type: EntityType,
    entity_id: str,
    user_id: str,
    details: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> Dict[str, Any]:
    """Append one entry to the audit log and return the stored document.

    When a request is given, the client IP and user agent are copied into
    both the entry and its details.
    """
    details = dict(details or {})
    ip = agent = None
    if request is not None:
        ip, agent = client_ip(request), user_agent(request)
        details.setdefault("ipAddress", ip)
        details.setdefault("userAgent", agent)

    entry = AuditLog(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        user_id=user_id,
        details=details,
        ip_address=ip,
        user_agent=agent,
    ).to_document()
    db[AUDIT_LOGS].insert_one(entry)
    logger.debug(f"Audit {entry['action']} {entry['entityType']}:{entity_id} by {user_id}")
    return entry
