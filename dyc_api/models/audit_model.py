from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import Field

from dyc_api.models.base import MongoDocument, object_id
from dyc_api.utils import utcnow


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"


class EntityType(str, Enum):
    POLITICIAN = "politician"
    REFERIDO = "referido"
    USER = "user"
    ADMIN = "admin"


class AuditLog(MongoDocument):
    action: AuditAction
    entity_type: EntityType
    entity_id: str
    user_id: str
    timestamp: datetime = Field(default_factory=utcnow)
    details: Dict[str, Any] = Field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def serialize_audit_log(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": object_id(doc),
        "uuid": doc.get("uuid"),
        "action": doc.get("action"),
        "entityType": doc.get("entityType"),
        "entityId": doc.get("entityId"),
        "userId": doc.get("userId"),
        "timestamp": doc.get("timestamp"),
        "details": doc.get("details"),
        "ipAddress": doc.get("ipAddress"),
        "userAgent": doc.get("userAgent"),
    }
