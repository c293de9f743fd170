from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from dyc_api.models.base import TimestampedDocument


class Permission(str, Enum):
    MANAGE_POLITICIANS = "manage_politicians"
    MANAGE_REFERIDOS = "manage_referidos"
    VIEW_AUDIT_LOGS = "view_audit_logs"
    VIEW_STATISTICS = "view_statistics"
    SYSTEM_ADMIN = "system_admin"


class Admin(TimestampedDocument):
    username: str = Field(..., min_length=3)
    email: str
    hashed_password: str
    is_active: bool = True
    last_login: Optional[datetime] = None
    permissions: List[Permission] = Field(default_factory=lambda: [Permission.SYSTEM_ADMIN])

    def to_document(self) -> Dict[str, Any]:
        doc = super().to_document()
        doc["email"] = doc["email"].lower()
        return doc


def serialize_admin(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "uuid": doc.get("uuid"),
        "username": doc.get("username"),
        "email": doc.get("email"),
        "permissions": doc.get("permissions", []),
    }
