from datetime import datetime
from typing import Optional

from pydantic import Field

from dyc_api.models.base import MongoDocument
from dyc_api.utils import utcnow


class UserSession(MongoDocument):
    politician_id: str
    token: str
    expires_at: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    last_activity: datetime = Field(default_factory=utcnow)
