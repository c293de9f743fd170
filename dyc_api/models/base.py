from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from dyc_api.utils import generate_uuid, utcnow


class MongoDocument(BaseModel):
    """Stored document; attributes are snake_case, keys in MongoDB are camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)

    uuid: str = Field(default_factory=generate_uuid)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class TimestampedDocument(MongoDocument):
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


def object_id(doc: Dict[str, Any]) -> Any:
    _id = doc.get("_id")
    return str(_id) if _id is not None else None
