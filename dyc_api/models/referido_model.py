from typing import Any, Dict, Optional

from pydantic import Field

from dyc_api.models.base import TimestampedDocument, object_id
from dyc_api.models.politician_model import full_name


class Referido(TimestampedDocument):
    nombres: str = Field(..., min_length=1)
    apellidos: str = Field(..., min_length=1)
    email: str
    numero_telefono: Optional[str] = None
    documento_identidad: str
    politician_id: str
    is_active: bool = True
    created_by: Optional[str] = None
    updated_by: Optional[str] = None


def serialize_referido(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": object_id(doc),
        "uuid": doc.get("uuid"),
        "nombres": doc.get("nombres"),
        "apellidos": doc.get("apellidos"),
        "email": doc.get("email"),
        "numeroTelefono": doc.get("numeroTelefono"),
        "documentoIdentidad": doc.get("documentoIdentidad"),
        "politicianId": doc.get("politicianId"),
        "isActive": doc.get("isActive"),
        "createdAt": doc.get("createdAt"),
        "updatedAt": doc.get("updatedAt"),
        "nombreCompleto": full_name(doc),
    }
