from enum import Enum
from typing import Any, Dict, Optional

from pydantic import EmailStr, Field

from dyc_api.models.base import TimestampedDocument, object_id


class Sexo(str, Enum):
    MASCULINO = "masculino"
    FEMENINO = "femenino"
    NO_BINARIO = "no binario"
    OTRO = "otro"


SEXO_VALUES = [s.value for s in Sexo]


class Politician(TimestampedDocument):
    nombres: str = Field(..., min_length=1)
    apellidos: str = Field(..., min_length=1)
    edad: Optional[int] = Field(None, ge=18, le=120)
    sexo: Optional[Sexo] = None
    email: EmailStr
    numero_telefono: Optional[str] = None
    documento_identidad: str = Field(..., min_length=1)
    biografia: Optional[str] = None
    foto_perfil: Optional[str] = None
    foto_cuerpo_completo: Optional[str] = None
    foto_portada: Optional[str] = None
    is_candidato: bool = True
    is_active: bool = True
    oauth_provider: Optional[str] = None
    oauth_id: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    def to_document(self) -> Dict[str, Any]:
        doc = super().to_document()
        doc["email"] = doc["email"].lower()
        return doc


def full_name(doc: Dict[str, Any]) -> str:
    return f"{doc.get('nombres', '')} {doc.get('apellidos', '')}".strip()


def role_label(doc: Dict[str, Any]) -> str:
    return "Candidato" if doc.get("isCandidato") else "Representante"


def serialize_profile(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": object_id(doc),
        "uuid": doc.get("uuid"),
        "nombres": doc.get("nombres"),
        "apellidos": doc.get("apellidos"),
        "edad": doc.get("edad"),
        "sexo": doc.get("sexo"),
        "numeroTelefono": doc.get("numeroTelefono"),
        "documentoIdentidad": doc.get("documentoIdentidad"),
        "biografia": doc.get("biografia"),
        "fotoPerfil": doc.get("fotoPerfil"),
        "fotoCuerpoCompleto": doc.get("fotoCuerpoCompleto"),
        "fotoPortada": doc.get("fotoPortada"),
        "isCandidato": doc.get("isCandidato"),
        "isActive": doc.get("isActive"),
        "email": doc.get("email"),
        "oauthProvider": doc.get("oauthProvider"),
        "oauthId": doc.get("oauthId"),
        "nombreCompleto": full_name(doc),
        "rol": role_label(doc),
    }


def serialize_public(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": object_id(doc),
        "uuid": doc.get("uuid"),
        "nombres": doc.get("nombres"),
        "apellidos": doc.get("apellidos"),
        "edad": doc.get("edad"),
        "sexo": doc.get("sexo"),
        "biografia": doc.get("biografia"),
        "fotoPerfil": doc.get("fotoPerfil"),
        "fotoCuerpoCompleto": doc.get("fotoCuerpoCompleto"),
        "fotoPortada": doc.get("fotoPortada"),
        "isCandidato": doc.get("isCandidato"),
        "createdAt": doc.get("createdAt"),
        "nombreCompleto": full_name(doc),
        "rol": role_label(doc),
    }


def serialize_summary(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "uuid": doc.get("uuid"),
        "nombres": doc.get("nombres"),
        "apellidos": doc.get("apellidos"),
        "isCandidato": doc.get("isCandidato"),
        "fotoPerfil": doc.get("fotoPerfil"),
        "email": doc.get("email"),
    }
