from typing import Any, Optional

from pydantic import BaseModel, Field


# Fields are optional so handlers can answer with their own error codes
class ReferidoCreate(BaseModel):
    nombres: Optional[str] = None
    apellidos: Optional[str] = None
    email: Optional[str] = None
    numeroTelefono: Optional[str] = None
    documentoIdentidad: Optional[str] = None
    politicianId: Optional[str] = None


class ReferidoUpdate(BaseModel):
    nombres: Optional[str] = None
    apellidos: Optional[str] = None
    email: Optional[str] = None
    numeroTelefono: Optional[str] = None


class ProfileUpdate(BaseModel):
    nombres: Optional[str] = None
    apellidos: Optional[str] = None
    # raw value, multipart sends it as text
    edad: Optional[Any] = None
    sexo: Optional[str] = None
    numeroTelefono: Optional[str] = None
    biografia: Optional[str] = None
    documentoIdentidad: Optional[str] = None


class AdminLoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class EmailUpdateRequest(BaseModel):
    email: Optional[str] = Field(None, examples=["politico@example.com"])
