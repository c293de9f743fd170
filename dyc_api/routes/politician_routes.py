import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError
from pymongo import DESCENDING
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError
from starlette.datastructures import UploadFile

from dyc_api import config
from dyc_api.audit import record_audit
from dyc_api.auth import get_current_politician
from dyc_api.database.connection import POLITICIANS, get_db
from dyc_api.errors import bad_request, not_found
from dyc_api.models.audit_model import AuditAction, EntityType
from dyc_api.models.politician_model import SEXO_VALUES, serialize_profile, serialize_public
from dyc_api.schemas import ProfileUpdate
from dyc_api.storage import save_image
from dyc_api.utils import (
    api_response,
    is_blank,
    paginate,
    sanitize_text,
    skip_for,
    utcnow,
    validate_pagination_params,
    validate_phone_number,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/politicians", tags=["Politicians"])


async def _read_profile_form(request: Request):
    """Profile updates arrive as JSON or as multipart with photos."""
    files: Dict[str, UploadFile] = {}
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data") or content_type.startswith(
        "application/x-www-form-urlencoded"
    ):
        form = await request.form()
        fields: Dict[str, Any] = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key in config.PROFILE_PHOTO_FIELDS and value.filename:
                    files[key] = value
            else:
                fields[key] = value
    else:
        raw = await request.body()
        try:
            fields = await request.json() if raw else {}
        except ValueError:
            raise bad_request("Datos de entrada inválidos", "VALIDATION_ERROR")
        if not isinstance(fields, dict):
            raise bad_request("Datos de entrada inválidos", "VALIDATION_ERROR")

    try:
        return ProfileUpdate.model_validate(fields), files
    except ValidationError:
        raise bad_request("Datos de entrada inválidos", "VALIDATION_ERROR")


def _parse_age(raw: Any) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        age = int(raw)
    except (TypeError, ValueError):
        raise bad_request("Edad debe estar entre 18 y 120 años", "INVALID_AGE")
    if age < 18 or age > 120:
        raise bad_request("Edad debe estar entre 18 y 120 años", "INVALID_AGE")
    return age


@router.get("")
def list_politicians(
    isCandidato: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: Database = Depends(get_db),
):
    page_num, limit_num = validate_pagination_params(page, limit)
    query: Dict[str, Any] = {"isActive": True}
    if isCandidato is not None:
        query["isCandidato"] = isCandidato.lower() == "true"

    total = db[POLITICIANS].count_documents(query)
    cursor = (
        db[POLITICIANS].find(query)
        .sort("createdAt", DESCENDING)
        .skip(skip_for(page_num, limit_num))
        .limit(limit_num)
    )
    return api_response(True, "Políticos obtenidos exitosamente", {
        "politicians": [serialize_public(doc) for doc in cursor],
        "pagination": paginate(page_num, limit_num, total),
    })


@router.get("/profile")
def get_profile(politician: Dict[str, Any] = Depends(get_current_politician)):
    return api_response(True, "Perfil obtenido exitosamente", serialize_profile(politician))


@router.put("/profile")
async def update_profile(
    request: Request,
    politician: Dict[str, Any] = Depends(get_current_politician),
    db: Database = Depends(get_db),
):
    body, files = await _read_profile_form(request)

    if body.nombres is not None and is_blank(body.nombres):
        raise bad_request("Nombres no pueden estar vacíos", "INVALID_NAMES")
    if body.apellidos is not None and is_blank(body.apellidos):
        raise bad_request("Apellidos no pueden estar vacíos", "INVALID_SURNAMES")
    age = _parse_age(body.edad)
    if body.sexo and body.sexo not in SEXO_VALUES:
        raise bad_request("Sexo inválido", "INVALID_SEX")
    if body.numeroTelefono and not validate_phone_number(body.numeroTelefono):
        raise bad_request("Número telefónico inválido", "INVALID_PHONE")

    changes: Dict[str, Any] = {}
    if body.nombres:
        changes["nombres"] = sanitize_text(body.nombres)
    if body.apellidos:
        changes["apellidos"] = sanitize_text(body.apellidos)
    if age is not None:
        changes["edad"] = age
    if body.sexo:
        changes["sexo"] = body.sexo
    if body.numeroTelefono is not None:
        changes["numeroTelefono"] = body.numeroTelefono.strip()
    if body.biografia is not None:
        changes["biografia"] = sanitize_text(body.biografia)
    if body.documentoIdentidad and body.documentoIdentidad.strip() != politician.get("documentoIdentidad"):
        document = body.documentoIdentidad.strip()
        if db[POLITICIANS].find_one({"documentoIdentidad": document, "uuid": {"$ne": politician["uuid"]}}):
            raise bad_request("Ya existe un político con este documento", "DOCUMENT_ALREADY_EXISTS")
        changes["documentoIdentidad"] = document

    for field, upload in files.items():
        changes[field] = await save_image(field, upload)

    changes["updatedBy"] = politician["uuid"]
    changes["updatedAt"] = utcnow()
    try:
        db[POLITICIANS].update_one({"_id": politician["_id"]}, {"$set": changes})
    except DuplicateKeyError:
        raise bad_request("Ya existe un político con este documento", "DOCUMENT_ALREADY_EXISTS")
    politician.update(changes)

    record_audit(
        db, AuditAction.UPDATE, EntityType.POLITICIAN, politician["uuid"], politician["uuid"],
        details={
            "method": "profile_update",
            "updatedFields": sorted(set(body.model_dump(exclude_unset=True)) | set(files)),
        },
        request=request,
    )
    logger.info(f"Politician {politician['uuid']} updated profile")
    return api_response(True, "Perfil actualizado exitosamente", serialize_profile(politician))


@router.get("/{uuid}")
def get_public_profile(uuid: str, db: Database = Depends(get_db)):
    politician = db[POLITICIANS].find_one({"uuid": uuid, "isActive": True})
    if not politician:
        raise not_found("Político no encontrado", "POLITICIAN_NOT_FOUND")
    return api_response(True, "Perfil público obtenido exitosamente", serialize_public(politician))
