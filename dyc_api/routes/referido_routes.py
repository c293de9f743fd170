import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request
from pymongo import DESCENDING
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from dyc_api.aggregations import politician_names
from dyc_api.audit import record_audit
from dyc_api.auth import get_current_politician, require_representative
from dyc_api.database.connection import POLITICIANS, REFERIDOS, get_db
from dyc_api.errors import bad_request, forbidden, not_found
from dyc_api.models.audit_model import AuditAction, EntityType
from dyc_api.models.politician_model import full_name
from dyc_api.models.referido_model import Referido, serialize_referido
from dyc_api.schemas import ReferidoCreate, ReferidoUpdate
from dyc_api.utils import (
    api_response,
    is_blank,
    paginate,
    sanitize_text,
    skip_for,
    utcnow,
    validate_document_id,
    validate_email,
    validate_pagination_params,
    validate_phone_number,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/referidos", tags=["Referidos"])


def _duplicate_error(field: str):
    if field == "email":
        return bad_request("Ya existe un referido con este email", "EMAIL_ALREADY_EXISTS")
    return bad_request("Ya existe un referido con este documento", "DOCUMENT_ALREADY_EXISTS")


def _duplicate_field(exc: DuplicateKeyError) -> str:
    key_pattern = (exc.details or {}).get("keyPattern") or {}
    if "email" in key_pattern or "email" in str(exc):
        return "email"
    return "documentoIdentidad"


def _validate_referido(body: ReferidoCreate) -> None:
    if is_blank(body.nombres):
        raise bad_request("Nombres son requeridos", "NAMES_REQUIRED")
    if is_blank(body.apellidos):
        raise bad_request("Apellidos son requeridos", "SURNAMES_REQUIRED")
    if not validate_email(body.email):
        raise bad_request("Email válido es requerido", "INVALID_EMAIL")
    if not validate_document_id(body.documentoIdentidad):
        raise bad_request("Documento de identidad válido es requerido", "INVALID_DOCUMENT")
    if is_blank(body.politicianId):
        raise bad_request("ID del político es requerido", "POLITICIAN_ID_REQUIRED")
    if body.numeroTelefono and not validate_phone_number(body.numeroTelefono):
        raise bad_request("Número telefónico inválido", "INVALID_PHONE")


def _owned_referido(db: Database, uuid: str, politician: Dict[str, Any], verb: str) -> Dict[str, Any]:
    referido = db[REFERIDOS].find_one({"uuid": uuid, "isActive": True})
    if not referido:
        raise not_found("Referido no encontrado", "REFERIDO_NOT_FOUND")
    if referido.get("politicianId") != politician["uuid"]:
        raise forbidden(f"No autorizado para {verb} este referido", "NOT_AUTHORIZED")
    return referido


@router.post("", status_code=201)
def create_referido(body: ReferidoCreate, request: Request, db: Database = Depends(get_db)):
    """Public form: a citizen registers as supporter of a politician."""
    _validate_referido(body)

    politician = db[POLITICIANS].find_one({"uuid": body.politicianId, "isActive": True})
    if not politician:
        raise not_found("Político no encontrado", "POLITICIAN_NOT_FOUND")

    email = body.email.strip().lower()
    document = body.documentoIdentidad.strip()
    if db[REFERIDOS].find_one({"email": email}):
        raise _duplicate_error("email")
    if db[REFERIDOS].find_one({"documentoIdentidad": document}):
        raise _duplicate_error("documentoIdentidad")

    referido = Referido(
        nombres=sanitize_text(body.nombres),
        apellidos=sanitize_text(body.apellidos),
        email=email,
        numero_telefono=body.numeroTelefono.strip() if body.numeroTelefono else None,
        documento_identidad=document,
        politician_id=body.politicianId,
        created_by="public_form",
    ).to_document()
    try:
        db[REFERIDOS].insert_one(referido)
    except DuplicateKeyError as e:
        logger.warning(f"Duplicate referido rejected by index: {e}")
        raise _duplicate_error(_duplicate_field(e))

    record_audit(
        db, AuditAction.CREATE, EntityType.REFERIDO, referido["uuid"], body.politicianId,
        details={"method": "public_form", "politicianId": body.politicianId},
        request=request,
    )
    logger.info(f"Referido {referido['uuid']} registered for politician {body.politicianId}")
    return api_response(True, "Referido creado exitosamente", serialize_referido(referido))


@router.get("/my-referidos")
def get_my_referidos(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    politician: Dict[str, Any] = Depends(get_current_politician),
    db: Database = Depends(get_db),
):
    page_num, limit_num = validate_pagination_params(page, limit)
    query = {"politicianId": politician["uuid"], "isActive": True}
    total = db[REFERIDOS].count_documents(query)
    cursor = (
        db[REFERIDOS].find(query)
        .sort("createdAt", DESCENDING)
        .skip(skip_for(page_num, limit_num))
        .limit(limit_num)
    )
    return api_response(True, "Referidos obtenidos exitosamente", {
        "referidos": [serialize_referido(doc) for doc in cursor],
        "pagination": paginate(page_num, limit_num, total),
    })


@router.get("/all")
def get_all_referidos(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    politicianId: Optional[str] = Query(None),
    representative: Dict[str, Any] = Depends(require_representative),
    db: Database = Depends(get_db),
):
    """Every active referido; representatives only."""
    page_num, limit_num = validate_pagination_params(page, limit)
    query: Dict[str, Any] = {"isActive": True}
    if politicianId:
        query["politicianId"] = politicianId

    total = db[REFERIDOS].count_documents(query)
    referidos = list(
        db[REFERIDOS].find(query)
        .sort("createdAt", DESCENDING)
        .skip(skip_for(page_num, limit_num))
        .limit(limit_num)
    )
    owners = politician_names(db, {r.get("politicianId") for r in referidos})

    items = []
    for doc in referidos:
        item = serialize_referido(doc)
        owner = owners.get(doc.get("politicianId"))
        if owner:
            item["politician"] = {
                "uuid": owner["uuid"],
                "nombres": owner.get("nombres"),
                "apellidos": owner.get("apellidos"),
                "isCandidato": owner.get("isCandidato"),
                "nombreCompleto": full_name(owner),
            }
        items.append(item)

    return api_response(True, "Referidos obtenidos exitosamente", {
        "referidos": items,
        "pagination": paginate(page_num, limit_num, total),
    })


@router.get("/{uuid}")
def get_referido(
    uuid: str,
    politician: Dict[str, Any] = Depends(get_current_politician),
    db: Database = Depends(get_db),
):
    referido = _owned_referido(db, uuid, politician, "ver")
    return api_response(True, "Referido obtenido exitosamente", serialize_referido(referido))


@router.put("/{uuid}")
@router.patch("/{uuid}", include_in_schema=False)
def update_referido(
    uuid: str,
    body: ReferidoUpdate,
    request: Request,
    politician: Dict[str, Any] = Depends(get_current_politician),
    db: Database = Depends(get_db),
):
    referido = _owned_referido(db, uuid, politician, "modificar")

    if body.nombres is not None and is_blank(body.nombres):
        raise bad_request("Nombres no pueden estar vacíos", "INVALID_NAMES")
    if body.apellidos is not None and is_blank(body.apellidos):
        raise bad_request("Apellidos no pueden estar vacíos", "INVALID_SURNAMES")
    if body.email and not validate_email(body.email):
        raise bad_request("Email inválido", "INVALID_EMAIL")
    if body.numeroTelefono and not validate_phone_number(body.numeroTelefono):
        raise bad_request("Número telefónico inválido", "INVALID_PHONE")

    changes: Dict[str, Any] = {}
    if body.nombres:
        changes["nombres"] = sanitize_text(body.nombres)
    if body.apellidos:
        changes["apellidos"] = sanitize_text(body.apellidos)
    if body.email:
        email = body.email.strip().lower()
        if email != referido.get("email"):
            if db[REFERIDOS].find_one({"email": email, "uuid": {"$ne": uuid}}):
                raise _duplicate_error("email")
            changes["email"] = email
    if body.numeroTelefono is not None:
        changes["numeroTelefono"] = body.numeroTelefono.strip()

    changes["updatedBy"] = politician["uuid"]
    changes["updatedAt"] = utcnow()
    try:
        db[REFERIDOS].update_one({"_id": referido["_id"]}, {"$set": changes})
    except DuplicateKeyError as e:
        logger.warning(f"Duplicate referido email rejected by index: {e}")
        raise _duplicate_error("email")
    referido.update(changes)

    record_audit(
        db, AuditAction.UPDATE, EntityType.REFERIDO, uuid, politician["uuid"],
        details={"method": "referido_update", "updatedFields": sorted(body.model_dump(exclude_unset=True))},
        request=request,
    )
    return api_response(True, "Referido actualizado exitosamente", serialize_referido(referido))


@router.delete("/{uuid}")
def delete_referido(
    uuid: str,
    request: Request,
    politician: Dict[str, Any] = Depends(get_current_politician),
    db: Database = Depends(get_db),
):
    referido = _owned_referido(db, uuid, politician, "eliminar")
    db[REFERIDOS].update_one(
        {"_id": referido["_id"]},
        {"$set": {"isActive": False, "updatedBy": politician["uuid"], "updatedAt": utcnow()}},
    )
    record_audit(
        db, AuditAction.DELETE, EntityType.REFERIDO, uuid, politician["uuid"],
        details={"method": "referido_delete"},
        request=request,
    )
    return api_response(True, "Referido eliminado exitosamente")
