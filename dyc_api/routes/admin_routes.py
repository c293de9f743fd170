import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request
from pymongo import DESCENDING
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from dyc_api import config
from dyc_api.aggregations import count_politicians_without_email, politician_totals, recent_audit_logs
from dyc_api.audit import record_audit
from dyc_api.auth import require_permission, require_system_admin
from dyc_api.crud import authenticate_admin, mark_admin_login
from dyc_api.database.connection import AUDIT_LOGS, POLITICIANS, get_db
from dyc_api.errors import bad_request, not_found, unauthorized
from dyc_api.models.admin_model import Permission, serialize_admin
from dyc_api.models.audit_model import AuditAction, EntityType, serialize_audit_log
from dyc_api.schemas import AdminLoginRequest, EmailUpdateRequest
from dyc_api.security import create_admin_token
from dyc_api.utils import (
    api_response,
    iso_timestamp,
    paginate,
    skip_for,
    utcnow,
    validate_email,
    validate_pagination_params,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

AUDIT_LOG_PAGE_LIMIT = 50


@router.post("/login")
def admin_login(body: AdminLoginRequest, request: Request, db: Database = Depends(get_db)):
    if not body.username or not body.password:
        raise bad_request("Usuario y contraseña son requeridos", "MISSING_FIELDS")

    admin, error = authenticate_admin(db, body.username, body.password)
    if error:
        logger.warning(f"Failed admin login for {body.username}")
        raise unauthorized(error, "INVALID_CREDENTIALS")

    mark_admin_login(db, admin)
    token, expires_at = create_admin_token(admin)
    record_audit(
        db, AuditAction.LOGIN, EntityType.ADMIN, admin["uuid"], admin["uuid"],
        details={"method": "admin_login", "username": admin["username"]},
        request=request,
    )
    logger.info(f"Admin {admin['username']} logged in")
    return api_response(True, "Login exitoso", {
        "token": token,
        "admin": serialize_admin(admin),
        "expiresAt": expires_at.isoformat(),
    })


@router.patch("/politicians/{uuid}/email")
def update_politician_email(
    uuid: str,
    body: EmailUpdateRequest,
    request: Request,
    admin: Dict[str, Any] = Depends(require_permission(Permission.MANAGE_POLITICIANS)),
    db: Database = Depends(get_db),
):
    """Assign the email a politician will use to sign in with Google."""
    if not body.email or not body.email.strip():
        raise bad_request("Email es requerido", "MISSING_EMAIL")
    if not validate_email(body.email):
        raise bad_request("Email inválido", "INVALID_EMAIL")
    email = body.email.strip().lower()

    politician = db[POLITICIANS].find_one({"uuid": uuid, "isActive": True})
    if not politician:
        raise not_found("Político no encontrado", "POLITICIAN_NOT_FOUND")

    taken = db[POLITICIANS].find_one({"email": email, "isActive": True, "uuid": {"$ne": uuid}})
    if taken:
        raise bad_request("Este email ya está registrado por otro político", "EMAIL_ALREADY_EXISTS")

    old_email = politician.get("email")
    changes = {"email": email, "updatedBy": admin["uuid"], "updatedAt": utcnow()}
    try:
        db[POLITICIANS].update_one({"_id": politician["_id"]}, {"$set": changes})
    except DuplicateKeyError:
        raise bad_request("Este email ya está registrado por otro político", "EMAIL_ALREADY_EXISTS")
    politician.update(changes)

    record_audit(
        db, AuditAction.UPDATE, EntityType.POLITICIAN, uuid, admin["uuid"],
        details={"field": "email", "oldValue": old_email, "newValue": email, "updatedBy": "admin"},
        request=request,
    )
    logger.info(f"Admin {admin['username']} changed email of politician {uuid}")
    return api_response(True, "Email actualizado exitosamente", {
        "uuid": politician["uuid"],
        "nombres": politician.get("nombres"),
        "apellidos": politician.get("apellidos"),
        "email": email,
        "isCandidato": politician.get("isCandidato"),
    })


@router.get("/audit-logs")
def get_audit_logs(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    entityType: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    userId: Optional[str] = Query(None),
    admin: Dict[str, Any] = Depends(require_permission(Permission.VIEW_AUDIT_LOGS)),
    db: Database = Depends(get_db),
):
    page_num, limit_num = validate_pagination_params(page, limit, default_limit=AUDIT_LOG_PAGE_LIMIT)
    query: Dict[str, Any] = {}
    if entityType:
        query["entityType"] = entityType
    if action:
        query["action"] = action
    if userId:
        query["userId"] = userId

    total = db[AUDIT_LOGS].count_documents(query)
    cursor = (
        db[AUDIT_LOGS].find(query)
        .sort("timestamp", DESCENDING)
        .skip(skip_for(page_num, limit_num))
        .limit(limit_num)
    )
    return api_response(True, "Logs de auditoría obtenidos exitosamente", {
        "logs": [serialize_audit_log(doc) for doc in cursor],
        "pagination": paginate(page_num, limit_num, total),
    })


@router.get("/dashboard")
def get_admin_dashboard(
    admin: Dict[str, Any] = Depends(require_system_admin),
    db: Database = Depends(get_db),
):
    statistics = politician_totals(db)
    statistics["totalAuditLogs"] = db[AUDIT_LOGS].count_documents({})
    return api_response(True, "Dashboard de administrador obtenido exitosamente", {
        "statistics": statistics,
        "recentLogs": [serialize_audit_log(doc) for doc in recent_audit_logs(db, {}, 10)],
        "politiciansWithoutEmail": count_politicians_without_email(db),
        "lastUpdated": iso_timestamp(),
        "environment": config.ENVIRONMENT,
    })
