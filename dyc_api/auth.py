"""
Authentication and authorisation dependencies.

Politician and admin endpoints declare these with ``Depends``. Each one
verifies the bearer JWT, reloads the actor from MongoDB and returns its
document; role gates read the stored flags, never the token claims.
"""

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pymongo.database import Database

from dyc_api.database.connection import ADMINS, POLITICIANS, USER_SESSIONS, get_db
from dyc_api.errors import forbidden, unauthorized
from dyc_api.models.admin_model import Permission
from dyc_api.security import TOKEN_TYPE_ADMIN, TOKEN_TYPE_POLITICIAN, decode_access_token
from dyc_api.utils import utcnow

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise unauthorized("Token de acceso requerido", "MISSING_TOKEN")
    return credentials.credentials


def _decode(token: str, expected_type: str) -> Dict[str, Any]:
    try:
        payload = decode_access_token(token)
    except JWTError as e:
        logger.info(f"Rejected token: {e}")
        raise unauthorized("Token inválido o expirado", "INVALID_TOKEN")
    if payload.get("type") != expected_type or not payload.get("uuid"):
        raise unauthorized("Token inválido o no autorizado", "INVALID_TOKEN")
    return payload


def get_current_politician(
    token: str = Depends(get_bearer_token),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    payload = _decode(token, TOKEN_TYPE_POLITICIAN)

    session = db[USER_SESSIONS].find_one({"token": token})
    if session is not None:
        if not session.get("isActive", False):
            raise unauthorized("Sesión cerrada", "SESSION_REVOKED")
        db[USER_SESSIONS].update_one({"_id": session["_id"]}, {"$set": {"lastActivity": utcnow()}})

    politician = db[POLITICIANS].find_one({"uuid": payload["uuid"], "isActive": True})
    if not politician:
        raise unauthorized("Político no encontrado o inactivo", "POLITICIAN_NOT_FOUND")
    return politician


def require_representative(
    politician: Dict[str, Any] = Depends(get_current_politician),
) -> Dict[str, Any]:
    if politician.get("isCandidato", True):
        raise forbidden("Se requieren permisos de representante", "REPRESENTATIVE_REQUIRED")
    return politician


def get_current_admin(
    token: str = Depends(get_bearer_token),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    payload = _decode(token, TOKEN_TYPE_ADMIN)
    admin = db[ADMINS].find_one({"uuid": payload["uuid"], "isActive": True})
    if not admin:
        raise unauthorized("Administrador no encontrado o inactivo", "ADMIN_NOT_FOUND")
    return admin


def has_permission(admin: Dict[str, Any], permission: Permission) -> bool:
    granted = admin.get("permissions", [])
    return permission.value in granted or Permission.SYSTEM_ADMIN.value in granted


def require_permission(permission: Permission) -> Callable[..., Dict[str, Any]]:
    def checker(admin: Dict[str, Any] = Depends(get_current_admin)) -> Dict[str, Any]:
        if not has_permission(admin, permission):
            raise forbidden("Permisos insuficientes", "INSUFFICIENT_PERMISSIONS")
        return admin

    return checker


def require_system_admin(admin: Dict[str, Any] = Depends(get_current_admin)) -> Dict[str, Any]:
    if Permission.SYSTEM_ADMIN.value not in admin.get("permissions", []):
        raise forbidden("Se requieren permisos de administrador del sistema", "SYSTEM_ADMIN_REQUIRED")
    return admin
