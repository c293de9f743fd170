import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from pymongo.database import Database

from dyc_api import config
from dyc_api.audit import record_audit
from dyc_api.auth import get_current_politician
from dyc_api.crud import create_session, deactivate_sessions
from dyc_api.database.connection import POLITICIANS, get_db
from dyc_api.errors import APIError
from dyc_api.models.audit_model import AuditAction, EntityType
from dyc_api.models.politician_model import serialize_summary
from dyc_api.oauth import GoogleOAuthClient, OAuthError, get_oauth_client
from dyc_api.security import create_oauth_state, create_politician_token, verify_oauth_state
from dyc_api.utils import api_response, client_ip, generate_uuid, user_agent, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth/oauth", tags=["OAuth"])


def _login_redirect(error: str) -> RedirectResponse:
    return RedirectResponse(f"{config.FRONTEND_URL}/login?{urlencode({'error': error})}", status_code=302)


@router.get("/google")
def google_login(client: GoogleOAuthClient = Depends(get_oauth_client)):
    if not client.configured:
        raise APIError(500, "OAuth de Google no está configurado", "OAUTH_NOT_CONFIGURED")
    state = create_oauth_state(generate_uuid())
    return RedirectResponse(client.authorization_url(state), status_code=302)


@router.get("/google/callback")
def google_callback(
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    client: GoogleOAuthClient = Depends(get_oauth_client),
    db: Database = Depends(get_db),
):
    """Finish the Google sign-in and hand the JWT to the frontend.

    Only politicians an admin already registered with this email may sign
    in; no account is created here.
    """
    if error or not code:
        logger.warning(f"OAuth callback without code (error={error})")
        return _login_redirect("oauth_error")
    if not verify_oauth_state(state):
        logger.warning("OAuth callback with invalid state")
        return _login_redirect("oauth_error")

    try:
        profile = client.fetch_profile(code)
    except OAuthError as e:
        logger.error(f"Google OAuth failed: {e}")
        return _login_redirect("oauth_error")

    politician = db[POLITICIANS].find_one({"email": profile.email, "isActive": True})
    if not politician:
        logger.info(f"OAuth login rejected, no active politician for {profile.email}")
        return _login_redirect("no_politician")

    changes = {
        "oauthProvider": profile.provider,
        "oauthId": profile.provider_id,
        "updatedBy": "google_oauth",
        "updatedAt": utcnow(),
    }
    db[POLITICIANS].update_one({"_id": politician["_id"]}, {"$set": changes})
    politician.update(changes)

    token, expires_at = create_politician_token(politician)
    create_session(db, politician["uuid"], token, expires_at, client_ip(request), user_agent(request))
    record_audit(
        db, AuditAction.LOGIN, EntityType.POLITICIAN, politician["uuid"], politician["uuid"],
        details={"method": "google_oauth", "email": profile.email},
        request=request,
    )
    logger.info(f"Politician {politician['uuid']} signed in with Google")

    params = urlencode({
        "token": token,
        "politician": json.dumps(serialize_summary(politician), ensure_ascii=False),
    })
    return RedirectResponse(f"{config.FRONTEND_URL}/oauth-success?{params}", status_code=302)


@router.get("/status")
def oauth_status(politician: Dict[str, Any] = Depends(get_current_politician)):
    data = serialize_summary(politician)
    data["oauthProvider"] = politician.get("oauthProvider")
    return api_response(True, "Usuario autenticado", data)


@router.post("/logout")
def logout(
    request: Request,
    politician: Dict[str, Any] = Depends(get_current_politician),
    db: Database = Depends(get_db),
):
    closed = deactivate_sessions(db, politician["uuid"])
    record_audit(
        db, AuditAction.LOGOUT, EntityType.POLITICIAN, politician["uuid"], politician["uuid"],
        details={"method": "oauth_logout", "sessionsClosed": closed},
        request=request,
    )
    return api_response(True, "Sesión cerrada exitosamente")
