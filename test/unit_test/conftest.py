from typing import Any, Callable, Dict

import httpx
import mongomock
import pytest
from fastapi.testclient import TestClient

from dyc_api.database.connection import ADMINS, POLITICIANS, REFERIDOS, ensure_indexes, get_db
from dyc_api.main import app
from dyc_api.models.admin_model import Admin, Permission
from dyc_api.models.politician_model import Politician
from dyc_api.models.referido_model import Referido
from dyc_api.oauth import GOOGLE_TOKEN_URL, GOOGLE_USERINFO_URL, GoogleOAuthClient, get_oauth_client
from dyc_api.security import create_admin_token, create_politician_token, hash_password


@pytest.fixture
def db():
    """A fresh in-memory MongoDB database with the production indexes."""
    database = mongomock.MongoClient()["dyc-test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def google_userinfo() -> Dict[str, Any]:
    """Profile returned by the fake Google userinfo endpoint; tests may edit it."""
    return {"sub": "google-123", "email": "Ana.Perez@Example.com", "email_verified": True, "name": "Ana Pérez"}


@pytest.fixture
def google_transport(google_userinfo):
    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url.startswith(GOOGLE_TOKEN_URL):
            if b"code=bad-code" in request.content:
                return httpx.Response(400, json={"error": "invalid_grant"})
            return httpx.Response(200, json={"access_token": "google-access-token", "token_type": "Bearer"})
        if url.startswith(GOOGLE_USERINFO_URL):
            return httpx.Response(200, json=google_userinfo)
        return httpx.Response(404)

    return httpx.MockTransport(handler)


@pytest.fixture
def oauth_client(google_transport) -> GoogleOAuthClient:
    return GoogleOAuthClient(
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_uri="http://testserver/api/auth/oauth/google/callback",
        transport=google_transport,
    )


@pytest.fixture
def client(db, oauth_client):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_oauth_client] = lambda: oauth_client
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_politician(db) -> Callable[..., Dict[str, Any]]:
    counter = {"n": 0}

    def factory(**overrides) -> Dict[str, Any]:
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "nombres": f"Nombre{n}",
            "apellidos": f"Apellido{n}",
            "email": f"politico{n}@example.com",
            "documento_identidad": f"1000{n}",
            "is_candidato": True,
        }
        fields.update(overrides)
        doc = Politician(**fields).to_document()
        db[POLITICIANS].insert_one(doc)
        return doc

    return factory


@pytest.fixture
def make_referido(db) -> Callable[..., Dict[str, Any]]:
    counter = {"n": 0}

    def factory(politician: Dict[str, Any], **overrides) -> Dict[str, Any]:
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "nombres": f"Referido{n}",
            "apellidos": f"Apellido{n}",
            "email": f"referido{n}@example.com",
            "documento_identidad": f"2000{n}",
            "politician_id": politician["uuid"],
            "created_by": "public_form",
        }
        fields.update(overrides)
        doc = Referido(**fields).to_document()
        db[REFERIDOS].insert_one(doc)
        return doc

    return factory


@pytest.fixture
def auth_headers() -> Callable[[Dict[str, Any]], Dict[str, str]]:
    def build(politician: Dict[str, Any]) -> Dict[str, str]:
        token, _ = create_politician_token(politician)
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture
def make_admin(db) -> Callable[..., Dict[str, Any]]:
    def factory(username: str = "operador", password: str = "clave-segura", permissions=None) -> Dict[str, Any]:
        doc = Admin(
            username=username,
            email=f"{username}@dyc.com",
            hashed_password=hash_password(password),
            permissions=permissions or [Permission.SYSTEM_ADMIN],
        ).to_document()
        db[ADMINS].insert_one(doc)
        return doc

    return factory


@pytest.fixture
def admin_headers() -> Callable[[Dict[str, Any]], Dict[str, str]]:
    def build(admin: Dict[str, Any]) -> Dict[str, str]:
        token, _ = create_admin_token(admin)
        return {"Authorization": f"Bearer {token}"}

    return build
