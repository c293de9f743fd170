import pytest

from dyc_api import config
from dyc_api.audit import record_audit
from dyc_api.database.connection import ADMINS, AUDIT_LOGS, POLITICIANS
from dyc_api.models.admin_model import Permission
from dyc_api.models.audit_model import AuditAction, EntityType
from dyc_api.security import verify_password


class TestAdminLogin:
    def test_bootstrap_admin_is_provisioned_on_first_login(self, client, db):
        response = client.post(
            "/api/admin/login", json={"username": config.ADMIN_USER, "password": config.ADMIN_PASS}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token"]
        assert data["admin"]["username"] == config.ADMIN_USER
        assert data["admin"]["permissions"] == ["system_admin"]

        stored = db[ADMINS].find_one({"username": config.ADMIN_USER})
        assert stored["email"] == f"{config.ADMIN_USER}@dyc.com"
        assert stored["hashedPassword"] != config.ADMIN_PASS
        assert verify_password(config.ADMIN_PASS, stored["hashedPassword"])
        assert stored["lastLogin"] is not None
        assert db[AUDIT_LOGS].count_documents({"action": "LOGIN", "entityType": "admin"}) == 1

    def test_existing_admin_login(self, client, make_admin):
        make_admin(username="operador", password="clave-segura")

        response = client.post("/api/admin/login", json={"username": "operador", "password": "clave-segura"})

        assert response.status_code == 200
        assert response.json()["data"]["admin"]["username"] == "operador"

    def test_wrong_password(self, client, db, make_admin):
        make_admin(username="operador", password="clave-segura")

        response = client.post("/api/admin/login", json={"username": "operador", "password": "otra"})

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_CREDENTIALS"

    def test_unknown_user_is_not_provisioned(self, client, db):
        response = client.post("/api/admin/login", json={"username": "intruso", "password": "x"})

        assert response.status_code == 401
        assert db[ADMINS].count_documents({}) == 0

    def test_deactivated_bootstrap_admin_stays_disabled(self, client, db):
        credentials = {"username": config.ADMIN_USER, "password": config.ADMIN_PASS}
        assert client.post("/api/admin/login", json=credentials).status_code == 200
        db[ADMINS].update_one({"username": config.ADMIN_USER}, {"$set": {"isActive": False}})

        response = client.post("/api/admin/login", json=credentials)

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_CREDENTIALS"
        stored = db[ADMINS].find_one({"username": config.ADMIN_USER})
        assert stored["isActive"] is False
        assert db[ADMINS].count_documents({}) == 1

    @pytest.mark.parametrize("body", [{}, {"username": "admin"}, {"password": "admin"}])
    def test_missing_fields(self, client, body):
        response = client.post("/api/admin/login", json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "MISSING_FIELDS"


class TestUpdatePoliticianEmail:
    def test_updates_email_and_audits_old_value(self, client, db, make_admin, admin_headers, make_politician):
        admin = make_admin()
        politician = make_politician(email="viejo@example.com")

        response = client.patch(
            f"/api/admin/politicians/{politician['uuid']}/email",
            json={"email": "Nuevo@Example.com"},
            headers=admin_headers(admin),
        )

        assert response.status_code == 200
        assert response.json()["data"]["email"] == "nuevo@example.com"
        assert db[POLITICIANS].find_one({"uuid": politician["uuid"]})["email"] == "nuevo@example.com"
        audit = db[AUDIT_LOGS].find_one({"entityId": politician["uuid"], "action": "UPDATE"})
        assert audit["details"]["oldValue"] == "viejo@example.com"
        assert audit["details"]["newValue"] == "nuevo@example.com"
        assert audit["userId"] == admin["uuid"]

    def test_validation(self, client, make_admin, admin_headers, make_politician):
        headers = admin_headers(make_admin())
        politician = make_politician()
        url = f"/api/admin/politicians/{politician['uuid']}/email"

        assert client.patch(url, json={}, headers=headers).json()["error"] == "MISSING_EMAIL"
        assert client.patch(url, json={"email": "bad"}, headers=headers).json()["error"] == "INVALID_EMAIL"

        response = client.patch("/api/admin/politicians/nope/email", json={"email": "a@example.com"}, headers=headers)
        assert response.status_code == 404

    def test_soft_deleted_politician_is_not_found(self, client, db, make_admin, admin_headers, make_politician):
        politician = make_politician(email="viejo@example.com", is_active=False)

        response = client.patch(
            f"/api/admin/politicians/{politician['uuid']}/email",
            json={"email": "nuevo@example.com"},
            headers=admin_headers(make_admin()),
        )

        assert response.status_code == 404
        assert response.json()["error"] == "POLITICIAN_NOT_FOUND"
        assert db[POLITICIANS].find_one({"uuid": politician["uuid"]})["email"] == "viejo@example.com"

    def test_email_taken_by_another_politician(self, client, make_admin, admin_headers, make_politician):
        headers = admin_headers(make_admin())
        politician = make_politician()
        other = make_politician()

        response = client.patch(
            f"/api/admin/politicians/{politician['uuid']}/email",
            json={"email": other["email"]},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "EMAIL_ALREADY_EXISTS"

    def test_requires_manage_politicians(self, client, make_admin, admin_headers, make_politician):
        admin = make_admin(permissions=[Permission.VIEW_AUDIT_LOGS])
        politician = make_politician()

        response = client.patch(
            f"/api/admin/politicians/{politician['uuid']}/email",
            json={"email": "a@example.com"},
            headers=admin_headers(admin),
        )

        assert response.status_code == 403
        assert response.json()["error"] == "INSUFFICIENT_PERMISSIONS"

    def test_politician_token_is_not_admin(self, client, make_politician, auth_headers):
        politician = make_politician()

        response = client.patch(
            f"/api/admin/politicians/{politician['uuid']}/email",
            json={"email": "a@example.com"},
            headers=auth_headers(politician),
        )

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_TOKEN"


class TestAuditLogs:
    def test_filters_and_default_limit(self, client, db, make_admin, admin_headers):
        admin = make_admin(permissions=[Permission.VIEW_AUDIT_LOGS])
        for i in range(60):
            record_audit(db, AuditAction.CREATE, EntityType.REFERIDO, f"r-{i}", "p-1")
        record_audit(db, AuditAction.LOGIN, EntityType.POLITICIAN, "p-2", "p-2")
        headers = admin_headers(admin)

        data = client.get("/api/admin/audit-logs", headers=headers).json()["data"]
        assert len(data["logs"]) == 50
        assert data["pagination"]["total"] == 61
        assert data["pagination"]["totalPages"] == 2

        data = client.get("/api/admin/audit-logs?action=LOGIN", headers=headers).json()["data"]
        assert [log["entityId"] for log in data["logs"]] == ["p-2"]

        data = client.get("/api/admin/audit-logs?entityType=referido&userId=p-1&limit=5", headers=headers).json()["data"]
        assert data["pagination"]["total"] == 60
        assert len(data["logs"]) == 5

    def test_requires_permission(self, client, make_admin, admin_headers):
        admin = make_admin(permissions=[Permission.VIEW_STATISTICS])

        response = client.get("/api/admin/audit-logs", headers=admin_headers(admin))

        assert response.status_code == 403


class TestAdminDashboard:
    def test_dashboard(self, client, db, make_admin, admin_headers, make_politician, make_referido):
        admin = make_admin()
        candidate = make_politician()
        make_referido(candidate)
        record_audit(db, AuditAction.LOGIN, EntityType.ADMIN, admin["uuid"], admin["uuid"])

        response = client.get("/api/admin/dashboard", headers=admin_headers(admin))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["statistics"]["totalPoliticians"] == 1
        assert data["statistics"]["totalReferidos"] == 1
        assert data["statistics"]["totalAuditLogs"] == 1
        assert len(data["recentLogs"]) == 1
        assert data["politiciansWithoutEmail"] == 0

    def test_requires_system_admin(self, client, make_admin, admin_headers):
        admin = make_admin(permissions=[Permission.MANAGE_POLITICIANS, Permission.VIEW_AUDIT_LOGS])

        response = client.get("/api/admin/dashboard", headers=admin_headers(admin))

        assert response.status_code == 403
        assert response.json()["error"] == "SYSTEM_ADMIN_REQUIRED"

    def test_inactive_admin_is_rejected(self, client, db, make_admin, admin_headers):
        admin = make_admin()
        db[ADMINS].update_one({"uuid": admin["uuid"]}, {"$set": {"isActive": False}})

        response = client.get("/api/admin/dashboard", headers=admin_headers(admin))

        assert response.status_code == 401
        assert response.json()["error"] == "ADMIN_NOT_FOUND"
