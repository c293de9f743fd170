from dyc_api.audit import record_audit
from dyc_api.database.connection import POLITICIANS
from dyc_api.models.audit_model import AuditAction, EntityType


def test_general_statistics_are_public(client, db, make_politician, make_referido):
    candidate = make_politician()
    representative = make_politician(is_candidato=False)
    make_referido(candidate)
    make_referido(candidate)
    make_referido(representative)
    db[POLITICIANS].insert_one({"uuid": "sin-email", "nombres": "X", "apellidos": "Y", "isActive": True,
                                "isCandidato": True, "documentoIdentidad": "999"})
    record_audit(db, AuditAction.CREATE, EntityType.REFERIDO, "r-1", candidate["uuid"])
    record_audit(db, AuditAction.UPDATE, EntityType.POLITICIAN, candidate["uuid"], candidate["uuid"])
    record_audit(db, AuditAction.UPDATE, EntityType.REFERIDO, "r-1", candidate["uuid"])

    response = client.get("/api/statistics")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["resumen"] == {
        "totalPoliticians": 3,
        "totalCandidates": 2,
        "totalRepresentatives": 1,
        "totalReferidos": 3,
        "politicosSinEmail": 1,
    }
    assert data["referidosPorPolitico"][0] == {
        "politicianId": candidate["uuid"],
        "politicianName": f"{candidate['nombres']} {candidate['apellidos']}",
        "count": 2,
    }
    assert data["actividad"]["porTipo"][0] == {"_id": "referido", "count": 2}
    assert data["actividad"]["porAccion"][0] == {"_id": "UPDATE", "count": 2}
    assert data["actividad"]["reciente24h"] == 3


def test_politician_statistics(client, db, make_politician):
    first = make_politician(edad=22, sexo="femenino")
    make_politician(edad=40, sexo="femenino")
    make_politician(edad=70, sexo="masculino")
    record_audit(db, AuditAction.UPDATE, EntityType.POLITICIAN, first["uuid"], first["uuid"])
    record_audit(db, AuditAction.UPDATE, EntityType.POLITICIAN, first["uuid"], first["uuid"])

    data = client.get("/api/statistics/politicians").json()["data"]

    assert data["distribucionPorSexo"][0] == {"_id": "femenino", "count": 2}
    assert data["distribucionPorEdad"] == [
        {"_id": "18-24", "count": 1},
        {"_id": "35-44", "count": 1},
        {"_id": "65+", "count": 1},
    ]
    assert data["politicosMasActivos"][0]["politicianId"] == first["uuid"]
    assert data["politicosMasActivos"][0]["count"] == 2


def test_referido_statistics(client, make_politician, make_referido):
    candidate = make_politician()
    for _ in range(3):
        make_referido(candidate)

    data = client.get("/api/statistics/referidos").json()["data"]

    assert sum(row["cantidad"] for row in data["referidosPorMes"]) == 3
    assert sum(row["count"] for row in data["referidosPorDiaSemana"]) == 3
    assert sum(row["count"] for row in data["referidosPorHora"]) == 3
    assert data["topPoliticosPorReferidos"][0]["isCandidato"] is True
