from fastapi import APIRouter, Depends
from pymongo.database import Database

from dyc_api.aggregations import (
    ACTIVE,
    age_distribution,
    count_politicians_without_email,
    group_count,
    group_count_by_key,
    politician_totals,
    recent_activity_count,
    referidos_by_month,
    referidos_by_politician,
    with_politician_names,
)
from dyc_api.database.connection import AUDIT_LOGS, POLITICIANS, REFERIDOS, get_db
from dyc_api.models.audit_model import EntityType
from dyc_api.utils import api_response, iso_timestamp

router = APIRouter(prefix="/statistics", tags=["Statistics"])


@router.get("")
def get_statistics(db: Database = Depends(get_db)):
    resumen = politician_totals(db)
    resumen["politicosSinEmail"] = count_politicians_without_email(db)
    return api_response(True, "Estadísticas obtenidas exitosamente", {
        "resumen": resumen,
        "referidosPorPolitico": referidos_by_politician(db, 10),
        "referidosPorMes": referidos_by_month(db, 12),
        "actividad": {
            "porTipo": group_count(db, AUDIT_LOGS, "$entityType"),
            "porAccion": group_count(db, AUDIT_LOGS, "$action"),
            "reciente24h": recent_activity_count(db, hours=24),
        },
        "timestamp": iso_timestamp(),
    })


@router.get("/politicians")
def get_politicians_statistics(db: Database = Depends(get_db)):
    most_active = group_count(db, AUDIT_LOGS, "$userId", {"entityType": EntityType.POLITICIAN.value}, limit=10)
    return api_response(True, "Estadísticas de políticos obtenidas exitosamente", {
        "distribucionPorSexo": group_count(db, POLITICIANS, "$sexo", ACTIVE),
        "distribucionPorEdad": age_distribution(db),
        "politicosConOAuth": group_count(db, POLITICIANS, "$oauthProvider", ACTIVE),
        "politicosMasActivos": with_politician_names(db, most_active),
        "timestamp": iso_timestamp(),
    })


@router.get("/referidos")
def get_referidos_statistics(db: Database = Depends(get_db)):
    return api_response(True, "Estadísticas de referidos obtenidas exitosamente", {
        "referidosPorMes": referidos_by_month(db, 24),
        "referidosPorDiaSemana": group_count_by_key(db, REFERIDOS, {"$dayOfWeek": "$createdAt"}, ACTIVE),
        "referidosPorHora": group_count_by_key(db, REFERIDOS, {"$hour": "$createdAt"}, ACTIVE),
        "topPoliticosPorReferidos": referidos_by_politician(db, 20, include_role=True),
        "timestamp": iso_timestamp(),
    })
