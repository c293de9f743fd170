from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from pymongo import DESCENDING
from pymongo.database import Database

from dyc_api.aggregations import (
    POLITICAL_ENTITIES,
    politician_names,
    politician_totals,
    recent_audit_logs,
    referidos_by_month,
    referidos_by_politician,
)
from dyc_api.auth import get_current_politician, require_representative
from dyc_api.database.connection import REFERIDOS, get_db
from dyc_api.models.audit_model import serialize_audit_log
from dyc_api.models.base import object_id
from dyc_api.models.politician_model import full_name
from dyc_api.utils import api_response, paginate, skip_for, validate_pagination_params

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


def _activity(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": object_id(doc),
        "action": doc.get("action"),
        "entityType": doc.get("entityType"),
        "entityId": doc.get("entityId"),
        "timestamp": doc.get("timestamp"),
        "details": doc.get("details"),
    }


@router.get("")
def get_dashboard(
    politician: Dict[str, Any] = Depends(get_current_politician),
    db: Database = Depends(get_db),
):
    politician_id = politician["uuid"]
    query = {"politicianId": politician_id, "isActive": True}

    total = db[REFERIDOS].count_documents(query)
    recent = list(db[REFERIDOS].find(query).sort("createdAt", DESCENDING).limit(5))
    activity = recent_audit_logs(db, {"userId": politician_id, "entityType": POLITICAL_ENTITIES}, 10)

    return api_response(True, "Dashboard obtenido exitosamente", {
        "politician": {
            "id": object_id(politician),
            "uuid": politician_id,
            "nombres": politician.get("nombres"),
            "apellidos": politician.get("apellidos"),
            "isCandidato": politician.get("isCandidato"),
            "fotoPerfil": politician.get("fotoPerfil"),
        },
        "estadisticas": {
            "totalReferidos": total,
            "referidosRecientes": len(recent),
            "referidosPorMes": referidos_by_month(db, 6, politician_id=politician_id),
        },
        "referidosRecientes": [
            {
                "id": object_id(doc),
                "uuid": doc.get("uuid"),
                "nombres": doc.get("nombres"),
                "apellidos": doc.get("apellidos"),
                "numeroTelefono": doc.get("numeroTelefono"),
                "documentoIdentidad": doc.get("documentoIdentidad"),
                "createdAt": doc.get("createdAt"),
            }
            for doc in recent
        ],
        "actividadReciente": [_activity(doc) for doc in activity],
    })


@router.get("/referidos")
def get_dashboard_referidos(
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
    referidos = [
        {
            "id": object_id(doc),
            "uuid": doc.get("uuid"),
            "nombres": doc.get("nombres"),
            "apellidos": doc.get("apellidos"),
            "email": doc.get("email"),
            "numeroTelefono": doc.get("numeroTelefono"),
            "documentoIdentidad": doc.get("documentoIdentidad"),
            "createdAt": doc.get("createdAt"),
        }
        for doc in cursor
    ]
    return api_response(True, "Referidos obtenidos exitosamente", {
        "referidos": referidos,
        "pagination": paginate(page_num, limit_num, total),
    })


@router.get("/representative")
def get_representative_dashboard(
    representative: Dict[str, Any] = Depends(require_representative),
    db: Database = Depends(get_db),
):
    """System-wide view for representatives."""
    activity = recent_audit_logs(db, {"entityType": POLITICAL_ENTITIES}, 20)
    actors = politician_names(db, {doc.get("userId") for doc in activity})

    actividad = []
    for doc in activity:
        item = serialize_audit_log(doc)
        actor = actors.get(doc.get("userId"))
        if actor:
            item["user"] = {
                "uuid": actor["uuid"],
                "nombres": actor.get("nombres"),
                "apellidos": actor.get("apellidos"),
                "nombreCompleto": full_name(actor),
            }
        actividad.append(item)

    return api_response(True, "Dashboard de representante obtenido exitosamente", {
        "estadisticasGenerales": politician_totals(db),
        "referidosPorPolitico": referidos_by_politician(db, 10),
        "actividadSistema": actividad,
    })
