"""
Counting and grouping queries shared by the dashboards and statistics.

Everything is a plain ``$match``/``$group`` pipeline; ordering of grouped
results and politician names are resolved in Python.
"""

from datetime import timedelta
from typing import Any, Dict, Iterable, List, Optional

from pymongo import DESCENDING
from pymongo.database import Database

from dyc_api.database.connection import AUDIT_LOGS, POLITICIANS, REFERIDOS
from dyc_api.models.audit_model import EntityType
from dyc_api.models.politician_model import full_name
from dyc_api.utils import utcnow

ACTIVE = {"isActive": True}
AGE_BUCKETS = [(25, "18-24"), (35, "25-34"), (45, "35-44"), (55, "45-54"), (65, "55-64")]
WITHOUT_EMAIL = {"$or": [{"email": {"$exists": False}}, {"email": None}, {"email": ""}]}
POLITICAL_ENTITIES = {"$in": [EntityType.POLITICIAN.value, EntityType.REFERIDO.value]}


def politician_totals(db: Database) -> Dict[str, int]:
    politicians = db[POLITICIANS]
    return {
        "totalPoliticians": politicians.count_documents(ACTIVE),
        "totalCandidates": politicians.count_documents({**ACTIVE, "isCandidato": True}),
        "totalRepresentatives": politicians.count_documents({**ACTIVE, "isCandidato": False}),
        "totalReferidos": db[REFERIDOS].count_documents(ACTIVE),
    }


def count_politicians_without_email(db: Database) -> int:
    return db[POLITICIANS].count_documents({**ACTIVE, **WITHOUT_EMAIL})


def group_count(db: Database, collection: str, key: Any, match: Optional[Dict[str, Any]] = None,
                limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """``[{_id, count}]`` sorted by count, highest first."""
    pipeline: List[Dict[str, Any]] = []
    if match:
        pipeline.append({"$match": match})
    pipeline.append({"$group": {"_id": key, "count": {"$sum": 1}}})
    rows = sorted(db[collection].aggregate(pipeline), key=lambda r: r["count"], reverse=True)
    return rows[:limit] if limit else rows


def group_count_by_key(db: Database, collection: str, key: Any,
                       match: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    """Like ``group_count`` but ordered by the group key."""
    rows = group_count(db, collection, key, match)
    return sorted(rows, key=lambda r: (r["_id"] is None, r["_id"]))


def referidos_by_month(db: Database, limit: int, politician_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Most recent ``limit`` months with referidos as ``[{mes: 'YYYY-MM', cantidad}]``."""
    match = dict(ACTIVE)
    if politician_id:
        match["politicianId"] = politician_id
    rows = group_count(db, REFERIDOS, {"year": {"$year": "$createdAt"}, "month": {"$month": "$createdAt"}}, match)
    rows.sort(key=lambda r: (r["_id"]["year"], r["_id"]["month"]), reverse=True)
    return [
        {"mes": f"{r['_id']['year']}-{r['_id']['month']:02d}", "cantidad": r["count"]}
        for r in rows[:limit]
    ]


def politician_names(db: Database, uuids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    uuids = [u for u in uuids if u]
    if not uuids:
        return {}
    cursor = db[POLITICIANS].find(
        {"uuid": {"$in": uuids}}, {"uuid": 1, "nombres": 1, "apellidos": 1, "isCandidato": 1}
    )
    return {doc["uuid"]: doc for doc in cursor}


def with_politician_names(db: Database, rows: List[Dict[str, Any]],
                          include_role: bool = False) -> List[Dict[str, Any]]:
    """Turn ``[{_id: politician uuid, count}]`` into named rows."""
    names = politician_names(db, [r["_id"] for r in rows])
    result = []
    for row in rows:
        politician = names.get(row["_id"])
        item = {
            "politicianId": row["_id"],
            "politicianName": full_name(politician) if politician else None,
            "count": row["count"],
        }
        if include_role:
            item["isCandidato"] = politician.get("isCandidato") if politician else None
        result.append(item)
    return result


def referidos_by_politician(db: Database, limit: int, include_role: bool = False) -> List[Dict[str, Any]]:
    rows = group_count(db, REFERIDOS, "$politicianId", ACTIVE, limit=limit)
    return with_politician_names(db, rows, include_role=include_role)


def age_distribution(db: Database) -> List[Dict[str, Any]]:
    counts: Dict[str, int] = {}
    for row in group_count(db, POLITICIANS, "$edad", {**ACTIVE, "edad": {"$exists": True, "$ne": None}}):
        label = next((name for upper, name in AGE_BUCKETS if row["_id"] < upper), "65+")
        counts[label] = counts.get(label, 0) + row["count"]
    return [{"_id": label, "count": counts[label]} for label in sorted(counts)]


def recent_activity_count(db: Database, hours: int = 24) -> int:
    return db[AUDIT_LOGS].count_documents({"timestamp": {"$gte": utcnow() - timedelta(hours=hours)}})


def recent_audit_logs(db: Database, query: Dict[str, Any], limit: int) -> List[Dict[str, Any]]:
    return list(db[AUDIT_LOGS].find(query).sort("timestamp", DESCENDING).limit(limit))

