import math
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from email_validator import EmailNotValidError, validate_email as _validate_email
from fastapi import Request

from dyc_api import config

PHONE_RE = re.compile(r"^\+?[0-9\s\-()]{7,15}$")
DOCUMENT_RE = re.compile(r"^\d+$")


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    # Naive UTC, matching what pymongo hands back on reads
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def api_response(success: bool, message: str, data: Any = None, error: Optional[str] = None) -> Dict[str, Any]:
    """Standard response envelope shared by every endpoint."""
    body: Dict[str, Any] = {"success": success, "message": message}
    if data is not None:
        body["data"] = data
    if error is not None:
        body["error"] = error
    body["timestamp"] = iso_timestamp()
    return body


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def validate_pagination_params(
    page: Any = None, limit: Any = None, default_limit: int = config.DEFAULT_PAGE_LIMIT
) -> Tuple[int, int]:
    """Normalise raw page/limit query values.

    Unparseable or zero values fall back to the defaults, then ``page`` is
    raised to at least 1 and ``limit`` clamped to ``[1, MAX_PAGE_LIMIT]``.
    """
    page_num = max(1, _to_int(page, 1) or 1)
    limit_num = min(config.MAX_PAGE_LIMIT, max(1, _to_int(limit, default_limit) or default_limit))
    return page_num, limit_num


def paginate(page: int, limit: int, total: int) -> Dict[str, Any]:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


def skip_for(page: int, limit: int) -> int:
    return (page - 1) * limit


def sanitize_text(text: Optional[str]) -> str:
    if not text:
        return ""
    return re.sub(r"[<>]", "", text).strip()


def is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def validate_email(email: Optional[str]) -> bool:
    if not email:
        return False
    try:
        _validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def validate_document_id(document_id: Optional[str]) -> bool:
    return bool(document_id) and DOCUMENT_RE.match(str(document_id)) is not None


def validate_phone_number(phone: Optional[str]) -> bool:
    return bool(phone) and PHONE_RE.match(str(phone)) is not None


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def user_agent(request: Request) -> str:
    return request.headers.get("user-agent", "unknown")
