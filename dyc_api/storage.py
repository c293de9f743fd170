# dyc_api/storage.py
import logging
import os
import secrets
import time
from pathlib import Path
from typing import Optional

from starlette.datastructures import UploadFile

from dyc_api import config
from dyc_api.errors import bad_request

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads"


def upload_dir() -> Path:
    path = Path(config.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def unique_filename(fieldname: str, original_name: Optional[str]) -> str:
    """<field>-<epoch ms>-<random><original extension>"""
    ext = os.path.splitext(original_name or "")[1].lower()
    suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
    return f"{fieldname}-{suffix}{ext}"


async def save_image(fieldname: str, upload: UploadFile) -> str:
    """
    Save an uploaded image under UPLOAD_DIR.
    - only ``image/*`` content types are accepted
    - files larger than MAX_UPLOAD_BYTES are rejected
    Returns: the public URL of the stored file (``/uploads/<name>``)
    """
    content_type = upload.content_type or ""
    if not content_type.startswith("image/"):
        raise bad_request("Solo se permiten archivos de imagen", "INVALID_FILE_TYPE")

    data = await upload.read(config.MAX_UPLOAD_BYTES + 1)
    if len(data) > config.MAX_UPLOAD_BYTES:
        raise bad_request("El archivo excede el tamaño máximo permitido", "FILE_TOO_LARGE")

    filename = unique_filename(fieldname, upload.filename)
    filepath = upload_dir() / filename
    with open(filepath, "wb") as f:
        f.write(data)
    logger.info(f"Stored upload {fieldname} as {filepath}")
    return f"{UPLOAD_URL_PREFIX}/{filename}"
