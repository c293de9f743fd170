import asyncio
import io

import pytest
from starlette.datastructures import Headers, UploadFile

from dyc_api import config
from dyc_api.errors import APIError
from dyc_api.storage import save_image, unique_filename


def _upload(content: bytes, filename: str, content_type: str) -> UploadFile:
    return UploadFile(file=io.BytesIO(content), filename=filename, headers=Headers({"content-type": content_type}))


def test_unique_filename_keeps_extension():
    first = unique_filename("fotoPerfil", "Foto.JPG")
    second = unique_filename("fotoPerfil", "Foto.JPG")

    assert first.startswith("fotoPerfil-")
    assert first.endswith(".jpg")
    assert first != second


def test_save_image_writes_file(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "UPLOAD_DIR", str(tmp_path))

    url = asyncio.run(save_image("fotoPortada", _upload(b"fake-jpeg", "portada.jpg", "image/jpeg")))

    assert url.startswith("/uploads/fotoPortada-")
    stored = tmp_path / url.rsplit("/", 1)[1]
    assert stored.read_bytes() == b"fake-jpeg"


def test_rejects_non_images(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "UPLOAD_DIR", str(tmp_path))

    with pytest.raises(APIError) as exc_info:
        asyncio.run(save_image("fotoPerfil", _upload(b"%PDF", "cv.pdf", "application/pdf")))

    assert exc_info.value.code == "INVALID_FILE_TYPE"
    assert list(tmp_path.iterdir()) == []


def test_rejects_large_files(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "UPLOAD_DIR", str(tmp_path))
    monkeypatch.setattr(config, "MAX_UPLOAD_BYTES", 8)

    with pytest.raises(APIError) as exc_info:
        asyncio.run(save_image("fotoPerfil", _upload(b"0123456789", "big.png", "image/png")))

    assert exc_info.value.code == "FILE_TOO_LARGE"
    assert exc_info.value.status_code == 400
