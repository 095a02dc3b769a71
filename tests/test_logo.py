"""
Tests de la carga y compresión del logo.
"""
import json
from io import BytesIO
from unittest.mock import MagicMock, patch

import pytest
import requests
from PIL import Image

from printer_repair.core.exceptions import AssetLoadException
from printer_repair.reports.pdf.logo import compress_image, fetch_asset, load_logo


def _png(size=(1200, 300), mode="RGBA", color=(10, 120, 200, 0)) -> bytes:
    buf = BytesIO()
    Image.new(mode, size, color).save(buf, format="PNG")
    return buf.getvalue()


def _read_logs(log_file):
    return [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]


def test_compress_shrinks_preserving_aspect_ratio():
    data = compress_image(_png(size=(1200, 300)))

    with Image.open(BytesIO(data)) as img:
        assert img.format == "JPEG"
        assert img.size == (400, 100)


def test_compress_never_enlarges():
    data = compress_image(_png(size=(120, 40)))

    with Image.open(BytesIO(data)) as img:
        assert img.size == (120, 40)


def test_transparency_is_flattened_onto_white():
    data = compress_image(_png(size=(50, 50), color=(0, 0, 0, 0)))

    with Image.open(BytesIO(data)) as img:
        assert img.mode == "RGB"
        r, g, b = img.getpixel((25, 25))
        assert min(r, g, b) > 240


def test_compress_rejects_garbage():
    with pytest.raises(AssetLoadException) as exc:
        compress_image(b"no soy una imagen")

    assert exc.value.code == "ASSET_LOAD_FAILED"


def test_fetch_local_file(tmp_path):
    path = tmp_path / "logo.png"
    path.write_bytes(b"contenido")

    assert fetch_asset(str(path)) == b"contenido"


def test_fetch_missing_file(tmp_path):
    with pytest.raises(AssetLoadException):
        fetch_asset(str(tmp_path / "no-existe.png"))


def test_fetch_url_uses_requests_with_timeout():
    response = MagicMock(content=b"png-bytes")
    with patch("printer_repair.reports.pdf.logo.requests.get", return_value=response) as get:
        assert fetch_asset("https://example.com/logo.png", timeout=3) == b"png-bytes"

    get.assert_called_once_with("https://example.com/logo.png", timeout=3)
    response.raise_for_status.assert_called_once()


def test_fetch_url_http_error():
    with patch(
        "printer_repair.reports.pdf.logo.requests.get",
        side_effect=requests.ConnectionError("sin red"),
    ):
        with pytest.raises(AssetLoadException) as exc:
            fetch_asset("http://example.com/logo.png")

    assert "sin red" in exc.value.details["reason"]


def test_load_logo_from_path(tmp_path):
    path = tmp_path / "logo.png"
    path.write_bytes(_png())

    data = load_logo(str(path))

    assert data[:2] == b"\xff\xd8"  # JPEG SOI


def test_load_logo_without_source():
    assert load_logo(None) is None
    assert load_logo("") is None


def test_load_logo_failure_logs_and_returns_none(tmp_path, logger, log_file):
    source = str(tmp_path / "no-existe.png")

    assert load_logo(source, logger=logger) is None

    entry = _read_logs(log_file)[0]
    assert entry["level"] == "WARNING"
    assert entry["action"] == "logo_load_failed"
    assert entry["source"] == source
