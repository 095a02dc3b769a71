"""
Carga del logo para los documentos.

El logo se descarga (ruta local o URL http/https), se reduce a un máximo de
400x200 px conservando la proporción, se aplana la transparencia sobre fondo
blanco y se recodifica como JPEG calidad 80 para que el PDF no crezca.

Cualquier fallo se registra y se devuelve None: el documento se genera sin logo.
"""
from io import BytesIO
from pathlib import Path
from typing import Optional

import requests
from PIL import Image, UnidentifiedImageError

from printer_repair.core.exceptions import AssetLoadException
from printer_repair.core.logger import StructuredLogger, get_logger

LOGO_MAX_SIZE = (400, 200)
LOGO_JPEG_QUALITY = 80


def fetch_asset(source: str, timeout: int = 5) -> bytes:
    """
    Lee los bytes del recurso.

    Raises:
        AssetLoadException
    """
    if source.startswith(("http://", "https://")):
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise AssetLoadException(source, str(e), original_error=e)
        return response.content

    path = Path(source)
    try:
        return path.read_bytes()
    except OSError as e:
        raise AssetLoadException(source, str(e), original_error=e)


def compress_image(
    data: bytes,
    max_size: tuple[int, int] = LOGO_MAX_SIZE,
    quality: int = LOGO_JPEG_QUALITY,
) -> bytes:
    """
    Redimensiona, aplana transparencia y recodifica a JPEG.

    Raises:
        AssetLoadException: si los bytes no son una imagen válida
    """
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            # Solo reduce; una imagen pequeña no se amplía
            img.thumbnail(max_size, Image.Resampling.LANCZOS)

            if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
                rgba = img.convert("RGBA")
                flat = Image.new("RGB", rgba.size, (255, 255, 255))
                flat.paste(rgba, mask=rgba.getchannel("A"))
            else:
                flat = img.convert("RGB")

            out = BytesIO()
            flat.save(out, format="JPEG", quality=quality, optimize=True)
            return out.getvalue()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise AssetLoadException("<bytes>", f"imagen inválida: {e}", original_error=e)


def load_logo(
    source: Optional[str],
    timeout: int = 5,
    logger: Optional[StructuredLogger] = None,
) -> Optional[bytes]:
    """
    Devuelve el logo listo para incrustar, o None si no hay logo o falla.
    """
    if not source:
        return None

    logger = logger or get_logger()
    try:
        return compress_image(fetch_asset(source, timeout=timeout))
    except AssetLoadException as e:
        logger.warning(
            "Logo no disponible, el documento se genera sin logo",
            action="logo_load_failed",
            source=source,
            reason=e.details.get("reason"),
        )
        return None
