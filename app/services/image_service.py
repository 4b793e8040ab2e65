import base64
import binascii
import io
import re
import struct
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from PIL import Image, UnidentifiedImageError

from app import config
from app.core.errors import DecodeError
from app.utils.log_utils import log_debug
from app.utils.storage import LocalAssetStore

DATA_URI_PATTERN = re.compile(r"^data:image/[\w.+-]+;base64,", re.IGNORECASE)

EXTENSIONS = {
    "JPEG": ".jpg",
    "PNG": ".png",
    "GIF": ".gif",
    "WEBP": ".webp",
    "BMP": ".bmp",
}

def decode_image_payload(payload: str) -> tuple:
    """
    Decode a base64 image, optionally wrapped in a ``data:image/...`` URI.

    Returns ``(image_bytes, extension)``. Raises DecodeError when the payload
    is not base64, does not decode to an image Pillow can identify, or
    declares more pixels than Pillow's decompression-bomb limit.
    """
    if not isinstance(payload, str) or not payload.strip():
        raise DecodeError("Image payload is empty")

    encoded = DATA_URI_PATTERN.sub("", payload.strip(), count=1)
    encoded = "".join(encoded.split())
    try:
        image_bytes = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError("Image payload is not valid base64") from e

    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            image_format = img.format
            img.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError,
            ValueError, struct.error) as e:
        raise DecodeError("Image payload is not a recognised image") from e

    return image_bytes, EXTENSIONS.get(image_format, ".png")

async def materialize_image(payload: str, scope_id: str, asset_store: LocalAssetStore) -> str:
    """Decode an inline image and persist it under a unique, school-scoped ref."""
    image_bytes, extension = decode_image_payload(payload)
    ref = asset_store.new_ref(config.STUDENT_IMAGE_FOLDER, scope_id, extension)
    await run_in_threadpool(asset_store.write, ref, image_bytes)
    log_debug(f"Materialized image {ref} ({len(image_bytes)} bytes)", service="images")
    return ref

async def store_uploaded_image(upload, folder: str, scope_id: Optional[str], asset_store: LocalAssetStore) -> str:
    """Persist a multipart image upload as-is and return its ref."""
    content = await upload.read()
    extension = ""
    if upload.filename and "." in upload.filename:
        extension = "." + upload.filename.rsplit(".", 1)[1].lower()
    ref = asset_store.new_ref(folder, scope_id, extension or ".png")
    await run_in_threadpool(asset_store.write, ref, content)
    log_debug(f"Stored uploaded image {ref}", service="images")
    return ref

async def release_asset(ref: Optional[str], asset_store: LocalAssetStore) -> bool:
    """Delete an asset unless it is the shared default image."""
    if not ref or ref == config.DEFAULT_STUDENT_IMAGE:
        return False
    removed = await run_in_threadpool(asset_store.delete, ref)
    if removed:
        log_debug(f"Released asset {ref}", service="images")
    return removed
