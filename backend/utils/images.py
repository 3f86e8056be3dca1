# utils/images.py
"""Image references for books.

Stored ``Book.image`` values come in three shapes: an external URL, a path
that already carries the ``uploads/`` segment, or a bare filename. Clients
always get an absolute URL built from the current request.
"""
import logging
import shutil
import time
import uuid
from pathlib import Path
from typing import Optional

from fastapi import HTTPException, Request, UploadFile

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
UPLOADS_SEGMENT = "uploads/"


def normalize_image_url(image: Optional[str], scheme: str, host: str) -> Optional[str]:
    if not image:
        return None
    if image.startswith("http"):
        return image
    if UPLOADS_SEGMENT in image:
        return f"{scheme}://{host}/{image}"
    return f"{scheme}://{host}/{UPLOADS_SEGMENT}{image}"


def image_url_for_request(request: Request, image: Optional[str]) -> Optional[str]:
    host = request.headers.get("host") or request.url.netloc
    return normalize_image_url(image, request.url.scheme, host)


def _unique_filename(original: Optional[str]) -> str:
    # millisecond timestamp keeps names sortable, the uuid keeps them unique
    ext = Path(original or "").suffix.lower()
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex}{ext}"


def save_upload(file: UploadFile, upload_dir: str) -> str:
    """Write an uploaded image and return its stored reference ``uploads/<name>``."""
    if file.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="Invalid file type")

    target_dir = Path(upload_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    filename = _unique_filename(file.filename)
    try:
        with open(target_dir / filename, "wb") as buffer:
            shutil.copyfileobj(file.file, buffer)
    except OSError as e:
        logger.exception("Could not store upload %s: %s", file.filename, e)
        raise HTTPException(status_code=500, detail="File save error")
    finally:
        file.file.close()
    return f"{UPLOADS_SEGMENT}{filename}"


def remove_upload(reference: Optional[str], upload_dir: str) -> None:
    """Delete a file previously written by ``save_upload``; missing files are ignored."""
    if not reference or not reference.startswith(UPLOADS_SEGMENT):
        return
    path = Path(upload_dir) / reference[len(UPLOADS_SEGMENT):]
    logger.warning("Removing orphaned upload %s", path)
    path.unlink(missing_ok=True)
