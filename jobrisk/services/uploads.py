# jobrisk/services/uploads.py
from __future__ import annotations

import base64, binascii, mimetypes
from typing import Optional

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from .models import ImageUpload
from .validation import ValidationError

DEFAULT_MAX_IMAGE_BYTES = 8 * 1024 * 1024


def _check(data: bytes, mime: str, max_bytes: int) -> None:
    if not mime.startswith("image/"):
        raise ValidationError("The screenshot must be an image file.")
    if len(data) > max_bytes:
        raise ValidationError(f"The screenshot is too large (limit {max_bytes // (1024 * 1024)} MB).")


def read_upload(file: Optional[FileStorage], max_bytes: int = DEFAULT_MAX_IMAGE_BYTES) -> Optional[ImageUpload]:
    """Read an uploaded screenshot to completion. Returns None when no file was picked."""
    if file is None or not file.filename:
        return None
    data = file.read()
    if not data:
        return None
    filename = secure_filename(file.filename) or None
    mime = (file.mimetype or "").lower() or (mimetypes.guess_type(file.filename)[0] or "")
    _check(data, mime, max_bytes)
    return ImageUpload(data=data, mime_type=mime, filename=filename)


def decode_image(b64: Optional[str], mime: Optional[str] = None,
                 max_bytes: int = DEFAULT_MAX_IMAGE_BYTES) -> Optional[ImageUpload]:
    """Decode a base64 image (bare or as a data: URL) sent through the JSON API."""
    if not isinstance(b64 or "", str) or not isinstance(mime or "", str):
        raise ValidationError("The screenshot could not be decoded.")
    raw = (b64 or "").strip()
    if not raw:
        return None
    if raw.startswith("data:") and "," in raw:
        header, raw = raw.split(",", 1)
        mime = mime or header[5:].split(";", 1)[0]
    try:
        data = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("The screenshot could not be decoded.")
    if not data:
        return None
    mime = (mime or "image/png").lower()
    _check(data, mime, max_bytes)
    return ImageUpload(data=data, mime_type=mime)
