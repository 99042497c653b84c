"""Upload collaborator: turns raw bytes into an ``UploadedFile`` for the wizard."""

import io
from pathlib import PurePath

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from .config import MAX_UPLOAD_BYTES
from .engine.constants import ALLOWED_CONTENT_TYPES
from .engine.errors import UploadRejected
from .engine.state import UploadedFile
from .engine.views import validate_upload
from .storage import draft_key, put_bytes
from .utils import make_token, try_read_token

PREVIEW_SALT = "preview"

_TYPES_BY_SUFFIX = {suffix: content_type for content_type, suffix in ALLOWED_CONTENT_TYPES.items()}


def resolve_content_type(filename: str, content_type: str | None) -> str:
    if content_type in ALLOWED_CONTENT_TYPES:
        return content_type
    return _TYPES_BY_SUFFIX.get(PurePath(filename).suffix.lower(), content_type or "application/octet-stream")


def count_pages(data: bytes, content_type: str) -> int:
    # only PDFs are paginated here; word documents count as a single page until converted
    if content_type != "application/pdf":
        return 1
    try:
        pages = len(PdfReader(io.BytesIO(data)).pages)
    except (PyPdfError, ValueError) as exc:
        raise UploadRejected("document could not be read as a PDF") from exc
    if pages < 1:
        raise UploadRejected("document has no pages")
    return pages


def store_upload(session_id: str, filename: str, content_type: str | None, data: bytes):
    content_type = resolve_content_type(filename, content_type)
    validate_upload(filename, content_type, len(data), MAX_UPLOAD_BYTES)
    pages = count_pages(data, content_type)
    key = draft_key(session_id, filename)
    put_bytes(key, data, content_type=content_type)
    preview = make_token({"key": key, "content_type": content_type}, salt=PREVIEW_SALT)
    upload = UploadedFile(
        filename=filename,
        content_type=content_type,
        size=len(data),
        ref=key,
        page_count=pages,
    )
    return upload, preview


def read_preview(token: str):
    """Return ``(storage_key, content_type)`` for a preview handle, or ``None``."""
    data = try_read_token(token, salt=PREVIEW_SALT)
    if not data or "key" not in data:
        return None
    return data["key"], data.get("content_type") or "application/octet-stream"
