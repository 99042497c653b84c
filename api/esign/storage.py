"""MinIO-backed storage for uploaded drafts."""

import io
import logging
from pathlib import PurePath
from uuid import uuid4

from minio import Minio
from minio.deleteobjects import DeleteObject

from .config import MINIO_ACCESS_KEY, MINIO_BUCKET, MINIO_ENDPOINT, MINIO_SECRET_KEY

logger = logging.getLogger(__name__)

_client = Minio(
    MINIO_ENDPOINT,
    access_key=MINIO_ACCESS_KEY,
    secret_key=MINIO_SECRET_KEY,
    secure=False
)

def draft_prefix(session_id: str) -> str:
    return f"drafts/{session_id}/"

def draft_key(session_id: str, filename: str) -> str:
    return f"{draft_prefix(session_id)}{uuid4().hex}-{PurePath(filename).name}"

def ensure_bucket():
    if not _client.bucket_exists(MINIO_BUCKET):
        _client.make_bucket(MINIO_BUCKET)

def put_bytes(key: str, data: bytes, content_type: str = "application/octet-stream"):
    ensure_bucket()
    _client.put_object(MINIO_BUCKET, key, io.BytesIO(data), length=len(data), content_type=content_type)

def get_bytes(key: str) -> bytes:
    resp = _client.get_object(MINIO_BUCKET, key)
    try:
        return resp.read()
    finally:
        resp.close()
        resp.release_conn()

def delete_object(key: str):
    _client.remove_object(MINIO_BUCKET, key)

def delete_drafts(session_id: str) -> int:
    """Remove every draft stored for a wizard session; returns how many were found."""
    keys = [obj.object_name for obj in _client.list_objects(MINIO_BUCKET, prefix=draft_prefix(session_id), recursive=True)]
    if not keys:
        return 0
    errors = list(_client.remove_objects(MINIO_BUCKET, [DeleteObject(k) for k in keys]))
    for err in errors:
        logger.warning("could not delete draft %s: %s", err.name, err.message)
    return len(keys)
