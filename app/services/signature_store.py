"""
Signature image storage and retrieval.

A user's signature reference is either an absolute URL (fetched over HTTP
with a bounded timeout) or a path inside ``SIGNATURE_STORAGE_DIR``.
Every failure to produce bytes is reported as ``UpstreamFailure`` so the
PDF renderer can log it and carry on.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

import requests
from sqlalchemy.orm import Session

from app import crud
from app.core.config import settings
from app.core.exceptions import InvalidInput, NotFound, UpstreamFailure
from app.models.user import User

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/svg+xml": "svg",
}


def is_remote_reference(reference: str) -> bool:
    return reference.lower().startswith(("http://", "https://"))


def resolve_local_path(reference: str, storage_dir: Optional[str] = None) -> Path:
    """Map a stored reference onto the storage root; a leading slash is relative to that root."""
    root = Path(storage_dir or settings.SIGNATURE_STORAGE_DIR).resolve()
    candidate = (root / reference.lstrip("/\\")).resolve()
    if root != candidate and root not in candidate.parents:
        raise UpstreamFailure(f"Signature reference escapes storage root: {reference}")
    return candidate


def fetch_signature(reference: str, timeout: Optional[float] = None) -> bytes:
    if not reference:
        raise UpstreamFailure("Empty signature reference")

    if is_remote_reference(reference):
        try:
            response = requests.get(reference, timeout=timeout or settings.SIGNATURE_FETCH_TIMEOUT)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise UpstreamFailure(f"Failed to fetch signature from {reference}: {e}") from e
        if not response.content:
            raise UpstreamFailure(f"Signature at {reference} is empty")
        return response.content

    path = resolve_local_path(reference)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise UpstreamFailure(f"Failed to read signature file {path}: {e}") from e
    if not data:
        raise UpstreamFailure(f"Signature file {path} is empty")
    return data


def _get_user(db: Session, user_id: int) -> User:
    user = crud.user.get(db, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def save_signature(
    db: Session,
    user_id: int,
    filename: Optional[str],
    content_type: Optional[str],
    data: bytes,
) -> User:
    """Store an uploaded signature and point the user at it, replacing any previous one."""
    user = _get_user(db, user_id)

    if content_type not in ALLOWED_CONTENT_TYPES:
        raise InvalidInput("Invalid file type. Only PNG, JPG, JPEG, and SVG are allowed")
    if not data:
        raise InvalidInput("Signature file is empty")
    if len(data) > settings.SIGNATURE_MAX_BYTES:
        raise InvalidInput(f"Signature file must be smaller than {settings.SIGNATURE_MAX_BYTES} bytes")

    extension = ALLOWED_CONTENT_TYPES[content_type]
    if filename and "." in filename:
        extension = filename.rsplit(".", 1)[-1].lower() or extension
        if extension not in ("png", "jpg", "jpeg", "svg"):
            extension = ALLOWED_CONTENT_TYPES[content_type]

    timestamp = int(datetime.utcnow().timestamp() * 1000)
    relative = f"signatures/signature_{user.id}_{timestamp}.{extension}"
    target = resolve_local_path(relative)
    try:
        os.makedirs(target.parent, exist_ok=True)
        target.write_bytes(data)
    except OSError as e:
        logger.error(f"Error storing signature for user {user.id}: {e}")
        raise UpstreamFailure(f"Failed to store signature: {e}") from e

    user.signature_path = relative
    db.commit()
    db.refresh(user)
    logger.info(f"Signature stored for user {user.id} at {relative}")
    return user


def remove_signature(db: Session, user_id: int) -> User:
    """Clear the user's signature reference; the stored file is left in place."""
    user = _get_user(db, user_id)
    user.signature_path = None
    db.commit()
    db.refresh(user)
    logger.info(f"Signature removed for user {user.id}")
    return user
