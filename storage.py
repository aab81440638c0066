"""
Photo storage on the local upload directory.

Files are checked (type, size, count) before anything is written, stored as
"<epoch ms>-<original name>" and referenced from listings by their public
path ("/uploads/<name>").
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from fastapi import UploadFile

import config
from errors import PhotoUploadError

logger = logging.getLogger(__name__)


@dataclass
class PendingPhoto:
    original_name: str
    content_type: str
    data: bytes


def upload_root() -> Path:
    root = Path(config.UPLOAD_DIR)
    root.mkdir(parents=True, exist_ok=True)
    return root


async def read_photos(files: List[UploadFile]) -> List[PendingPhoto]:
    """Read and check uploaded files; nothing is written to disk here."""
    if len(files) > config.MAX_PHOTOS_PER_REQUEST:
        raise PhotoUploadError(f"Too many files (max {config.MAX_PHOTOS_PER_REQUEST})")

    pending: List[PendingPhoto] = []
    for upload in files:
        name = upload.filename or "photo"
        content_type = upload.content_type or ""
        if not content_type.startswith("image/"):
            raise PhotoUploadError(f"{name}: only image files are allowed")
        data = await upload.read()
        if len(data) > config.MAX_PHOTO_BYTES:
            raise PhotoUploadError(f"{name}: file too large (max {config.MAX_PHOTO_BYTES // (1024 * 1024)}MB)")
        pending.append(PendingPhoto(original_name=name, content_type=content_type, data=data))
    return pending


def stored_name(original_name: str, stamp_ms: Optional[int] = None) -> str:
    if stamp_ms is None:
        stamp_ms = int(time.time() * 1000)
    base = Path(original_name).name or "photo"
    return f"{stamp_ms}-{base}"


def public_path(name: str) -> str:
    return f"{config.UPLOAD_URL_PREFIX}/{name}"


def save_photos(photos: List[PendingPhoto]) -> List[str]:
    """Write photos and return their public paths in upload order."""
    root = upload_root()
    paths: List[str] = []
    try:
        for photo in photos:
            name = stored_name(photo.original_name)
            target = root / name
            counter = 1
            while target.exists():
                name = stored_name(f"{counter}-{Path(photo.original_name).name}")
                target = root / name
                counter += 1
            target.write_bytes(photo.data)
            paths.append(public_path(name))
            logger.info("Photo stored", extra={"photo_path": public_path(name), "bytes": len(photo.data)})
    except OSError:
        # a partial batch is never left behind
        remove_photos(paths)
        raise
    return paths


def local_path(photo_path: str) -> Path:
    # Only the file name is trusted; the directory always comes from config.
    return Path(config.UPLOAD_DIR) / Path(photo_path).name


def remove_photos(photo_paths: List[str]) -> int:
    """Delete stored files; paths whose file is already gone are skipped."""
    removed = 0
    for photo_path in photo_paths or []:
        target = local_path(photo_path)
        try:
            target.unlink()
            removed += 1
        except FileNotFoundError:
            logger.info("Photo already absent", extra={"photo_path": photo_path})
    return removed
