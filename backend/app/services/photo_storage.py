import logging
import re
import threading
import time
from pathlib import Path
from typing import Iterable, Optional

from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.core import config
from app.models.pickup import Pickup, PickupPhoto

logger = logging.getLogger("uvicorn.error")

UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")

_clock_lock = threading.Lock()
_last_stamp_ms = 0


def get_uploads_dir() -> Path:
    uploads_dir = Path(config.UPLOADS_DIR)
    uploads_dir.mkdir(parents=True, exist_ok=True)
    return uploads_dir


def next_timestamp_ms() -> int:
    """Wall-clock milliseconds, bumped so that no two calls in this process repeat."""
    global _last_stamp_ms
    with _clock_lock:
        stamp = max(int(time.time() * 1000), _last_stamp_ms + 1)
        _last_stamp_ms = stamp
        return stamp


def sanitize_filename(value: Optional[str]) -> str:
    return UNSAFE_FILENAME_CHARS.sub("_", value or "") or "photo"


def build_photo_file_name(original_name: Optional[str], stamp_ms: Optional[int] = None) -> str:
    stamp = stamp_ms if stamp_ms is not None else next_timestamp_ms()
    return f"{stamp}-{sanitize_filename(original_name)}"


def build_upload_url(file_name: Optional[str]) -> Optional[str]:
    if not file_name:
        return None
    return f"/uploads/{file_name}"


def resolve_upload_path(file_name: str) -> Optional[Path]:
    uploads_dir = get_uploads_dir().resolve()
    target_path = (uploads_dir / file_name).resolve()
    try:
        target_path.relative_to(uploads_dir)
    except ValueError:
        return None
    return target_path


def save_pickup_photos(db: Session, pickup: Pickup, uploads: Optional[Iterable[UploadFile]]) -> list[PickupPhoto]:
    """Store each upload on disk and link it to ``pickup``.

    Every file is handled on its own: a failed write or insert is logged,
    rolled back for that file only, and the remaining files are still saved.
    Empty parts (an untouched file input) are skipped.
    """
    saved: list[PickupPhoto] = []
    files = [upload for upload in (uploads or []) if upload is not None and getattr(upload, "filename", None) is not None]
    if not files:
        return saved

    uploads_dir = get_uploads_dir()
    for upload in files:
        target_path = None
        try:
            content = upload.file.read()
            if not content:
                continue
            file_name = build_photo_file_name(upload.filename)
            target_path = uploads_dir / file_name
            with target_path.open("wb") as buffer:
                buffer.write(content)

            photo = PickupPhoto(
                pickup_id=pickup.id,
                file_name=file_name,
                mime_type=upload.content_type or "application/octet-stream",
                file_size=len(content),
            )
            db.add(photo)
            db.commit()
            # The row is committed; from here on the file belongs to it.
            target_path = None
            saved.append(photo)
            db.refresh(photo)
        except Exception:
            logger.exception("Photo upload failed for pickup %s (file %s)", pickup.id, upload.filename)
            db.rollback()
            if target_path is not None:
                remove_photo_file(target_path.name)
    return saved


def remove_photo_file(file_name: Optional[str]) -> bool:
    """Best-effort unlink; failures are logged and reported as ``False``."""
    if not file_name:
        return False
    target_path = resolve_upload_path(file_name)
    if target_path is None:
        logger.warning("Refusing to delete photo outside the uploads directory: %s", file_name)
        return False
    try:
        target_path.unlink()
    except OSError:
        logger.exception("Could not delete photo file %s", target_path)
        return False
    return True


def delete_photo(db: Session, photo: PickupPhoto) -> None:
    remove_photo_file(photo.file_name)
    db.delete(photo)
    db.commit()


def delete_pickup_with_photos(db: Session, pickup: Pickup) -> None:
    for photo in list(pickup.photos):
        remove_photo_file(photo.file_name)
    db.delete(pickup)
    db.commit()
