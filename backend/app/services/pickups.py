import math
from datetime import datetime
from typing import Optional

from app.core.errors import BadRequest
from app.core.timeutils import ensure_utc, parse_instant
from app.models.pickup import STATUS_ALIASES, Pickup, PickupPhoto, PickupStatus
from app.schemas.pickup import DriverRef, HospitalRef, PhotoOut, PickupOut
from app.services.photo_storage import build_upload_url

VALID_STATUSES = {item.value for item in PickupStatus}


def parse_weight(value) -> float:
    try:
        parsed = float(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise BadRequest("น้ำหนักไม่ถูกต้อง") from exc
    if not math.isfinite(parsed) or parsed <= 0:
        raise BadRequest("น้ำหนักไม่ถูกต้อง")
    return parsed


def parse_collected_at(value: str) -> datetime:
    try:
        return parse_instant(value)
    except ValueError as exc:
        raise BadRequest("วันเวลาที่เก็บไม่ถูกต้อง") from exc


def parse_status(value: str) -> str:
    raw = str(value or "").strip().upper()
    alias = STATUS_ALIASES.get(raw)
    if alias is not None:
        return alias.value
    if raw not in VALID_STATUSES:
        raise BadRequest("Invalid status")
    return raw


def clean_note(value: Optional[str]) -> Optional[str]:
    note = str(value or "").strip()
    return note or None


def build_photo_out(photo: PickupPhoto) -> PhotoOut:
    return PhotoOut(
        id=photo.id,
        file_name=photo.file_name,
        mime_type=photo.mime_type,
        file_size=photo.file_size,
        url=build_upload_url(photo.file_name),
    )


def build_pickup_out(pickup: Pickup) -> PickupOut:
    hospital = pickup.hospital
    driver = pickup.driver
    return PickupOut(
        id=pickup.id,
        hospital_id=pickup.hospital_id,
        driver_id=pickup.driver_id,
        weight_kg=pickup.weight_kg,
        collected_at=ensure_utc(pickup.collected_at),
        status=pickup.status,
        note=pickup.note,
        created_at=ensure_utc(pickup.created_at),
        updated_at=ensure_utc(pickup.updated_at),
        hospital=HospitalRef(name=hospital.name, code=hospital.code) if hospital else None,
        driver=DriverRef(name=driver.name, code=driver.code) if driver else None,
        photos=[build_photo_out(photo) for photo in pickup.photos],
    )
