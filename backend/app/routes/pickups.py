import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from app.core.auth import get_current_driver
from app.core.errors import BadRequest, Forbidden, NotFound
from app.database.deps import get_db
from app.models.driver import Driver
from app.models.hospital import Hospital
from app.models.pickup import Pickup, PickupPhoto
from app.schemas.common import MessageResponse
from app.schemas.pickup import (
    HospitalOption,
    HospitalOptionsResponse,
    PickupListResponse,
    PickupPatch,
    PickupResponse,
)
from app.services.photo_storage import delete_photo, delete_pickup_with_photos, save_pickup_photos
from app.services.pickups import (
    build_pickup_out,
    clean_note,
    parse_collected_at,
    parse_status,
    parse_weight,
)

logger = logging.getLogger("uvicorn.error")
router = APIRouter(prefix="/api/driver", tags=["Driver pickups"])

PICKUP_NOT_FOUND = "ไม่พบรายการเก็บขยะ"
PHOTO_NOT_FOUND = "ไม่พบรูปภาพ"
CANNOT_VIEW = "คุณไม่มีสิทธิ์ดูรายการนี้"
CANNOT_EDIT = "คุณไม่มีสิทธิ์แก้ไขรายการนี้"
CANNOT_DELETE = "คุณไม่มีสิทธิ์ลบรายการนี้"
CANNOT_DELETE_PHOTO = "คุณไม่มีสิทธิ์ลบรูปภาพนี้"


def get_owned_pickup(db: Session, pickup_id: str, driver: Driver, forbidden_detail: str) -> Pickup:
    pickup = db.query(Pickup).filter(Pickup.id == pickup_id).first()
    if not pickup:
        raise NotFound(PICKUP_NOT_FOUND)
    if pickup.driver_id != driver.id:
        raise Forbidden(forbidden_detail)
    return pickup


def resolve_hospital(db: Session, hospital_code: str) -> Hospital:
    hospital = db.query(Hospital).filter(Hospital.code == hospital_code.strip()).first()
    if not hospital:
        raise NotFound("ไม่พบโรงพยาบาล")
    return hospital


def require_pickup_fields(*values) -> None:
    if any(value is None or not str(value).strip() for value in values):
        raise BadRequest()


@router.get("", response_model=PickupListResponse)
def list_driver_pickups(
    db: Session = Depends(get_db),
    current_driver: Driver = Depends(get_current_driver)
):
    rows = (
        db.query(Pickup)
        .filter(Pickup.driver_id == current_driver.id)
        .order_by(Pickup.created_at.desc(), Pickup.collected_at.desc())
        .all()
    )
    return PickupListResponse(pickups=[build_pickup_out(row) for row in rows])


@router.get("/hospitals", response_model=HospitalOptionsResponse)
def list_active_hospitals(
    db: Session = Depends(get_db),
    current_driver: Driver = Depends(get_current_driver)
):
    rows = (
        db.query(Hospital)
        .filter(Hospital.is_active.is_(True))
        .order_by(Hospital.name.asc())
        .all()
    )
    return HospitalOptionsResponse(
        hospitals=[HospitalOption(id=row.id, code=row.code, name=row.name) for row in rows]
    )


@router.post("", response_model=PickupResponse)
def create_pickup(
    hospital_id: Optional[str] = Form(None),
    weight: Optional[str] = Form(None),
    collected_at: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    note: Optional[str] = Form(None),
    photos: Optional[list[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    current_driver: Driver = Depends(get_current_driver)
):
    require_pickup_fields(hospital_id, weight, collected_at, status)
    parsed_weight = parse_weight(weight)
    parsed_collected_at = parse_collected_at(collected_at)
    parsed_status = parse_status(status)
    hospital = resolve_hospital(db, hospital_id)

    pickup = Pickup(
        hospital_id=hospital.id,
        driver_id=current_driver.id,
        weight_kg=parsed_weight,
        collected_at=parsed_collected_at,
        status=parsed_status,
        note=clean_note(note)
    )
    db.add(pickup)
    db.commit()
    db.refresh(pickup)

    saved = save_pickup_photos(db, pickup, photos)
    logger.info("Driver %s recorded pickup %s with %d photo(s)", current_driver.code, pickup.id, len(saved))
    db.refresh(pickup)
    return PickupResponse(message="บันทึกสำเร็จ", pickup=build_pickup_out(pickup))


@router.put("/{pickup_id}", response_model=PickupResponse)
def update_pickup(
    pickup_id: str,
    hospital_id: Optional[str] = Form(None),
    weight: Optional[str] = Form(None),
    collected_at: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    note: Optional[str] = Form(None),
    photos: Optional[list[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    current_driver: Driver = Depends(get_current_driver)
):
    pickup = get_owned_pickup(db, pickup_id, current_driver, CANNOT_EDIT)

    require_pickup_fields(hospital_id, weight, collected_at, status)
    parsed_weight = parse_weight(weight)
    parsed_collected_at = parse_collected_at(collected_at)
    parsed_status = parse_status(status)
    hospital = resolve_hospital(db, hospital_id)

    pickup.hospital_id = hospital.id
    pickup.weight_kg = parsed_weight
    pickup.collected_at = parsed_collected_at
    pickup.status = parsed_status
    pickup.note = clean_note(note)
    db.commit()
    db.refresh(pickup)

    # New photos are appended; existing ones are removed only through the photo endpoints.
    save_pickup_photos(db, pickup, photos)
    db.refresh(pickup)
    return PickupResponse(message="แก้ไขสำเร็จ", pickup=build_pickup_out(pickup))


@router.delete("/{pickup_id}", response_model=MessageResponse)
def delete_pickup(
    pickup_id: str,
    db: Session = Depends(get_db),
    current_driver: Driver = Depends(get_current_driver)
):
    pickup = get_owned_pickup(db, pickup_id, current_driver, CANNOT_DELETE)
    delete_pickup_with_photos(db, pickup)
    return MessageResponse(message="ลบรายการสำเร็จ")


@router.get("/pickups/{pickup_id}", response_model=PickupResponse)
def read_pickup(
    pickup_id: str,
    db: Session = Depends(get_db),
    current_driver: Driver = Depends(get_current_driver)
):
    pickup = get_owned_pickup(db, pickup_id, current_driver, CANNOT_VIEW)
    return PickupResponse(pickup=build_pickup_out(pickup))


@router.patch("/pickups/{pickup_id}", response_model=PickupResponse)
def patch_pickup(
    pickup_id: str,
    payload: PickupPatch,
    db: Session = Depends(get_db),
    current_driver: Driver = Depends(get_current_driver)
):
    pickup = get_owned_pickup(db, pickup_id, current_driver, CANNOT_EDIT)

    require_pickup_fields(payload.weight_kg, payload.status, payload.collected_at)
    parsed_weight = parse_weight(payload.weight_kg)
    parsed_status = parse_status(payload.status)
    parsed_collected_at = parse_collected_at(payload.collected_at)

    pickup.weight_kg = parsed_weight
    pickup.status = parsed_status
    pickup.collected_at = parsed_collected_at
    pickup.note = clean_note(payload.note)
    db.commit()
    db.refresh(pickup)
    return PickupResponse(message="แก้ไขสำเร็จ", pickup=build_pickup_out(pickup))


@router.delete("/pickups/{pickup_id}", response_model=MessageResponse)
def delete_pickup_by_path(
    pickup_id: str,
    db: Session = Depends(get_db),
    current_driver: Driver = Depends(get_current_driver)
):
    return delete_pickup(pickup_id=pickup_id, db=db, current_driver=current_driver)


def delete_owned_photo(db: Session, photo_id: str, driver: Driver) -> None:
    photo = db.query(PickupPhoto).filter(PickupPhoto.id == photo_id).first()
    if not photo:
        raise NotFound(PHOTO_NOT_FOUND)
    if photo.pickup.driver_id != driver.id:
        raise Forbidden(CANNOT_DELETE_PHOTO)
    delete_photo(db, photo)


@router.delete("/photo/{photo_id}", response_model=MessageResponse)
def delete_pickup_photo(
    photo_id: str,
    db: Session = Depends(get_db),
    current_driver: Driver = Depends(get_current_driver)
):
    delete_owned_photo(db, photo_id, current_driver)
    return MessageResponse(message="ลบรูปภาพสำเร็จ")


@router.delete("/pickups/photo/{photo_id}", response_model=MessageResponse)
def delete_pickup_photo_by_path(
    photo_id: str,
    db: Session = Depends(get_db),
    current_driver: Driver = Depends(get_current_driver)
):
    delete_owned_photo(db, photo_id, current_driver)
    return MessageResponse(message="ลบรูปภาพสำเร็จ")
