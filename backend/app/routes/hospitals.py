from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import get_current_admin
from app.core.errors import BadRequest, NotFound
from app.core.security import get_password_hash
from app.database.deps import get_db
from app.models.admin import Admin
from app.models.hospital import Hospital
from app.schemas.account import AccountCreate, AccountUpdate, HospitalListResponse, HospitalResponse
from app.schemas.common import MessageResponse
from app.services.accounts import (
    build_account_out,
    clean_text,
    create_account,
    delete_account,
    list_with_pickup_counts,
)

router = APIRouter(prefix="/api/admin/hospitals", tags=["Admin hospitals"])

HOSPITAL_NOT_FOUND = "ไม่พบโรงพยาบาล"


def get_hospital_or_404(db: Session, hospital_id: str) -> Hospital:
    hospital = db.query(Hospital).filter(Hospital.id == hospital_id).first()
    if not hospital:
        raise NotFound(HOSPITAL_NOT_FOUND)
    return hospital


@router.get("", response_model=HospitalListResponse)
def list_hospitals(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin)
):
    return HospitalListResponse(hospitals=list_with_pickup_counts(db, Hospital))


@router.post("", response_model=HospitalResponse)
def create_hospital(
    payload: AccountCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin)
):
    hospital = create_account(db, Hospital, payload, "รหัสโรงพยาบาลนี้มีอยู่แล้ว")
    return HospitalResponse(message="เพิ่มโรงพยาบาลสำเร็จ", hospital=build_account_out(hospital))


@router.put("/{hospital_id}", response_model=HospitalResponse)
def update_hospital(
    hospital_id: str,
    payload: AccountUpdate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin)
):
    hospital = get_hospital_or_404(db, hospital_id)

    # Partial update: only the fields that were sent are touched.
    changes = {}
    name = clean_text(payload.name)
    if name:
        changes["name"] = name
    if payload.is_active is not None:
        changes["is_active"] = payload.is_active
    if payload.password:
        changes["password_hash"] = get_password_hash(payload.password)
    if not changes:
        raise BadRequest("ไม่มีข้อมูลที่จะอัปเดต")

    for key, value in changes.items():
        setattr(hospital, key, value)
    db.commit()
    db.refresh(hospital)
    return HospitalResponse(message="แก้ไขโรงพยาบาลสำเร็จ", hospital=build_account_out(hospital))


@router.delete("/{hospital_id}", response_model=MessageResponse)
def delete_hospital(
    hospital_id: str,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin)
):
    hospital = get_hospital_or_404(db, hospital_id)
    delete_account(
        db,
        Hospital,
        hospital,
        'ไม่สามารถลบโรงพยาบาลได้ เนื่องจากมีประวัติการเก็บขยะ {count} รายการ\nกรุณาใช้ฟังก์ชัน "ระงับ" แทน',
    )
    return MessageResponse(message="ลบโรงพยาบาลสำเร็จ")
