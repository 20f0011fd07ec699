from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import get_current_admin
from app.core.errors import BadRequest, NotFound
from app.core.security import get_password_hash
from app.database.deps import get_db
from app.models.admin import Admin
from app.models.driver import Driver
from app.schemas.account import AccountCreate, AccountUpdate, DriverListResponse, DriverResponse
from app.schemas.common import MessageResponse
from app.services.accounts import (
    build_account_out,
    clean_text,
    create_account,
    delete_account,
    list_with_pickup_counts,
)

router = APIRouter(prefix="/api/admin/drivers", tags=["Admin drivers"])

DRIVER_NOT_FOUND = "ไม่พบพนักงาน"


@router.get("", response_model=DriverListResponse)
def list_drivers(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin)
):
    return DriverListResponse(drivers=list_with_pickup_counts(db, Driver))


@router.post("", response_model=DriverResponse)
def create_driver(
    payload: AccountCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin)
):
    driver = create_account(db, Driver, payload, "รหัสพนักงานนี้มีอยู่แล้ว")
    return DriverResponse(message="เพิ่มพนักงานสำเร็จ", driver=build_account_out(driver))


@router.put("/{driver_id}", response_model=DriverResponse)
def update_driver(
    driver_id: str,
    payload: AccountUpdate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin)
):
    # Unlike hospitals, a driver update always carries the name.
    name = clean_text(payload.name)
    if not name:
        raise BadRequest("กรุณากรอกชื่อพนักงาน")

    driver = db.query(Driver).filter(Driver.id == driver_id).first()
    if not driver:
        raise NotFound(DRIVER_NOT_FOUND)

    driver.name = name
    if payload.is_active is not None:
        driver.is_active = payload.is_active
    if payload.password:
        driver.password_hash = get_password_hash(payload.password)
    db.commit()
    db.refresh(driver)
    return DriverResponse(message="แก้ไขพนักงานสำเร็จ", driver=build_account_out(driver))


@router.delete("/{driver_id}", response_model=MessageResponse)
def delete_driver(
    driver_id: str,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin)
):
    driver = db.query(Driver).filter(Driver.id == driver_id).first()
    if not driver:
        raise NotFound(DRIVER_NOT_FOUND)
    delete_account(
        db,
        Driver,
        driver,
        'ไม่สามารถลบพนักงานได้ เนื่องจากมีประวัติการเก็บขยะ {count} รายการ\nกรุณาใช้ฟังก์ชัน "ระงับ" แทน',
    )
    return MessageResponse(message="ลบพนักงานสำเร็จ")
