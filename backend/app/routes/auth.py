import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.core.auth import (
    ADMIN_COOKIE,
    DRIVER_COOKIE,
    HOSPITAL_COOKIE,
    clear_session_cookie,
    set_session_cookie,
)
from app.core.errors import BadRequest, Forbidden, Unauthorized
from app.core.security import verify_password
from app.database.deps import get_db
from app.models.admin import Admin
from app.models.driver import Driver
from app.models.hospital import Hospital
from app.schemas.auth import (
    ActorSessionOut,
    AdminLogin,
    AdminLoginResponse,
    AdminSessionOut,
    DriverLogin,
    DriverLoginResponse,
    HospitalLogin,
    HospitalLoginResponse,
)
from app.schemas.common import MessageResponse

logger = logging.getLogger("uvicorn.error")
router = APIRouter(prefix="/api", tags=["Auth"])

SUSPENDED_MESSAGE = "บัญชีนี้ถูกระงับการใช้งาน"
LOGOUT_MESSAGE = "ออกจากระบบสำเร็จ"


def authenticate(account, password: str, invalid_detail: str):
    if not account or not verify_password(password, account.password_hash):
        raise Unauthorized(invalid_detail)
    if not account.is_active:
        raise Forbidden(SUSPENDED_MESSAGE)
    return account


@router.post("/admin/login", response_model=AdminLoginResponse)
def admin_login(credentials: AdminLogin, response: Response, db: Session = Depends(get_db)):
    username = (credentials.username or "").strip()
    if not username or not credentials.password:
        raise BadRequest("กรุณากรอกชื่อผู้ใช้และรหัสผ่าน")

    admin = db.query(Admin).filter(Admin.username == username).first()
    admin = authenticate(admin, credentials.password, "ชื่อผู้ใช้หรือรหัสผ่านไม่ถูกต้อง")

    set_session_cookie(response, ADMIN_COOKIE, admin.id)
    logger.info("Admin %s signed in", admin.username)
    return AdminLoginResponse(
        message="เข้าสู่ระบบสำเร็จ",
        admin=AdminSessionOut(id=admin.id, username=admin.username, name=admin.name),
    )


@router.post("/hospital/login", response_model=HospitalLoginResponse)
def hospital_login(credentials: HospitalLogin, response: Response, db: Session = Depends(get_db)):
    code = (credentials.code or "").strip()
    if not code or not credentials.password:
        raise BadRequest("กรุณากรอกรหัสและรหัสผ่าน")

    hospital = db.query(Hospital).filter(Hospital.code == code).first()
    hospital = authenticate(hospital, credentials.password, "รหัสหรือรหัสผ่านไม่ถูกต้อง")

    set_session_cookie(response, HOSPITAL_COOKIE, hospital.id)
    logger.info("Hospital %s signed in", hospital.code)
    return HospitalLoginResponse(
        hospital=ActorSessionOut(id=hospital.id, code=hospital.code, name=hospital.name),
    )


@router.post("/driver/login", response_model=DriverLoginResponse)
def driver_login(credentials: DriverLogin, response: Response, db: Session = Depends(get_db)):
    driver_code = (credentials.driver_code or "").strip()
    if not driver_code or not credentials.password:
        raise BadRequest("กรุณากรอกรหัสพนักงานและรหัสผ่าน")

    driver = db.query(Driver).filter(Driver.code == driver_code).first()
    driver = authenticate(driver, credentials.password, "รหัสพนักงานหรือรหัสผ่านไม่ถูกต้อง")

    set_session_cookie(response, DRIVER_COOKIE, driver.id)
    logger.info("Driver %s signed in", driver.code)
    return DriverLoginResponse(
        driver=ActorSessionOut(id=driver.id, code=driver.code, name=driver.name),
    )


@router.post("/admin/logout", response_model=MessageResponse)
def admin_logout(response: Response):
    clear_session_cookie(response, ADMIN_COOKIE)
    return MessageResponse(message=LOGOUT_MESSAGE)


@router.post("/hospital/logout", response_model=MessageResponse)
def hospital_logout(response: Response):
    clear_session_cookie(response, HOSPITAL_COOKIE)
    return MessageResponse(message=LOGOUT_MESSAGE)


@router.post("/driver/logout", response_model=MessageResponse)
def driver_logout(response: Response):
    clear_session_cookie(response, DRIVER_COOKIE)
    return MessageResponse(message=LOGOUT_MESSAGE)
