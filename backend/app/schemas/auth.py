from typing import Optional

from app.schemas.common import ApiModel


class AdminLogin(ApiModel):
    username: Optional[str] = None
    password: Optional[str] = None


class HospitalLogin(ApiModel):
    code: Optional[str] = None
    password: Optional[str] = None


class DriverLogin(ApiModel):
    driver_code: Optional[str] = None
    password: Optional[str] = None


class AdminSessionOut(ApiModel):
    id: str
    username: str
    name: str


class ActorSessionOut(ApiModel):
    id: str
    code: str
    name: str


class AdminLoginResponse(ApiModel):
    success: bool = True
    message: str = ""
    admin: AdminSessionOut


class HospitalLoginResponse(ApiModel):
    success: bool = True
    hospital: ActorSessionOut


class DriverLoginResponse(ApiModel):
    success: bool = True
    driver: ActorSessionOut
