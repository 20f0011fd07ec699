from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.common import ApiModel


class AccountCreate(ApiModel):
    code: Optional[str] = None
    name: Optional[str] = None
    password: Optional[str] = None
    is_active: Optional[bool] = None


class AccountUpdate(ApiModel):
    # code is accepted but never written; it is fixed at creation time.
    code: Optional[str] = None
    name: Optional[str] = None
    password: Optional[str] = None
    is_active: Optional[bool] = None


class PickupCount(ApiModel):
    pickups: int = 0


class AccountOut(ApiModel):
    id: str
    code: str
    name: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AccountListItem(AccountOut):
    count: PickupCount = Field(default_factory=PickupCount, alias="_count")


class HospitalListResponse(ApiModel):
    success: bool = True
    hospitals: list[AccountListItem] = Field(default_factory=list)


class DriverListResponse(ApiModel):
    success: bool = True
    drivers: list[AccountListItem] = Field(default_factory=list)


class HospitalResponse(ApiModel):
    success: bool = True
    message: str = ""
    hospital: AccountOut


class DriverResponse(ApiModel):
    success: bool = True
    message: str = ""
    driver: AccountOut
