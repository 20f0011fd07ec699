from datetime import datetime
from typing import Optional, Union

from pydantic import Field

from app.schemas.common import ApiModel


class PhotoOut(ApiModel):
    id: str
    file_name: str
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    url: Optional[str] = None


class HospitalRef(ApiModel):
    name: str
    code: str


class DriverRef(ApiModel):
    name: str
    code: Optional[str] = None


class PickupOut(ApiModel):
    id: str
    hospital_id: str
    driver_id: str
    weight_kg: float
    collected_at: datetime
    status: str
    note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    hospital: Optional[HospitalRef] = None
    driver: Optional[DriverRef] = None
    photos: list[PhotoOut] = Field(default_factory=list)


class PickupPatch(ApiModel):
    weight_kg: Optional[Union[float, str]] = None
    status: Optional[str] = None
    note: Optional[str] = None
    collected_at: Optional[str] = None


class PickupResponse(ApiModel):
    success: bool = True
    message: str = ""
    pickup: PickupOut


class PickupListResponse(ApiModel):
    success: bool = True
    pickups: list[PickupOut] = Field(default_factory=list)


class HospitalOption(ApiModel):
    id: str
    code: str
    name: str


class HospitalOptionsResponse(ApiModel):
    success: bool = True
    hospitals: list[HospitalOption] = Field(default_factory=list)
