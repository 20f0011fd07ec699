from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.common import ApiModel
from app.schemas.pickup import HospitalRef, PhotoOut


class RecentCollection(ApiModel):
    id: str
    hospital_name: str
    driver_name: str
    collected_at: datetime
    weight: float
    status: str


class AdminStats(ApiModel):
    total_collections: int = 0
    total_drivers: int = 0
    total_hospitals: int = 0
    today_collections: int = 0
    collected_status: int = 0
    in_transit_status: int = 0
    recent_collections: list[RecentCollection] = Field(default_factory=list)


class AdminDashboardResponse(ApiModel):
    success: bool = True
    admin_name: str
    stats: AdminStats


class HospitalStats(ApiModel):
    total_pickups: int = 0
    collected_status: int = 0
    in_transit_status: int = 0
    total_weight: float = 0.0
    today_pickups: int = 0


class HospitalPickupRow(ApiModel):
    id: str
    driver_name: str
    collected_at: datetime
    weight_kg: float
    status: str
    note: Optional[str] = None
    photos: list[PhotoOut] = Field(default_factory=list)


class HospitalDashboardResponse(ApiModel):
    success: bool = True
    hospital: HospitalRef
    stats: HospitalStats
    pickups: list[HospitalPickupRow] = Field(default_factory=list)
