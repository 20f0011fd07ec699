from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import get_current_hospital
from app.core.timeutils import ensure_utc, is_today
from app.database.deps import get_db
from app.models.hospital import Hospital
from app.models.pickup import Pickup, PickupStatus
from app.schemas.dashboard import HospitalDashboardResponse, HospitalPickupRow, HospitalStats
from app.schemas.pickup import HospitalRef, PickupListResponse
from app.services.pickups import build_photo_out, build_pickup_out

router = APIRouter(prefix="/api", tags=["Hospital"])


def hospital_pickups(db: Session, hospital: Hospital, order_by) -> list[Pickup]:
    return (
        db.query(Pickup)
        .filter(Pickup.hospital_id == hospital.id)
        .order_by(order_by.desc())
        .all()
    )


@router.get("/hospital/dashboard", response_model=HospitalDashboardResponse)
def hospital_dashboard(
    db: Session = Depends(get_db),
    current_hospital: Hospital = Depends(get_current_hospital)
):
    pickups = hospital_pickups(db, current_hospital, Pickup.collected_at)
    stats = HospitalStats(
        total_pickups=len(pickups),
        collected_status=sum(1 for row in pickups if row.status == PickupStatus.COLLECTED.value),
        in_transit_status=sum(1 for row in pickups if row.status == PickupStatus.EN_ROUTE.value),
        total_weight=sum(row.weight_kg or 0 for row in pickups),
        today_pickups=sum(1 for row in pickups if is_today(row.collected_at)),
    )
    return HospitalDashboardResponse(
        hospital=HospitalRef(name=current_hospital.name, code=current_hospital.code),
        stats=stats,
        pickups=[
            HospitalPickupRow(
                id=row.id,
                driver_name=row.driver.name,
                collected_at=ensure_utc(row.collected_at),
                weight_kg=row.weight_kg,
                status=row.status,
                note=row.note,
                photos=[build_photo_out(photo) for photo in row.photos],
            )
            for row in pickups
        ],
    )


@router.get("/pickup", response_model=PickupListResponse)
def list_hospital_pickups(
    db: Session = Depends(get_db),
    current_hospital: Hospital = Depends(get_current_hospital)
):
    pickups = hospital_pickups(db, current_hospital, Pickup.created_at)
    return PickupListResponse(pickups=[build_pickup_out(row) for row in pickups])
