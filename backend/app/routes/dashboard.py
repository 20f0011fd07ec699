from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import get_current_admin
from app.core.timeutils import ensure_utc, today_bounds
from app.database.deps import get_db
from app.models.admin import Admin
from app.models.driver import Driver
from app.models.hospital import Hospital
from app.models.pickup import Pickup, PickupStatus
from app.schemas.dashboard import AdminDashboardResponse, AdminStats, RecentCollection

router = APIRouter(prefix="/api/admin", tags=["Admin dashboard"])

RECENT_LIMIT = 10


@router.get("/dashboard", response_model=AdminDashboardResponse)
def admin_dashboard(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin)
):
    start, end = today_bounds()
    recent = (
        db.query(Pickup)
        .order_by(Pickup.collected_at.desc(), Pickup.created_at.desc())
        .limit(RECENT_LIMIT)
        .all()
    )
    stats = AdminStats(
        total_collections=db.query(Pickup).count(),
        total_drivers=db.query(Driver).filter(Driver.is_active.is_(True)).count(),
        total_hospitals=db.query(Hospital).filter(Hospital.is_active.is_(True)).count(),
        today_collections=(
            db.query(Pickup)
            .filter(Pickup.collected_at >= start, Pickup.collected_at < end)
            .count()
        ),
        collected_status=db.query(Pickup).filter(Pickup.status == PickupStatus.COLLECTED.value).count(),
        in_transit_status=db.query(Pickup).filter(Pickup.status == PickupStatus.EN_ROUTE.value).count(),
        recent_collections=[
            RecentCollection(
                id=row.id,
                hospital_name=row.hospital.name,
                driver_name=row.driver.name,
                collected_at=ensure_utc(row.collected_at),
                weight=row.weight_kg,
                status=row.status,
            )
            for row in recent
        ],
    )
    return AdminDashboardResponse(admin_name=current_admin.name, stats=stats)
