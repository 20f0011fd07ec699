from typing import Optional

from fastapi import Cookie, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.config import COOKIE_SECURE, SESSION_MAX_AGE_SECONDS
from app.core.errors import Unauthorized
from app.database.deps import get_db
from app.models.admin import Admin
from app.models.driver import Driver
from app.models.hospital import Hospital

ADMIN_COOKIE = "admin_id"
HOSPITAL_COOKIE = "hospital_id"
DRIVER_COOKIE = "driver_id"


def set_session_cookie(response: Response, cookie_name: str, actor_id: str) -> None:
    response.set_cookie(
        key=cookie_name,
        value=actor_id,
        max_age=SESSION_MAX_AGE_SECONDS,
        path="/",
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
    )


def clear_session_cookie(response: Response, cookie_name: str) -> None:
    response.delete_cookie(
        key=cookie_name,
        path="/",
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
    )


def load_active_actor(db: Session, model, actor_id: Optional[str], inactive_detail: str):
    """Resolve a session cookie value to an active account or raise 401."""
    if not actor_id:
        raise Unauthorized()
    actor = db.query(model).filter(model.id == actor_id).first()
    if not actor or not actor.is_active:
        raise Unauthorized(inactive_detail)
    return actor


def get_current_admin(
    admin_id: Optional[str] = Cookie(default=None),
    db: Session = Depends(get_db)
) -> Admin:
    return load_active_actor(db, Admin, admin_id, "Admin not found or inactive")


def get_current_hospital(
    hospital_id: Optional[str] = Cookie(default=None),
    db: Session = Depends(get_db)
) -> Hospital:
    return load_active_actor(db, Hospital, hospital_id, "Hospital not found or inactive")


def get_current_driver(
    driver_id: Optional[str] = Cookie(default=None),
    db: Session = Depends(get_db)
) -> Driver:
    return load_active_actor(db, Driver, driver_id, "Driver not found or inactive")
