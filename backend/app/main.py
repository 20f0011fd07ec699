import logging
import os
import threading

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from app.routes import auth, hospitals, drivers, dashboard, pickups, hospital
from app.database.base import Base
from app.database.session import engine, SessionLocal
from app import models  # noqa: F401
from app.core.config import (
    ADMIN_USERNAME,
    ADMIN_PASSWORD,
    ADMIN_NAME,
    CORS_ORIGINS,
    CORS_ORIGIN_REGEX,
    parse_cors_origins,
)
from app.core.errors import register_exception_handlers
from app.core.security import get_password_hash
from app.models.admin import Admin
from app.services.photo_storage import get_uploads_dir

logger = logging.getLogger("uvicorn.error")
app = FastAPI(title="Infectious Waste Pickups")

cors_origins = parse_cors_origins(CORS_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_origin_regex=CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)
register_exception_handlers(app)


@app.middleware("http")
async def ensure_utf8_json_charset(request: Request, call_next):
    response = await call_next(request)
    content_type = str(response.headers.get("content-type", ""))
    if content_type.startswith("application/json") and "charset=" not in content_type.lower():
        response.headers["content-type"] = "application/json; charset=utf-8"
    return response

app.mount("/uploads", StaticFiles(directory=str(get_uploads_dir())), name="uploads")


def ensure_admin_user():
    if not ADMIN_USERNAME or not ADMIN_PASSWORD:
        return
    db = SessionLocal()
    try:
        existing = db.query(Admin).filter(Admin.username == ADMIN_USERNAME).first()
        if existing:
            if ADMIN_NAME and existing.name != ADMIN_NAME:
                existing.name = ADMIN_NAME
                db.commit()
            return
        admin = Admin(
            username=ADMIN_USERNAME,
            name=ADMIN_NAME,
            password_hash=get_password_hash(ADMIN_PASSWORD),
            is_active=True
        )
        db.add(admin)
        db.commit()
        logger.info("Seeded admin account %s", ADMIN_USERNAME)
    finally:
        db.close()


def run_db_bootstrap() -> None:
    steps = [
        ("create_all", lambda: Base.metadata.create_all(bind=engine)),
        ("ensure_admin_user", ensure_admin_user),
    ]
    for step_name, step_fn in steps:
        try:
            step_fn()
        except Exception:  # pragma: no cover - startup hardening
            logger.exception("Database bootstrap step failed (%s)", step_name)


_bootstrap_lock = threading.Lock()
_bootstrap_started = False


def trigger_db_bootstrap() -> None:
    global _bootstrap_started
    with _bootstrap_lock:
        if _bootstrap_started:
            return
        _bootstrap_started = True

    mode = str(os.getenv("DB_BOOTSTRAP_MODE", "background") or "background").strip().lower()
    if mode == "off":
        logger.info("DB bootstrap disabled (DB_BOOTSTRAP_MODE=off).")
        return
    if mode == "sync":
        logger.info("Running DB bootstrap synchronously.")
        run_db_bootstrap()
        return

    logger.info("Running DB bootstrap in the background.")
    threading.Thread(target=run_db_bootstrap, daemon=True, name="db-bootstrap").start()


app.include_router(auth.router)
app.include_router(hospitals.router)
app.include_router(drivers.router)
app.include_router(dashboard.router)
app.include_router(pickups.router)
app.include_router(hospital.router)

@app.get("/")
def root():
    return {"message": "Infectious waste pickup API is running"}


@app.get("/health")
def healthcheck():
    return {"status": "ok"}


@app.get("/health/db")
def healthcheck_db():
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
    return {"status": "ok"}


@app.on_event("startup")
def startup_event():
    trigger_db_bootstrap()


@app.on_event("shutdown")
def shutdown_event():
    engine.dispose()
