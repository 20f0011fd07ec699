import os
import shutil
import tempfile
from pathlib import Path
from uuid import uuid4

import pytest

TEST_DB_FILE = Path(tempfile.gettempdir()) / f"test_waste_pickups_{uuid4().hex}.db"
TEST_UPLOADS_DIR = Path(tempfile.gettempdir()) / f"test_waste_uploads_{uuid4().hex}"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_FILE.as_posix()}"
os.environ["UPLOADS_DIR"] = str(TEST_UPLOADS_DIR)
os.environ["DB_BOOTSTRAP_MODE"] = "off"
os.environ["COOKIE_SECURE"] = "false"

from fastapi.testclient import TestClient  # noqa: E402

from app.database.base import Base  # noqa: E402
from app.database.session import SessionLocal, engine  # noqa: E402
from app.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    engine.dispose()
    if TEST_DB_FILE.exists():
        TEST_DB_FILE.unlink()
    Base.metadata.create_all(bind=engine)
    TEST_UPLOADS_DIR.mkdir(parents=True, exist_ok=True)
    try:
        yield
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
        if TEST_DB_FILE.exists():
            TEST_DB_FILE.unlink()
        shutil.rmtree(TEST_UPLOADS_DIR, ignore_errors=True)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def uploads_dir() -> Path:
    return TEST_UPLOADS_DIR
