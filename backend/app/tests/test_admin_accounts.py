import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from app.core.auth import ADMIN_COOKIE
from app.core.security import verify_password
from app.main import app
from app.models.driver import Driver
from app.models.hospital import Hospital
from app.routes import hospitals as hospitals_routes
from app.routes.drivers import create_driver as create_driver_route
from app.routes.drivers import update_driver
from app.routes.hospitals import update_hospital
from app.schemas.account import AccountCreate, AccountUpdate
from app.tests.factories import create_admin, create_driver, create_hospital, create_pickup


@pytest.fixture
def admin_client(client, db_session):
    admin = create_admin(db_session)
    client.cookies.set(ADMIN_COOKIE, admin.id)
    return client


def test_create_hospital_then_list_shows_zero_pickups(admin_client):
    response = admin_client.post(
        "/api/admin/hospitals",
        json={"code": "HOS001", "name": "Test Hospital", "password": "secret1"},
    )
    assert response.status_code == 200
    created = response.json()
    assert created["success"] is True
    assert created["hospital"]["code"] == "HOS001"
    assert created["hospital"]["isActive"] is True
    assert "passwordHash" not in created["hospital"]

    listing = admin_client.get("/api/admin/hospitals")
    assert listing.status_code == 200
    hospitals = listing.json()["hospitals"]
    assert [row["code"] for row in hospitals] == ["HOS001"]
    assert hospitals[0]["_count"]["pickups"] == 0


def test_duplicate_hospital_code_is_rejected(admin_client, db_session):
    payload = {"code": "HOS001", "name": "Test Hospital", "password": "secret1"}
    assert admin_client.post("/api/admin/hospitals", json=payload).status_code == 200

    again = admin_client.post("/api/admin/hospitals", json={**payload, "name": "Other"})
    assert again.status_code == 400
    assert again.json()["error"] == "รหัสโรงพยาบาลนี้มีอยู่แล้ว"
    assert db_session.query(Hospital).count() == 1


def test_create_requires_code_name_and_password(admin_client):
    response = admin_client.post("/api/admin/drivers", json={"code": "DRV001", "name": "Somchai"})
    assert response.status_code == 400
    assert response.json()["error"] == "กรุณากรอกข้อมูลให้ครบถ้วน"


def test_create_driver_hashes_password_and_honours_is_active(db_session):
    admin = create_admin(db_session)
    result = create_driver_route(
        payload=AccountCreate(code="DRV002", name="Somchai", password="pw", is_active=False),
        db=db_session,
        current_admin=admin,
    )
    assert result.driver.is_active is False

    stored = db_session.query(Driver).filter(Driver.code == "DRV002").one()
    assert stored.password_hash != "pw"
    assert verify_password("pw", stored.password_hash)


def test_list_counts_pickups_per_account(admin_client, db_session):
    hospital = create_hospital(db_session, code="HOS001")
    create_hospital(db_session, code="HOS002")
    driver = create_driver(db_session)
    create_pickup(db_session, hospital, driver)
    create_pickup(db_session, hospital, driver)

    hospitals = {row["code"]: row for row in admin_client.get("/api/admin/hospitals").json()["hospitals"]}
    assert hospitals["HOS001"]["_count"]["pickups"] == 2
    assert hospitals["HOS002"]["_count"]["pickups"] == 0

    drivers = admin_client.get("/api/admin/drivers").json()["drivers"]
    assert drivers[0]["_count"]["pickups"] == 2


def test_hospital_update_is_partial(db_session):
    admin = create_admin(db_session)
    hospital = create_hospital(db_session, code="HOS001", password="secret1")
    original_name = hospital.name

    result = update_hospital(
        hospital_id=hospital.id,
        payload=AccountUpdate(password="new-secret"),
        db=db_session,
        current_admin=admin,
    )
    assert result.hospital.name == original_name
    db_session.refresh(hospital)
    assert verify_password("new-secret", hospital.password_hash)

    with pytest.raises(HTTPException) as exc_info:
        update_hospital(hospital_id=hospital.id, payload=AccountUpdate(), db=db_session, current_admin=admin)
    assert exc_info.value.status_code == 400


def test_hospital_toggle_active_keeps_code(admin_client, db_session):
    hospital = create_hospital(db_session, code="HOS001")
    response = admin_client.put(
        f"/api/admin/hospitals/{hospital.id}",
        json={"code": "CHANGED", "isActive": False},
    )
    assert response.status_code == 200
    body = response.json()["hospital"]
    assert body["isActive"] is False
    assert body["code"] == "HOS001"


def test_driver_update_requires_name(db_session):
    admin = create_admin(db_session)
    driver = create_driver(db_session, password="driver1")

    with pytest.raises(HTTPException) as exc_info:
        update_driver(driver_id=driver.id, payload=AccountUpdate(is_active=False), db=db_session, current_admin=admin)
    assert exc_info.value.status_code == 400

    result = update_driver(
        driver_id=driver.id,
        payload=AccountUpdate(name="Renamed", password=""),
        db=db_session,
        current_admin=admin,
    )
    assert result.driver.name == "Renamed"
    assert result.driver.is_active is True
    db_session.refresh(driver)
    assert verify_password("driver1", driver.password_hash)


def test_update_missing_account_is_not_found(admin_client):
    response = admin_client.put("/api/admin/drivers/missing", json={"name": "Nobody"})
    assert response.status_code == 404
    assert response.json()["error"] == "ไม่พบพนักงาน"


def test_delete_blocked_when_account_has_pickups(admin_client, db_session):
    hospital = create_hospital(db_session)
    driver = create_driver(db_session)
    create_pickup(db_session, hospital, driver)

    for path in (f"/api/admin/hospitals/{hospital.id}", f"/api/admin/drivers/{driver.id}"):
        response = admin_client.delete(path)
        assert response.status_code == 400
        assert "1 รายการ" in response.json()["error"]

    db_session.expire_all()
    assert db_session.query(Hospital).filter(Hospital.id == hospital.id).count() == 1
    assert db_session.query(Driver).filter(Driver.id == driver.id).count() == 1


def test_delete_account_without_pickups(admin_client, db_session):
    hospital = create_hospital(db_session)
    response = admin_client.delete(f"/api/admin/hospitals/{hospital.id}")
    assert response.status_code == 200
    assert response.json()["success"] is True

    db_session.expire_all()
    assert db_session.query(Hospital).count() == 0
    assert admin_client.delete(f"/api/admin/hospitals/{hospital.id}").status_code == 404


def test_unexpected_error_returns_internal_error_envelope(db_session, monkeypatch, caplog):
    admin = create_admin(db_session)

    def broken_listing(db, model):
        raise RuntimeError("db exploded")

    monkeypatch.setattr(hospitals_routes, "list_with_pickup_counts", broken_listing)
    client = TestClient(app, raise_server_exceptions=False)
    client.cookies.set(ADMIN_COOKIE, admin.id)
    with caplog.at_level("ERROR", logger="uvicorn.error"):
        response = client.get("/api/admin/hospitals")

    assert response.status_code == 500
    assert response.json() == {"error": "เกิดข้อผิดพลาดในระบบ: db exploded"}
    assert "Unhandled error on GET /api/admin/hospitals" in caplog.text
    assert "RuntimeError: db exploded" in caplog.text
