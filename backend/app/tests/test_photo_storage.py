import io

from fastapi import UploadFile
from starlette.datastructures import Headers

from app.models.pickup import PickupPhoto
from app.services import photo_storage
from app.services.photo_storage import (
    build_photo_file_name,
    next_timestamp_ms,
    remove_photo_file,
    sanitize_filename,
    save_pickup_photos,
)
from app.tests.factories import create_driver, create_hospital, create_pickup


class ExplodingFile(io.BytesIO):
    def read(self, *args, **kwargs):
        raise OSError("disk unplugged")


def make_upload(name: str, content: bytes, content_type: str = "image/png") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=name,
        headers=Headers({"content-type": content_type}),
    )


def test_sanitize_replaces_everything_outside_safe_set():
    assert sanitize_filename("my photo (1).jpg") == "my_photo__1_.jpg"
    assert sanitize_filename("ถุง.jpg") == "___.jpg"
    assert sanitize_filename("scan-01.v2.png") == "scan-01.v2.png"
    assert sanitize_filename("") == "photo"


def test_file_name_embeds_timestamp_and_clean_name():
    assert build_photo_file_name("my photo.jpg", stamp_ms=1735725600000) == "1735725600000-my_photo.jpg"


def test_timestamps_strictly_increase():
    stamps = [next_timestamp_ms() for _ in range(200)]
    assert stamps == sorted(stamps)
    assert len(set(stamps)) == len(stamps)


def test_one_bad_file_does_not_stop_the_others(db_session, uploads_dir):
    pickup = create_pickup(db_session, create_hospital(db_session), create_driver(db_session))
    broken = UploadFile(file=ExplodingFile(b"x"), filename="broken.png")
    uploads = [
        make_upload("a.png", b"first"),
        broken,
        make_upload("empty.png", b""),
        make_upload("b.png", b"second"),
    ]

    saved = save_pickup_photos(db_session, pickup, uploads)

    assert [photo.file_name.split("-", 1)[1] for photo in saved] == ["a.png", "b.png"]
    assert db_session.query(PickupPhoto).count() == 2
    assert saved[0].file_size == len(b"first")
    assert saved[0].mime_type == "image/png"
    assert sorted(path.name for path in uploads_dir.iterdir()) == sorted(photo.file_name for photo in saved)


def test_failed_insert_is_rolled_back_and_logged(db_session, uploads_dir, monkeypatch, caplog):
    pickup = create_pickup(db_session, create_hospital(db_session), create_driver(db_session))
    original_commit = db_session.commit
    calls = {"count": 0}

    def flaky_commit():
        calls["count"] += 1
        if calls["count"] == 1:
            raise RuntimeError("database went away")
        return original_commit()

    monkeypatch.setattr(db_session, "commit", flaky_commit)
    with caplog.at_level("ERROR", logger="uvicorn.error"):
        saved = save_pickup_photos(db_session, pickup, [make_upload("a.png", b"1"), make_upload("b.png", b"2")])

    assert len(saved) == 1
    assert "Photo upload failed" in caplog.text
    assert [path.name for path in uploads_dir.iterdir()] == [saved[0].file_name]


def test_no_uploads_is_a_no_op(db_session):
    pickup = create_pickup(db_session, create_hospital(db_session), create_driver(db_session))
    assert save_pickup_photos(db_session, pickup, None) == []
    assert save_pickup_photos(db_session, pickup, []) == []


def test_remove_missing_file_is_reported_not_raised(uploads_dir, caplog):
    with caplog.at_level("ERROR", logger="uvicorn.error"):
        assert remove_photo_file("123-missing.jpg") is False
    assert "Could not delete photo file" in caplog.text


def test_remove_refuses_paths_outside_uploads(uploads_dir, tmp_path):
    outside = tmp_path / "keep.txt"
    outside.write_text("keep")
    assert remove_photo_file(str(outside)) is False
    assert remove_photo_file("../" + outside.name) is False
    assert outside.exists()


def test_uploads_dir_is_created_on_demand(tmp_path, monkeypatch):
    target = tmp_path / "nested" / "uploads"
    monkeypatch.setattr(photo_storage.config, "UPLOADS_DIR", str(target))
    assert photo_storage.get_uploads_dir() == target
    assert target.is_dir()


def test_refresh_failure_after_commit_keeps_the_file(db_session, uploads_dir, monkeypatch, caplog):
    pickup = create_pickup(db_session, create_hospital(db_session), create_driver(db_session))
    original_refresh = db_session.refresh

    def failing_refresh(instance, *args, **kwargs):
        if isinstance(instance, PickupPhoto):
            raise RuntimeError("connection reset")
        return original_refresh(instance, *args, **kwargs)

    monkeypatch.setattr(db_session, "refresh", failing_refresh)
    with caplog.at_level("ERROR", logger="uvicorn.error"):
        saved = save_pickup_photos(db_session, pickup, [make_upload("a.png", b"kept")])

    assert len(saved) == 1
    assert "Photo upload failed" in caplog.text
    stored = db_session.query(PickupPhoto).one()
    assert (uploads_dir / stored.file_name).read_bytes() == b"kept"
