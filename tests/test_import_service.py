import os
from datetime import datetime, timedelta, timezone

import pytest

from conftest import FakeUpload, build_workbook, run, student_row

from app.core.errors import (
    CapacityExceededError,
    EmptyInputError,
    ExpiredSubscriptionError,
    InvalidUploadError,
    NoSubscriptionError,
    StorageError,
    ValidationError,
)
from app.services import import_service
from app.services.import_service import import_students, import_students_from_upload


def five_rows(**row3_overrides):
    rows = [student_row(name=f"Student {index}") for index in range(1, 6)]
    rows[2].update(row3_overrides)
    return rows


def test_import_inserts_all_rows_and_reports_totals(fake_db, make_school, asset_store):
    school = make_school(students_allowed=100, current_count=10)
    result = run(import_students(fake_db, school, five_rows(), asset_store))
    assert result.imported == 5
    assert result.total_students == 15
    assert result.remaining_slots == 85
    assert fake_db.count("students", school_id=school.id) == 15
    stored = [row for row in fake_db.tables["students"] if row["name"] == "Student 3"][0]
    assert stored["guardian_contact"] == "9876543210"


@pytest.mark.parametrize("rows", [[], None, "rows", [1, 2], [student_row(), "row"]])
def test_empty_or_malformed_input_is_rejected(fake_db, make_school, asset_store, rows):
    with pytest.raises(EmptyInputError):
        run(import_students(fake_db, make_school(), rows, asset_store))


def test_row_three_missing_guardian_rejects_whole_batch(fake_db, make_school, asset_store):
    school = make_school(current_count=3)
    with pytest.raises(ValidationError) as exc_info:
        run(import_students(fake_db, school, five_rows(guardianContact=""), asset_store))
    assert exc_info.value.invalid_students == ["Student 3"]
    assert fake_db.count("students", school_id=school.id) == 3


def test_unnamed_invalid_row_is_reported(fake_db, make_school, asset_store):
    with pytest.raises(ValidationError) as exc_info:
        run(import_students(fake_db, make_school(), five_rows(name="", guardianContact=""), asset_store))
    assert exc_info.value.invalid_students == ["Unnamed student"]


def test_every_invalid_row_is_reported_in_order(fake_db, make_school, asset_store):
    rows = five_rows()
    rows[0]["dob"] = ""
    rows[4]["address"] = ""
    with pytest.raises(ValidationError) as exc_info:
        run(import_students(fake_db, make_school(), rows, asset_store))
    assert exc_info.value.invalid_students == ["Student 1", "Student 5"]


def test_validation_failure_releases_images_saved_for_the_batch(fake_db, make_school, asset_store, png_base64):
    rows = five_rows(guardianContact="")
    rows[0]["studentImage"] = png_base64
    with pytest.raises(ValidationError):
        run(import_students(fake_db, make_school(), rows, asset_store))
    saved = [name for _, _, files in os.walk(asset_store.root) for name in files]
    assert saved == []


def test_capacity_uses_submitted_row_count(fake_db, make_school, asset_store):
    school = make_school(students_allowed=100, current_count=96)
    with pytest.raises(CapacityExceededError) as exc_info:
        run(import_students(fake_db, school, five_rows(), asset_store))
    assert "Current count: 96" in exc_info.value.message
    assert fake_db.count("students", school_id=school.id) == 96


def test_capacity_is_checked_before_rows_are_processed(fake_db, make_school, asset_store, png_base64):
    school = make_school(students_allowed=2)
    rows = five_rows(studentImage=png_base64)
    with pytest.raises(CapacityExceededError):
        run(import_students(fake_db, school, rows, asset_store))
    assert not os.path.exists(asset_store.root)


def test_subscription_rules_apply_to_import(fake_db, make_school, asset_store):
    with pytest.raises(NoSubscriptionError):
        run(import_students(fake_db, make_school(plan=""), five_rows(), asset_store))
    expired = make_school(expiry=datetime.now(timezone.utc) - timedelta(days=1))
    with pytest.raises(ExpiredSubscriptionError):
        run(import_students(fake_db, expired, five_rows(), asset_store))


def test_insert_failure_releases_images_and_propagates(fake_db, make_school, asset_store, png_base64):
    fake_db.fail("students", "insert")
    with pytest.raises(StorageError):
        run(import_students(fake_db, make_school(), five_rows(studentImage=png_base64), asset_store))
    saved = [name for _, _, files in os.walk(asset_store.root) for name in files]
    assert saved == []


def test_row_failure_releases_images_saved_by_other_rows(fake_db, make_school, asset_store, png_base64, monkeypatch):
    normalize_row = import_service.normalize_row

    async def failing_normalize_row(row, school_id, store):
        if row.get("name") == "Student 3":
            raise RuntimeError("row exploded")
        return await normalize_row(row, school_id, store)

    monkeypatch.setattr(import_service, "normalize_row", failing_normalize_row)
    school = make_school()
    rows = [student_row(name=f"Student {index}", studentImage=png_base64) for index in range(1, 6)]
    with pytest.raises(RuntimeError, match="row exploded"):
        run(import_students(fake_db, school, rows, asset_store))
    saved = [name for _, _, files in os.walk(asset_store.root) for name in files]
    assert saved == []
    assert fake_db.count("students", school_id=school.id) == 0


class TestUploadCleanup:
    """The temp workbook is removed on every exit path."""

    def _upload(self, rows):
        return FakeUpload(build_workbook(rows), "students.xlsx")

    def test_success(self, fake_db, make_school, asset_store, import_folder):
        result = run(import_students_from_upload(fake_db, make_school(), self._upload(five_rows()), asset_store))
        assert result.imported == 5
        assert os.listdir(import_folder) == []

    def test_validation_rejection(self, fake_db, make_school, asset_store, import_folder):
        with pytest.raises(ValidationError):
            run(import_students_from_upload(fake_db, make_school(), self._upload(five_rows(address="")), asset_store))
        assert os.listdir(import_folder) == []

    def test_capacity_rejection(self, fake_db, make_school, asset_store, import_folder):
        with pytest.raises(CapacityExceededError):
            run(import_students_from_upload(fake_db, make_school(students_allowed=1), self._upload(five_rows()), asset_store))
        assert os.listdir(import_folder) == []

    def test_unexpected_failure(self, fake_db, make_school, asset_store, import_folder):
        school = make_school()
        fake_db.fail("students", "select")
        with pytest.raises(StorageError):
            run(import_students_from_upload(fake_db, school, self._upload(five_rows()), asset_store))
        assert os.listdir(import_folder) == []

    def test_empty_sheet(self, fake_db, make_school, asset_store, import_folder):
        with pytest.raises(EmptyInputError):
            run(import_students_from_upload(fake_db, make_school(), self._upload([]), asset_store))
        assert os.listdir(import_folder) == []

    def test_corrupt_workbook(self, fake_db, make_school, asset_store, import_folder):
        upload = FakeUpload(b"this is not a zip archive", "students.xlsx")
        with pytest.raises(EmptyInputError):
            run(import_students_from_upload(fake_db, make_school(), upload, asset_store))
        assert os.listdir(import_folder) == []

    def test_non_excel_upload_is_rejected_before_saving(self, fake_db, make_school, asset_store, import_folder):
        upload = FakeUpload(b"name,grade\n", "students.csv", content_type="text/csv")
        with pytest.raises(InvalidUploadError):
            run(import_students_from_upload(fake_db, make_school(), upload, asset_store))
        assert not import_folder.exists()

    def test_partial_write_is_removed(self, fake_db, make_school, asset_store, import_folder, monkeypatch):
        def write_then_fail(path, content):
            with open(path, "wb") as f:
                f.write(content[:10])
            raise OSError("No space left on device")

        monkeypatch.setattr(import_service, "_write_temp_upload", write_then_fail)
        with pytest.raises(OSError, match="No space left"):
            run(import_students_from_upload(fake_db, make_school(), self._upload(five_rows()), asset_store))
        assert os.listdir(import_folder) == []
