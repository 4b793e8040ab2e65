import asyncio
import base64
import io
import os
import tempfile
import threading
import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone

import pytest

_TEST_ROOT = tempfile.mkdtemp(prefix="roster-tests-")
os.environ["UPLOAD_ROOT"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["LOG_DIR"] = os.path.join(_TEST_ROOT, "logs")
os.environ["JWT_SECRET"] = "test-secret"

import openpyxl  # noqa: E402
from PIL import Image  # noqa: E402

from app import config  # noqa: E402
from app.models.school import School  # noqa: E402
from app.utils.spreadsheet import XLSX_MIME_TYPE  # noqa: E402
from app.utils.storage import LocalAssetStore  # noqa: E402


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table_name = table
        self.operation = "select"
        self.count_mode = None
        self.payload = None
        self.filters = []

    def select(self, columns="*", count=None):
        self.operation = "select"
        self.count_mode = count
        return self

    def insert(self, records):
        self.operation = "insert"
        self.payload = records
        return self

    def update(self, values):
        self.operation = "update"
        self.payload = values
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def execute(self):
        return self.db.execute(self)


class FakeSupabase:
    """In-memory stand-in for the supabase client's table query builder."""

    def __init__(self):
        self.tables = defaultdict(list)
        self.failures = set()
        self.after_count = None
        self._lock = threading.Lock()

    def table(self, name):
        return FakeQuery(self, name)

    def fail(self, table, operation):
        self.failures.add((table, operation))

    def _matches(self, row, filters):
        return all(str(row.get(column)) == str(value) for column, value in filters)

    def execute(self, query):
        if (query.table_name, query.operation) in self.failures:
            raise RuntimeError(f"{query.operation} on {query.table_name} failed")

        with self._lock:
            rows = self.tables[query.table_name]
            matched = [row for row in rows if self._matches(row, query.filters)]

            if query.operation == "select":
                response = FakeResponse([dict(row) for row in matched],
                                        len(matched) if query.count_mode else None)
            elif query.operation == "insert":
                records = query.payload if isinstance(query.payload, list) else [query.payload]
                inserted = []
                for record in records:
                    row = {"id": str(uuid.uuid4()), **record}
                    rows.append(row)
                    inserted.append(dict(row))
                response = FakeResponse(inserted)
            elif query.operation == "update":
                for row in matched:
                    row.update(query.payload)
                response = FakeResponse([dict(row) for row in matched])
            else:
                self.tables[query.table_name] = [row for row in rows if row not in matched]
                response = FakeResponse([dict(row) for row in matched])

        if query.operation == "select" and query.count_mode and self.after_count:
            self.after_count()
        return response

    def count(self, table, **filters):
        return len([row for row in self.tables[table] if self._matches(row, filters.items())])


class FakeUpload:
    def __init__(self, content: bytes, filename: str, content_type: str = XLSX_MIME_TYPE):
        self.content = content
        self.filename = filename
        self.content_type = content_type

    async def read(self):
        return self.content


def run(coro):
    return asyncio.run(coro)


def build_workbook(rows, headers=None) -> bytes:
    headers = headers or ["name", "grade", "dob", "bloodGroup", "guardianContact", "address", "studentImage"]
    workbook = openpyxl.Workbook()
    worksheet = workbook.active
    worksheet.append(headers)
    for row in rows:
        worksheet.append([row.get(header) for header in headers])
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def student_row(name="Asha Rao", **overrides):
    row = {
        "name": name,
        "grade": "7",
        "dob": "2012-04-03",
        "bloodGroup": "B+",
        "guardianContact": "9876543210",
        "address": "12 Lake Road",
    }
    row.update(overrides)
    return row


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def asset_store(tmp_path):
    return LocalAssetStore(str(tmp_path / "uploads"))


@pytest.fixture
def import_folder(tmp_path, monkeypatch):
    folder = tmp_path / "imports"
    monkeypatch.setattr(config, "IMPORT_FOLDER", str(folder))
    return folder


@pytest.fixture
def png_base64():
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color=(200, 30, 30)).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode()


@pytest.fixture
def png_bytes(png_base64):
    return base64.b64decode(png_base64)


@pytest.fixture
def make_school(fake_db):
    def _make_school(plan="Beginner", students_allowed=100, current_count=0,
                     expiry=None, email=None):
        school_id = str(uuid.uuid4())
        expiry = expiry or datetime.now(timezone.utc) + timedelta(days=365)
        row = {
            "id": school_id,
            "name": "Green Valley School",
            "email": email or f"{school_id[:8]}@school.test",
            "password": "",
            "phone": "555-0100",
            "address": "1 School Lane",
            "school_logo": None,
            "subscription_plan": plan,
            "license_code": "LIC-abc123xyz",
            "students_allowed": students_allowed,
            "subscription_expiry": expiry.isoformat(),
        }
        fake_db.tables["schools"].append(row)
        for index in range(current_count):
            fake_db.tables["students"].append({
                "id": str(uuid.uuid4()),
                "school_id": school_id,
                **_student_columns(f"Existing {index}"),
                "student_image": config.DEFAULT_STUDENT_IMAGE,
            })
        return School.model_validate(row)
    return _make_school


def _student_columns(name):
    return {
        "name": name,
        "grade": "5",
        "dob": "2014-01-01",
        "blood_group": "O+",
        "guardian_contact": "5550000",
        "address": "Somewhere",
    }
