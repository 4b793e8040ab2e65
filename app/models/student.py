from pydantic import BaseModel, Field
from typing import Any, Dict, List

# Spreadsheet column -> students table column, in export order
SPREADSHEET_FIELDS = {
    "name": "name",
    "grade": "grade",
    "dob": "dob",
    "bloodGroup": "blood_group",
    "guardianContact": "guardian_contact",
    "address": "address",
}
TEXT_FIELDS = list(SPREADSHEET_FIELDS.values())

UNNAMED_STUDENT = "Unnamed student"

class Student(BaseModel):
    id: str
    school_id: str
    name: str = ""
    grade: str = ""
    dob: str = ""
    blood_group: str = ""
    guardian_contact: str = ""
    address: str = ""
    student_image: str = ""

    def to_spreadsheet_row(self) -> Dict[str, Any]:
        return {column: getattr(self, field) for column, field in SPREADSHEET_FIELDS.items()}

class NormalizedRecord(BaseModel):
    """An import row after defaulting and image materialization, before validation."""
    name: str = ""
    grade: str = ""
    dob: str = ""
    blood_group: str = ""
    guardian_contact: str = ""
    address: str = ""
    student_image: str
    image_materialized: bool = False
    missing_fields: List[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.missing_fields

    @property
    def display_name(self) -> str:
        return self.name or UNNAMED_STUDENT

    def to_student_row(self, school_id: str) -> Dict[str, Any]:
        row = {field: getattr(self, field) for field in TEXT_FIELDS}
        row["school_id"] = school_id
        row["student_image"] = self.student_image
        return row

class ImportResult(BaseModel):
    imported: int
    total_students: int
    remaining_slots: int
