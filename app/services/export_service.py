from app.models.school import School
from app.models.student import Student
from app.repositories.students_repository import list_students_by_school_db
from app.utils.log_utils import log_debug
from app.utils.spreadsheet import EXPORT_COLUMNS, TEMPLATE_COLUMNS, render_rows

TEMPLATE_EXAMPLE_ROW = {
    "name": "Example Student",
    "grade": "10",
    "dob": "2000-01-01",
    "bloodGroup": "O+",
    "guardianContact": "1234567890",
    "address": "Example Address",
    "studentImage": "Base64 image string here",
}

async def export_students_service(supabase_client, school: School) -> bytes:
    students = list_students_by_school_db(supabase_client, school.id) or []
    rows = [Student.model_validate(student).to_spreadsheet_row() for student in students]
    log_debug(f"Exporting {len(rows)} students for school {school.id}", service="students")
    return render_rows(rows, EXPORT_COLUMNS, sheet_title="Students")

async def import_template_service() -> bytes:
    return render_rows([TEMPLATE_EXAMPLE_ROW], TEMPLATE_COLUMNS, sheet_title="Template")
