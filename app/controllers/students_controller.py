from fastapi import Response
from fastapi.responses import JSONResponse
from app.services.students_service import (
    add_student,
    list_students,
    update_student,
    delete_student
)
from app.services.import_service import import_students_from_upload
from app.services.export_service import export_students_service, import_template_service
from app.utils.spreadsheet import XLSX_MIME_TYPE

def _xlsx_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MIME_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )

async def add_student_controller(supabase_client, school, payload: dict, image, asset_store):
    student = await add_student(supabase_client, school, payload, image, asset_store)
    return JSONResponse(status_code=201, content={
        "message": "Student added successfully!",
        "student": student.model_dump(),
    })

async def list_students_controller(supabase_client, school):
    return await list_students(supabase_client, school)

async def update_student_controller(supabase_client, school, student_id: str, payload: dict, image, asset_store):
    student = await update_student(supabase_client, school, student_id, payload, image, asset_store)
    return {"message": "Student updated successfully!", "student": student.model_dump()}

async def delete_student_controller(supabase_client, school, student_id: str, asset_store):
    await delete_student(supabase_client, school, student_id, asset_store)
    return {"message": "Student deleted successfully!"}

async def import_students_controller(supabase_client, school, upload, asset_store):
    result = await import_students_from_upload(supabase_client, school, upload, asset_store)
    return JSONResponse(status_code=201, content={
        "message": "Students imported successfully!",
        **result.model_dump(),
    })

async def export_students_controller(supabase_client, school):
    return _xlsx_response(await export_students_service(supabase_client, school), "students.xlsx")

async def import_template_controller():
    return _xlsx_response(await import_template_service(), "import-template.xlsx")
