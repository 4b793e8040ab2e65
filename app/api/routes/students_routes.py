from fastapi import APIRouter, Depends, File, Form, UploadFile
from app.controllers.students_controller import (
    add_student_controller,
    list_students_controller,
    update_student_controller,
    delete_student_controller,
    import_students_controller,
    export_students_controller,
    import_template_controller
)
from app.core.auth import get_current_school
from app.core.clients import get_supabase_client
from app.utils.storage import get_asset_store

router = APIRouter(prefix="/api/students", tags=["Students"])

@router.post("")
async def add_student(
    name: str = Form(""),
    grade: str = Form(""),
    dob: str = Form(""),
    blood_group: str = Form(""),
    guardian_contact: str = Form(""),
    address: str = Form(""),
    student_image: UploadFile = File(None),
    school=Depends(get_current_school),
    supabase_client=Depends(get_supabase_client),
    asset_store=Depends(get_asset_store)
):
    payload = {
        "name": name,
        "grade": grade,
        "dob": dob,
        "blood_group": blood_group,
        "guardian_contact": guardian_contact,
        "address": address,
    }
    return await add_student_controller(supabase_client, school, payload, student_image, asset_store)

@router.get("")
async def list_students(school=Depends(get_current_school), supabase_client=Depends(get_supabase_client)):
    return await list_students_controller(supabase_client, school)

@router.post("/import")
async def import_students(
    excel_file: UploadFile = File(None),
    school=Depends(get_current_school),
    supabase_client=Depends(get_supabase_client),
    asset_store=Depends(get_asset_store)
):
    return await import_students_controller(supabase_client, school, excel_file, asset_store)

@router.get("/export")
async def export_students(school=Depends(get_current_school), supabase_client=Depends(get_supabase_client)):
    return await export_students_controller(supabase_client, school)

@router.get("/import-template")
async def import_template(school=Depends(get_current_school)):
    return await import_template_controller()

@router.put("/{student_id}")
async def update_student(
    student_id: str,
    name: str = Form(""),
    grade: str = Form(""),
    dob: str = Form(""),
    blood_group: str = Form(""),
    guardian_contact: str = Form(""),
    address: str = Form(""),
    student_image: UploadFile = File(None),
    school=Depends(get_current_school),
    supabase_client=Depends(get_supabase_client),
    asset_store=Depends(get_asset_store)
):
    payload = {
        "name": name,
        "grade": grade,
        "dob": dob,
        "blood_group": blood_group,
        "guardian_contact": guardian_contact,
        "address": address,
    }
    return await update_student_controller(supabase_client, school, student_id, payload, student_image, asset_store)

@router.delete("/{student_id}")
async def delete_student(
    student_id: str,
    school=Depends(get_current_school),
    supabase_client=Depends(get_supabase_client),
    asset_store=Depends(get_asset_store)
):
    return await delete_student_controller(supabase_client, school, student_id, asset_store)
