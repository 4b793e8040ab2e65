import uuid
from typing import Any, Dict

from app import config
from app.core.errors import NotFoundError, StorageError, ValidationError
from app.models.school import School
from app.models.student import TEXT_FIELDS, Student
from app.repositories.students_repository import (
    count_students_by_school_db,
    delete_student_db,
    get_student_for_school_db,
    insert_students_db,
    list_students_by_school_db,
    update_student_db,
)
from app.services.capacity_service import enforce_capacity
from app.services.image_service import release_asset, store_uploaded_image
from app.utils.log_utils import log_debug
from app.utils.storage import LocalAssetStore

def _clean(payload: Dict[str, Any]) -> Dict[str, str]:
    return {field: (payload.get(field) or "").strip() for field in TEXT_FIELDS}

def _find_owned_student(supabase_client, school: School, student_id: str) -> Dict[str, Any]:
    try:
        uuid.UUID(str(student_id))
    except ValueError:
        raise NotFoundError()
    student = get_student_for_school_db(supabase_client, school.id, student_id)
    if not student:
        raise NotFoundError()
    return student

async def add_student(supabase_client, school: School, payload: Dict[str, Any], image,
                      asset_store: LocalAssetStore) -> Student:
    values = _clean(payload)
    missing = [field for field, value in values.items() if not value]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    current_count = count_students_by_school_db(supabase_client, school.id)
    enforce_capacity(school, current_count, 1)

    student_image = config.DEFAULT_STUDENT_IMAGE
    if image is not None and image.filename:
        student_image = await store_uploaded_image(image, config.STUDENT_IMAGE_FOLDER, school.id, asset_store)

    try:
        created = insert_students_db(supabase_client, [{
            **values,
            "school_id": school.id,
            "student_image": student_image,
        }])
    except StorageError:
        await release_asset(student_image, asset_store)
        raise

    log_debug(f"Student added for school {school.id} ({current_count + 1}/{school.students_allowed})",
              service="students")
    return Student.model_validate(created[0])

async def list_students(supabase_client, school: School) -> Dict[str, Any]:
    students = list_students_by_school_db(supabase_client, school.id) or []
    return {
        "school": school.model_dump(mode="json"),
        "students": [Student.model_validate(student).model_dump() for student in students],
    }

async def update_student(supabase_client, school: School, student_id: str, payload: Dict[str, Any],
                         image, asset_store: LocalAssetStore) -> Student:
    """
    Update an owned student. Only non-empty fields replace stored values.

    A new image is stored and referenced before the previous one is removed,
    so the record always points at an existing asset.
    """
    existing = _find_owned_student(supabase_client, school, student_id)

    values = {field: value for field, value in _clean(payload).items() if value}
    new_image = None
    if image is not None and image.filename:
        new_image = await store_uploaded_image(image, config.STUDENT_IMAGE_FOLDER, school.id, asset_store)
        values["student_image"] = new_image

    if not values:
        return Student.model_validate(existing)

    try:
        updated = update_student_db(supabase_client, school.id, student_id, values)
    except StorageError:
        await release_asset(new_image, asset_store)
        raise
    if not updated:
        await release_asset(new_image, asset_store)
        raise NotFoundError()

    if new_image:
        await release_asset(existing.get("student_image"), asset_store)

    log_debug(f"Student {student_id} updated for school {school.id}", sorted(values), service="students")
    return Student.model_validate(updated)

async def delete_student(supabase_client, school: School, student_id: str, asset_store: LocalAssetStore) -> bool:
    existing = _find_owned_student(supabase_client, school, student_id)
    delete_student_db(supabase_client, school.id, student_id)
    released = await release_asset(existing.get("student_image"), asset_store)
    log_debug(f"Student {student_id} deleted for school {school.id}", service="students")
    return released
