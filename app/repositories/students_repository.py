from typing import Any, Dict, List, Optional
from app.utils.db_utils import safe_db_operation

STUDENTS_TABLE = "students"

@safe_db_operation("Count school students")
def count_students_by_school_db(supabase_client, school_id: str) -> int:
    response = supabase_client.table(STUDENTS_TABLE) \
        .select("id", count="exact") \
        .eq("school_id", school_id) \
        .execute()
    return response.count or 0

@safe_db_operation("Insert students")
def insert_students_db(supabase_client, records: List[Dict[str, Any]]):
    """Batch insert in a single request."""
    return supabase_client.table(STUDENTS_TABLE).insert(records).execute()

@safe_db_operation("Get school student")
def get_student_for_school_db(supabase_client, school_id: str, student_id: str) -> Optional[Dict[str, Any]]:
    """Id and owner are matched in one query so foreign students look absent."""
    response = supabase_client.table(STUDENTS_TABLE) \
        .select("*") \
        .eq("id", student_id) \
        .eq("school_id", school_id) \
        .execute()
    return response.data[0] if response.data else None

@safe_db_operation("List school students")
def list_students_by_school_db(supabase_client, school_id: str):
    return supabase_client.table(STUDENTS_TABLE).select("*").eq("school_id", school_id).execute()

@safe_db_operation("Update school student")
def update_student_db(supabase_client, school_id: str, student_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    response = supabase_client.table(STUDENTS_TABLE) \
        .update(values) \
        .eq("id", student_id) \
        .eq("school_id", school_id) \
        .execute()
    return response.data[0] if response.data else None

@safe_db_operation("Delete school student")
def delete_student_db(supabase_client, school_id: str, student_id: str):
    return supabase_client.table(STUDENTS_TABLE) \
        .delete() \
        .eq("id", student_id) \
        .eq("school_id", school_id) \
        .execute()
