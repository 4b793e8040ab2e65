from typing import Any, Dict, Optional
from app.utils.db_utils import safe_db_operation

SCHOOLS_TABLE = "schools"

@safe_db_operation("Get school")
def get_school_by_id_db(supabase_client, school_id: str) -> Optional[Dict[str, Any]]:
    response = supabase_client.table(SCHOOLS_TABLE).select("*").eq("id", school_id).execute()
    return response.data[0] if response.data else None

@safe_db_operation("Get school by email")
def get_school_by_email_db(supabase_client, email: str) -> Optional[Dict[str, Any]]:
    response = supabase_client.table(SCHOOLS_TABLE).select("*").eq("email", email).execute()
    return response.data[0] if response.data else None

@safe_db_operation("Insert school")
def insert_school_db(supabase_client, school_data: Dict[str, Any]) -> Dict[str, Any]:
    response = supabase_client.table(SCHOOLS_TABLE).insert(school_data).execute()
    return response.data[0]
