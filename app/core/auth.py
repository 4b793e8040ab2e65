from fastapi import Depends, Request, HTTPException
from jose import jwt, JWTError

from app import config
from app.core.clients import get_supabase_client
from app.models.school import School
from app.repositories.schools_repository import get_school_by_id_db
from app.utils.log_utils import log_debug

def get_jwt_secret() -> str:
    if not config.JWT_SECRET:
        raise ValueError("Missing required JWT_SECRET environment variable")
    return config.JWT_SECRET

async def get_current_school(request: Request, supabase_client=Depends(get_supabase_client)) -> School:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        log_debug("❌ Missing or invalid Authorization header", service="auth")
        raise HTTPException(status_code=401, detail="Access denied. No token provided.")
    token = auth_header.split(" ", 1)[1]
    try:
        payload = jwt.decode(token, get_jwt_secret(), algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        log_debug("❌ Invalid or expired token", service="auth")
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    school_id = payload.get("sub")
    if not school_id:
        log_debug("❌ School ID not found in token", service="auth")
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    school = get_school_by_id_db(supabase_client, school_id)
    if not school:
        log_debug(f"❌ Token for unknown school {school_id}", service="auth")
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return School.model_validate(school)
