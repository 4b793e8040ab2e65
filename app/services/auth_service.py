import secrets
import string
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException
from jose import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from app import config
from app.core.auth import get_jwt_secret
from app.core.errors import StorageError
from app.models.school import School
from app.repositories.schools_repository import get_school_by_email_db, insert_school_db
from app.services.capacity_service import resolve_plan, subscription_terms
from app.services.image_service import release_asset, store_uploaded_image
from app.utils.log_utils import log_debug
from app.utils.storage import LocalAssetStore

LICENSE_ALPHABET = string.ascii_lowercase + string.digits

def generate_license_code() -> str:
    return "LIC-" + "".join(secrets.choice(LICENSE_ALPHABET) for _ in range(9))

def create_access_token(school_id: str) -> str:
    expires = datetime.now(timezone.utc) + timedelta(minutes=config.JWT_EXPIRES_MINUTES)
    return jwt.encode({"sub": str(school_id), "exp": expires}, get_jwt_secret(), algorithm=config.JWT_ALGORITHM)

async def signup_service(supabase_client, payload: dict, logo, asset_store: LocalAssetStore, plans=config.PLANS):
    plan = resolve_plan(payload.get("subscription_plan"), plans)
    if plan is None:
        log_debug(f"Signup rejected, unknown plan: {payload.get('subscription_plan')}", service="auth")
        raise HTTPException(status_code=400, detail="Invalid subscription plan selected.")

    email = payload["email"].strip().lower()
    if get_school_by_email_db(supabase_client, email):
        log_debug(f"Signup rejected, email already registered: {email}", service="auth")
        raise HTTPException(status_code=400, detail="Email already registered")

    school_logo = None
    if logo is not None and logo.filename:
        school_logo = await store_uploaded_image(logo, config.SCHOOL_LOGO_FOLDER, None, asset_store)

    terms = subscription_terms(plan)
    license_code = generate_license_code()
    school_data = {
        "name": payload["name"],
        "email": email,
        "password": generate_password_hash(payload["password"]),
        "phone": payload["phone"],
        "address": payload["address"],
        "school_logo": school_logo,
        "license_code": license_code,
        **terms,
        "subscription_expiry": terms["subscription_expiry"].isoformat(),
    }
    try:
        school = insert_school_db(supabase_client, school_data)
    except StorageError:
        await release_asset(school_logo, asset_store)
        raise

    log_debug(f"School registered: {school.get('id')} on plan {plan.name}", service="auth")
    return {"message": "School registered successfully!", "license_code": license_code}

async def login_service(supabase_client, email: str, password: str):
    log_debug("Login attempt for:", email, service="auth")
    school = get_school_by_email_db(supabase_client, email.strip().lower())
    if not school:
        raise HTTPException(status_code=404, detail="School not found")

    if not check_password_hash(school.get("password") or "", password):
        log_debug("Login failed: invalid credentials", email, service="auth")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    profile = School.model_validate(school)
    log_debug("Login successful", profile.id, service="auth")
    return {
        "token": create_access_token(profile.id),
        "school": {
            "name": profile.name,
            "email": profile.email,
            "phone": profile.phone,
            "address": profile.address,
            "logo_url": profile.school_logo,
        },
    }
