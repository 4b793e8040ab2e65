from fastapi import APIRouter, Depends, File, Form, UploadFile
from app.controllers.auth_controller import signup_controller, login_controller
from app.core.clients import get_supabase_client
from app.models.school import LoginPayload
from app.utils.storage import get_asset_store

router = APIRouter(prefix="/api/auth", tags=["Auth"])

@router.post("/signup")
async def signup(
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    phone: str = Form(...),
    address: str = Form(...),
    subscription_plan: str = Form(...),
    school_logo: UploadFile = File(None),
    supabase_client=Depends(get_supabase_client),
    asset_store=Depends(get_asset_store)
):
    payload = {
        "name": name,
        "email": email,
        "password": password,
        "phone": phone,
        "address": address,
        "subscription_plan": subscription_plan,
    }
    return await signup_controller(supabase_client, payload, school_logo, asset_store)

@router.post("/login")
async def login(credentials: LoginPayload, supabase_client=Depends(get_supabase_client)):
    return await login_controller(supabase_client, credentials)
