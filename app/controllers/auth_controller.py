from fastapi.responses import JSONResponse
from app.services.auth_service import login_service, signup_service

async def signup_controller(supabase_client, payload: dict, logo, asset_store):
    result = await signup_service(supabase_client, payload, logo, asset_store)
    return JSONResponse(status_code=201, content=result)

async def login_controller(supabase_client, credentials):
    return await login_service(supabase_client, credentials.email, credentials.password)
