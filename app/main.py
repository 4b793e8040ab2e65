import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from app.api.routes import auth_router, students_router
from app.config import ALLOWED_ORIGINS, UPLOAD_ROOT
from app.core.error_handling import register_exception_handlers

app = FastAPI(title="School Roster API")

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600,
)

app.include_router(auth_router)
app.include_router(students_router)

os.makedirs(UPLOAD_ROOT, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=UPLOAD_ROOT), name="uploads")

@app.get("/")
async def root():
    """Root endpoint for health check."""
    return {
        "message": "School Roster API is running",
        "status": "healthy",
        "version": "1.0.0"
    }
