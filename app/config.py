# app/config.py
import os
from types import MappingProxyType
from typing import NamedTuple
from dotenv import load_dotenv

# Load environment variables
if os.path.exists(".env"):
    load_dotenv(dotenv_path=".env")
else:
    print("ℹ️ Info: .env file not found. Relying on system environment variables.")

# Supabase Configuration
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

# Token Configuration
JWT_SECRET = os.getenv("JWT_SECRET")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

# File Storage Configuration
UPLOAD_ROOT = os.environ.get("UPLOAD_ROOT", "uploads")
IMPORT_FOLDER = os.environ.get("IMPORT_FOLDER", os.path.join(UPLOAD_ROOT, "imports"))
STUDENT_IMAGE_FOLDER = "studentImages"
SCHOOL_LOGO_FOLDER = "schoolLogos"
DEFAULT_STUDENT_IMAGE = os.environ.get("DEFAULT_STUDENT_IMAGE", f"{STUDENT_IMAGE_FOLDER}/default.png")

LOG_DIR = os.environ.get("LOG_DIR", "logs")

# CORS Configuration
_origins = os.getenv("ALLOWED_ORIGINS")
if _origins:
    ALLOWED_ORIGINS = [origin.strip() for origin in _origins.split(",") if origin.strip()]
else:
    ALLOWED_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]


class Plan(NamedTuple):
    name: str
    students_allowed: int
    duration_years: int


# Subscription plans, keyed by the name a school picks at signup
PLANS = MappingProxyType({
    "Beginner": Plan("Beginner", 100, 1),
    "Intermediate": Plan("Intermediate", 500, 1),
    "Standard": Plan("Standard", 1000, 1),
})
