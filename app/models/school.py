from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class School(BaseModel):
    """A tenant. Never carries the password hash."""
    id: str
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    school_logo: Optional[str] = None
    subscription_plan: Optional[str] = None
    license_code: Optional[str] = None
    students_allowed: int = 0
    subscription_expiry: Optional[datetime] = None

class LoginPayload(BaseModel):
    email: str
    password: str
