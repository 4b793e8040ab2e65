from pydantic import BaseModel
from typing import Literal

CapacityReason = Literal["ok", "no subscription", "subscription expired", "limit exceeded"]

class CapacityDecision(BaseModel):
    admissible: bool
    reason: CapacityReason
    message: str = ""
