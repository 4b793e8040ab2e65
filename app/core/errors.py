from typing import Any, Dict, List, Optional


class RosterError(Exception):
    """Base class for errors that map onto a client-facing status code."""
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_content(self) -> Dict[str, Any]:
        return {"error": self.message}


class NoSubscriptionError(RosterError):
    status_code = 403
    default_message = "No subscription plan found. Please select a plan to add students."


class ExpiredSubscriptionError(RosterError):
    status_code = 403
    default_message = "Subscription expired. Please renew your plan to add more students."


class CapacityExceededError(RosterError):
    status_code = 403
    default_message = "Student limit reached."


class EmptyInputError(RosterError):
    status_code = 400
    default_message = "Invalid data format or empty file"


class InvalidUploadError(RosterError):
    status_code = 400
    default_message = "Please upload an Excel file (.xlsx)"


class ValidationError(RosterError):
    status_code = 400
    default_message = "Some students have missing required fields"

    def __init__(self, message: Optional[str] = None, invalid_students: Optional[List[str]] = None):
        super().__init__(message)
        self.invalid_students = invalid_students or []

    def to_content(self) -> Dict[str, Any]:
        content = super().to_content()
        if self.invalid_students:
            content["invalid_students"] = self.invalid_students
        return content


class NotFoundError(RosterError):
    status_code = 404
    default_message = "Student not found"


class DecodeError(RosterError):
    status_code = 400
    default_message = "Image payload is not a valid base64-encoded image"


class StorageError(RosterError):
    status_code = 500
    default_message = "Storage operation failed"
