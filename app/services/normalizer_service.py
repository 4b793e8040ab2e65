from typing import Any, Mapping

from app import config
from app.core.errors import DecodeError
from app.models.student import SPREADSHEET_FIELDS, NormalizedRecord
from app.services.image_service import materialize_image
from app.utils.log_utils import log_debug
from app.utils.spreadsheet import IMAGE_COLUMN
from app.utils.storage import LocalAssetStore

def _text(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()

async def normalize_row(raw_row: Mapping[str, Any], school_id: str, asset_store: LocalAssetStore) -> NormalizedRecord:
    """
    Turn one untyped import row into a NormalizedRecord. Never raises.

    Absent or non-text fields become empty strings and are listed in
    ``missing_fields``. An image that fails to decode or save is logged and
    replaced by the default image; it does not make the row invalid.
    """
    if not isinstance(raw_row, Mapping):
        raw_row = {}

    values = {field: _text(raw_row.get(column)) for column, field in SPREADSHEET_FIELDS.items()}
    missing = [column for column, field in SPREADSHEET_FIELDS.items() if not values[field]]

    student_image = config.DEFAULT_STUDENT_IMAGE
    materialized = False
    payload = raw_row.get(IMAGE_COLUMN)
    if isinstance(payload, str) and payload.strip():
        try:
            student_image = await materialize_image(payload, school_id, asset_store)
            materialized = True
        except (DecodeError, OSError) as e:
            log_debug(f"Error saving image for student {values['name'] or 'Unnamed student'}: {e}",
                      service="imports")

    return NormalizedRecord(
        **values,
        student_image=student_image,
        image_materialized=materialized,
        missing_fields=missing,
    )
