import asyncio
import os
import secrets
import time
from collections.abc import Mapping
from typing import Any, List, Sequence

from fastapi.concurrency import run_in_threadpool

from app import config
from app.core.errors import EmptyInputError, InvalidUploadError, StorageError, ValidationError
from app.models.school import School
from app.models.student import ImportResult, NormalizedRecord
from app.repositories.students_repository import count_students_by_school_db, insert_students_db
from app.services.capacity_service import enforce_capacity
from app.services.image_service import release_asset
from app.services.normalizer_service import normalize_row
from app.utils.log_utils import log_debug
from app.utils.spreadsheet import XLSX_MIME_TYPE, SpreadsheetFormatError, parse_rows
from app.utils.storage import LocalAssetStore

async def _release_materialized(records: List[NormalizedRecord], asset_store: LocalAssetStore):
    for record in records:
        if record.image_materialized:
            await release_asset(record.student_image, asset_store)

async def import_students(supabase_client, school: School, raw_rows: Sequence[Any],
                          asset_store: LocalAssetStore) -> ImportResult:
    """
    Import a batch of spreadsheet rows for ``school``, all or nothing.

    Capacity is checked against the submitted row count before any row is
    processed. Every row is then normalized so that all invalid rows can be
    reported together; if any is invalid nothing is written and images saved
    for this batch are removed again. Valid batches go in as one insert.
    """
    if not isinstance(raw_rows, (list, tuple)) or not raw_rows \
            or not all(isinstance(row, Mapping) for row in raw_rows):
        raise EmptyInputError()

    current_count = count_students_by_school_db(supabase_client, school.id)
    enforce_capacity(school, current_count, len(raw_rows))

    outcomes = await asyncio.gather(*(normalize_row(row, school.id, asset_store) for row in raw_rows),
                                    return_exceptions=True)
    records = [outcome for outcome in outcomes if isinstance(outcome, NormalizedRecord)]
    failures = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
    if failures:
        await _release_materialized(records, asset_store)
        log_debug(f"Row normalization failed for school {school.id}: {failures[0]!r}", service="imports")
        raise failures[0]

    invalid = [record.display_name for record in records if not record.is_valid]
    if invalid:
        await _release_materialized(records, asset_store)
        log_debug(f"Rejected import for school {school.id}: {len(invalid)} invalid rows",
                  invalid, service="imports")
        raise ValidationError(invalid_students=invalid)

    try:
        insert_students_db(supabase_client, [record.to_student_row(school.id) for record in records])
    except StorageError:
        await _release_materialized(records, asset_store)
        raise

    total = current_count + len(records)
    log_debug(f"Imported {len(records)} students for school {school.id}", service="imports")
    return ImportResult(
        imported=len(records),
        total_students=total,
        remaining_slots=school.students_allowed - total,
    )

def _is_xlsx(upload) -> bool:
    filename = (upload.filename or "").lower()
    return upload.content_type == XLSX_MIME_TYPE or filename.endswith(".xlsx")

def _new_temp_path() -> str:
    os.makedirs(config.IMPORT_FOLDER, exist_ok=True)
    return os.path.join(config.IMPORT_FOLDER, f"{int(time.time() * 1000)}-{secrets.token_hex(8)}.xlsx")

def _write_temp_upload(path: str, content: bytes):
    with open(path, "wb") as f:
        f.write(content)

def _remove_temp_upload(path: str):
    if os.path.exists(path):
        os.remove(path)

async def import_students_from_upload(supabase_client, school: School, upload,
                                      asset_store: LocalAssetStore) -> ImportResult:
    """Save the uploaded workbook, import its rows and always remove the temp file."""
    if upload is None or not _is_xlsx(upload):
        raise InvalidUploadError()

    content = await upload.read()
    temp_file_path = await run_in_threadpool(_new_temp_path)
    try:
        await run_in_threadpool(_write_temp_upload, temp_file_path, content)
        try:
            raw_rows = await run_in_threadpool(parse_rows, temp_file_path)
        except SpreadsheetFormatError as e:
            log_debug(f"Unreadable workbook {upload.filename}: {e}", service="imports")
            raise EmptyInputError() from e
        return await import_students(supabase_client, school, raw_rows, asset_store)
    finally:
        await run_in_threadpool(_remove_temp_upload, temp_file_path)
