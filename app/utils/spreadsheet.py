import io
import zipfile
from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Union

import openpyxl
from openpyxl.styles import Font
from openpyxl.utils.exceptions import InvalidFileException

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Column order shared by export and the import template
EXPORT_COLUMNS = ["name", "grade", "dob", "bloodGroup", "guardianContact", "address"]
IMAGE_COLUMN = "studentImage"
TEMPLATE_COLUMNS = EXPORT_COLUMNS + [IMAGE_COLUMN]


class SpreadsheetFormatError(ValueError):
    """Raised when the uploaded bytes are not a readable .xlsx workbook."""


def _cell_to_text(value: Any) -> Any:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    return value


def parse_rows(source: Union[str, bytes]) -> List[Dict[str, Any]]:
    """
    Read the first worksheet of an .xlsx workbook into a list of dicts.

    The first row is the header. Fully blank rows are skipped, empty cells are
    left out of the row dict, and numbers and dates are converted to text the
    way they would read in the sheet.
    """
    handle = io.BytesIO(source) if isinstance(source, bytes) else source
    try:
        workbook = openpyxl.load_workbook(handle, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise SpreadsheetFormatError(str(e)) from e

    try:
        if not workbook.worksheets:
            return []
        rows = workbook.worksheets[0].iter_rows(values_only=True)
        header_row = next(rows, None)
        if header_row is None:
            return []
        headers = [str(cell).strip() if cell is not None else "" for cell in header_row]

        records = []
        for row in rows:
            record = {}
            for header, value in zip(headers, row):
                if not header or value is None or value == "":
                    continue
                record[header] = _cell_to_text(value)
            if record:
                records.append(record)
        return records
    finally:
        workbook.close()


def render_rows(records: Iterable[Mapping[str, Any]], columns: Sequence[str], sheet_title: str = "Sheet1") -> bytes:
    workbook = openpyxl.Workbook()
    worksheet = workbook.active
    worksheet.title = sheet_title

    worksheet.append(list(columns))
    for cell in worksheet[1]:
        cell.font = Font(bold=True)

    for record in records:
        worksheet.append([record.get(column, "") for column in columns])

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
