"""
CSV import/export for storage records.

Export writes the human-readable header row below; import matches those
same headers exactly and ignores any other column.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterable
from datetime import datetime

from ashes.errors import ParseFailure, ValidationFailure
from ashes.models.record import RecordForm, StorageRecord

logger = logging.getLogger(__name__)

# (header, field) in export order
EXPORT_COLUMNS: list[tuple[str, str]] = [
    ("Storage Number", "storage_number"),
    ("Location", "location"),
    ("Deceased Name", "deceased_name"),
    ("Burial Register Number", "burial_register_number"),
    ("Renter Name", "renter_name"),
    ("Storage Start Date", "storage_start_date"),
    ("Retrieval Date", "retrieval_date"),
    ("Cremation Date", "cremation_date"),
]

NO_VALID_RECORDS = 'No valid records found in CSV. Ensure "Storage Number" and "Deceased Name" are present.'


def export_records(records: Iterable[StorageRecord]) -> str:
    """Serialize records to CSV text with a header row. Absent fields are ''."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\r\n")
    writer.writerow([header for header, _ in EXPORT_COLUMNS])
    for record in records:
        writer.writerow([getattr(record, name) or "" for _, name in EXPORT_COLUMNS])
    return buf.getvalue()


def export_filename(now: datetime | None = None) -> str:
    """Download name stamped to the minute, e.g. ashes_records_20240131_0905.csv."""
    now = now or datetime.now()
    return f"ashes_records_{now.strftime('%Y%m%d_%H%M')}.csv"


def parse_csv(text: str) -> list[dict[str, str]]:
    """
    Parse CSV text into one mapping per data row, keyed by header.

    Blank lines are skipped. Raises ParseFailure for text the csv module
    rejects or that has no header row.
    """
    text = text.removeprefix("\ufeff")
    try:
        reader = csv.DictReader(io.StringIO(text, newline=""), strict=True)
        if not reader.fieldnames:
            raise ParseFailure()
        rows = []
        for row in reader:
            if all(not (value or "").strip() for key, value in row.items() if key is not None):
                continue
            rows.append({key: value or "" for key, value in row.items() if key is not None})
    except csv.Error as e:
        logger.warning("csv_codec: parse error: %s", e)
        raise ParseFailure() from e
    return rows


def rows_to_forms(rows: Iterable[dict[str, str]]) -> list[RecordForm]:
    """
    Convert parsed rows into record forms, dropping rows without a storage
    number or deceased name. Raises ValidationFailure when nothing is left.
    """
    forms = []
    for row in rows:
        form = RecordForm(**{name: row.get(header, "") for header, name in EXPORT_COLUMNS})
        if not form.missing_fields():
            forms.append(form)
    if not forms:
        raise ValidationFailure(NO_VALID_RECORDS)
    return forms
