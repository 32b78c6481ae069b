"""Bulk lead import from CSV."""

import csv
import io

from pydantic import ValidationError as PydanticValidationError

from eventdesk.core.errors import ValidationError
from eventdesk.core.logging import get_logger
from eventdesk.models import LeadStatus
from eventdesk.schemas import LeadDetails

logger = get_logger(__name__)

NAME_COLUMNS = ("name", "main_contact")
OPTIONAL_COLUMNS = (
    "email",
    "phone_number",
    "school",
    "fraternity",
    "instagram_handle",
    "notes",
    "election_date",
)


def normalize_header(header: str) -> str:
    """Lower-case, trim, and replace spaces with underscores."""
    return header.strip().lower().replace(" ", "_")


def _parse_status(raw: str | None) -> LeadStatus:
    """Match a status cell case-insensitively; unknown values become General."""
    if not raw:
        return LeadStatus.GENERAL
    for status in LeadStatus:
        if status.value.lower() == raw.strip().lower():
            return status
    return LeadStatus.GENERAL


def parse_leads_csv(content: str | bytes) -> list[LeadDetails]:
    """Parse an uploaded CSV into lead records.

    Requires a `name` or `main_contact` column. Empty cells become None and
    rows without a name are dropped.

    Raises:
        ValidationError: If the file is not UTF-8 or not valid CSV, the name
            column is missing, or no row is usable.
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ValidationError(
                'CSV file must be UTF-8 encoded; re-export it as "CSV UTF-8".'
            ) from exc

    try:
        return _read_leads(content)
    except csv.Error as exc:
        raise ValidationError(f"Could not read CSV file: {exc}") from exc


def _read_leads(content: str) -> list[LeadDetails]:
    reader = csv.DictReader(io.StringIO(content))
    if reader.fieldnames is None:
        raise ValidationError("CSV file is empty")
    reader.fieldnames = [normalize_header(name) for name in reader.fieldnames]

    if not any(column in reader.fieldnames for column in NAME_COLUMNS):
        raise ValidationError(
            "Missing required CSV header: 'name' or 'main_contact'."
        )

    leads: list[LeadDetails] = []
    for line_number, row in enumerate(reader, start=2):
        cells = {key: (value or "").strip() for key, value in row.items() if key}
        name = cells.get("name") or cells.get("main_contact") or ""
        if not name:
            continue
        try:
            leads.append(
                LeadDetails(
                    name=name,
                    status=_parse_status(cells.get("status")),
                    **{column: cells.get(column) or None for column in OPTIONAL_COLUMNS},
                )
            )
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid lead on line {line_number}: {exc}") from exc

    if not leads:
        raise ValidationError(
            "No valid lead data found in the CSV. Ensure 'name' or 'main_contact' is populated."
        )
    logger.info("leads_csv_parsed", count=len(leads))
    return leads
