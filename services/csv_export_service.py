"""
CSV export service for the lead ledger.

Generates the CRM export: a fixed column order over all stored leads, with an
unquoted header row and every data cell double-quoted (embedded quotes doubled).
Rows are separated by a single newline. Missing fields render as empty cells.

Formula neutralization:
- Off by default so the export re-imports to exactly the stored values.
- When enabled, leading characters that can trigger formula execution in
  Excel/Sheets (=, +, -, @, tab, carriage return) are stripped, and a warning is
  logged for security monitoring.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from io import StringIO
from typing import Any, Iterable, List, Optional

from domain.lead import Lead

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "crm-leads.csv"

# CSV column names in order (matching the CRM import format)
CSV_COLUMNS = [
    "createdAt",
    "type",
    "stage",
    "priority",
    "owner",
    "name",
    "email",
    "phone",
    "company",
    "service",
    "score",
    "selectedDate",
    "selectedTime",
    "budget_range",
    "timeline_pref",
    "decision_role",
    "urgency",
    "nextActionType",
    "nextActionAt",
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_content",
    "utm_term",
    "gclid",
    "fbclid",
    "referrer",
    "landing_page",
    "locale",
    "timezone",
    "device",
    "first_seen_at",
    "last_seen_at",
]


@dataclass(frozen=True, slots=True)
class CsvExport:
    """A generated export ready to be downloaded or written to disk."""

    filename: str
    content: str
    row_count: int


def sanitize_csv_field(value: str | None, field_name: str = "unknown") -> str:
    """
    Strip leading formula-trigger characters from a cell value.

    If dangerous characters are found and stripped, a warning is logged. This
    allows detection of both accidental issues and potential injection attempts.

    Example:
        sanitize_csv_field("=1+1", "name")
        # Returns "1+1" and logs warning about stripped "=" character

        sanitize_csv_field("Normal Name", "name")
        # Returns "Normal Name" (unchanged, no logging)
    """
    if value is None or value == "":
        return ""

    text = str(value).strip()
    original_text = text
    dangerous_chars = {'=', '+', '-', '@', '\t', '\r'}

    stripped_chars = []
    while text and text[0] in dangerous_chars:
        stripped_chars.append(text[0])
        text = text[1:]

    if stripped_chars:
        logger.warning(
            f"CSV injection character(s) stripped from field '{field_name}'",
            extra={
                "field_name": field_name,
                "stripped_characters": "".join(stripped_chars),
                "original_value": original_text[:100],  # First 100 chars
                "sanitized_value": text[:100],
                "modification_type": "csv_injection_prevention"
            }
        )

    return text


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def lead_to_csv_row(lead: Lead, neutralize_formulas: bool = False) -> List[str]:
    """Cell values for one lead in CSV_COLUMNS order."""

    row = [_cell(lead.get(column)) for column in CSV_COLUMNS]
    if neutralize_formulas:
        row = [sanitize_csv_field(value, column) for column, value in zip(CSV_COLUMNS, row)]
    return row


def generate_csv_for_leads(leads: Iterable[Lead], neutralize_formulas: bool = False) -> Optional[CsvExport]:
    """
    Render the CRM export for the given leads.

    Returns None when there are no leads (no file should be produced).

    Example:
        export = generate_csv_for_leads(list_leads(store))
        if export is not None:
            with open(export.filename, "w", encoding="utf-8", newline="") as f:
                f.write(export.content)
    """
    leads = list(leads)
    if not leads:
        return None

    output = StringIO()
    header_writer = csv.writer(output, lineterminator="\n")
    row_writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")

    header_writer.writerow(CSV_COLUMNS)
    for lead in leads:
        row_writer.writerow(lead_to_csv_row(lead, neutralize_formulas))

    content = output.getvalue()
    if content.endswith("\n"):
        content = content[:-1]

    return CsvExport(filename=EXPORT_FILENAME, content=content, row_count=len(leads))


def parse_csv_export(content: str) -> List[dict[str, str]]:
    """Read an export back into column -> value dictionaries."""

    reader = csv.DictReader(StringIO(content))
    return [dict(row) for row in reader]


__all__ = [
    "CSV_COLUMNS",
    "CsvExport",
    "EXPORT_FILENAME",
    "generate_csv_for_leads",
    "lead_to_csv_row",
    "parse_csv_export",
    "sanitize_csv_field",
]
