"""
Spreadsheet export
Builds an HTML table that spreadsheet applications open as an .xls workbook
"""

import re
from typing import Any, Optional, Sequence

from ..exceptions import ExportError
from ..models import Account, Meeting, Participant
from .sanitization import escape_cell


SPREADSHEET_MEDIA_TYPE = "application/vnd.ms-excel; charset=utf-8"
HEADER_STYLE = "background-color: #3B82F6; color: white; font-weight: bold;"
DISPLAY_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
# Filenames end up in a Content-Disposition header, which must stay ASCII
UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._ -]")

WORKBOOK_PREAMBLE = """<html xmlns:o="urn:schemas-microsoft-com:office:office"
      xmlns:x="urn:schemas-microsoft-com:office:excel"
      xmlns="http://www.w3.org/TR/REC-html40">
<head>
  <meta http-equiv="content-type" content="application/vnd.ms-excel; charset=UTF-8">
  <meta name="ProgId" content="Excel.Sheet">
  <meta name="Generator" content="Microsoft Excel 11">
</head>
<body>
<table border="1">
"""

WORKBOOK_CLOSING = """</table>
</body>
</html>
"""


def build_spreadsheet_html(rows: Sequence[dict[str, Any]]) -> str:
    """
    Render uniform rows as a spreadsheet-compatible HTML table.
    Column headers come from the keys of the first row.

    Raises:
        ExportError: If there are no rows to export
    """
    if not rows:
        raise ExportError("Nothing to export")

    headers = list(rows[0].keys())
    parts = [WORKBOOK_PREAMBLE, f'<tr style="{HEADER_STYLE}">']
    parts.extend(f"<td>{escape_cell(header)}</td>" for header in headers)
    parts.append("</tr>\n")

    for row in rows:
        parts.append("<tr>")
        parts.extend(f"<td>{escape_cell(row.get(header))}</td>" for header in headers)
        parts.append("</tr>\n")

    parts.append(WORKBOOK_CLOSING)
    return "".join(parts)


def spreadsheet_filename(name: str) -> str:
    """Force the .xls extension the HTML workbook format requires"""
    base = UNSAFE_FILENAME_CHARS.sub("_", (name or "").strip()) or "export"
    if base.lower().endswith(".xlsx"):
        base = base[:-5]
    elif base.lower().endswith(".xls"):
        base = base[:-4]
    return f"{base}.xls"


def _format_time(value) -> Optional[str]:
    return value.strftime(DISPLAY_DATETIME_FORMAT) if value else None


def attendance_rows(participants: Sequence[Participant], meeting: Meeting, account: Account) -> list[dict]:
    """Rows of the attendance export"""
    return [
        {
            "Name": p.name,
            "Email": p.email or "N/A",
            "Join Time": _format_time(p.join_time),
            "Status": p.status,
            "Meeting": meeting.name or "Unknown",
            "User": account.display_name,
        }
        for p in participants
    ]


def participation_rows(participants: Sequence[Participant], meeting: Meeting, account: Account) -> list[dict]:
    """Rows of the participation (speaking points) export"""
    return [
        {
            "Name": p.name,
            "Email": p.email or "N/A",
            "Join Time": _format_time(p.join_time),
            "Speaking Points": p.speaking_count,
            "Last Spoke": _format_time(p.last_spoke) or "Never",
            "Meeting": meeting.name or "Unknown",
            "User": account.display_name,
        }
        for p in participants
    ]
