"""CSV reading and writing for the friends list."""
import csv
import io
from collections.abc import Iterable

from socialiser.models.friend import Friend

EXPORT_COLUMNS = ("name", "email", "group")


class CSVParseError(ValueError):
    """The upload is not well-formed CSV; ``details`` holds one message per problem."""

    def __init__(self, details: list[str]):
        super().__init__("CSV parsing failed")
        self.details = details


def parse_friends_csv(content: bytes) -> list[dict[str, str]]:
    """Parse an uploaded friends CSV into header-keyed rows.

    Header names are lower-cased and trimmed; empty lines are skipped. A data
    row whose field count differs from the header is a structural error. All
    structural errors are collected and raised together as CSVParseError.
    """
    text = content.decode("utf-8-sig", errors="replace")
    reader = csv.reader(io.StringIO(text))
    errors: list[str] = []
    rows: list[dict[str, str]] = []
    header: list[str] | None = None

    try:
        for fields in reader:
            # Only truly empty lines are skipped; "   " and ",," are rows.
            if not fields:
                continue
            if header is None:
                header = [h.lower().strip() for h in fields]
                continue
            row_no = len(rows) + 1
            if len(fields) > len(header):
                errors.append(
                    f"Row {row_no}: Too many fields: expected {len(header)} fields but parsed {len(fields)}"
                )
            elif len(fields) < len(header):
                errors.append(
                    f"Row {row_no}: Too few fields: expected {len(header)} fields but parsed {len(fields)}"
                )
            rows.append(dict(zip(header, fields)))
    except csv.Error as exc:
        errors.append(f"Line {reader.line_num}: {exc}")

    if errors:
        raise CSVParseError(errors)
    return rows


def export_friends_csv(friends: Iterable[Friend]) -> str:
    """Render friends as ``name,email,group`` CSV, quoting fields only when needed."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for friend in friends:
        writer.writerow([friend.name, friend.email or "", friend.group or ""])
    return buf.getvalue()
