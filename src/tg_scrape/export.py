import csv
import io
import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from rich.markup import escape

from tg_scrape.types.record import Record
from tg_scrape.utils.logger import logger

JSON_FILENAME = "telegram_messages.json"
CSV_FILENAME = "telegram_messages.csv"
CSV_DELIMITER = ","
# Media locators share one CSV cell
MEDIA_SEPARATOR = " | "


def _csv_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return MEDIA_SEPARATOR.join(str(item) for item in value)
    return str(value)


def export_json(records: Sequence[Record]) -> bytes:
    """Indented JSON array of records, in collection order (newest first)."""
    rows = [record.export_dict() for record in records]
    return json.dumps(rows, indent=2, ensure_ascii=False).encode("utf-8")


def export_csv(records: Sequence[Record]) -> bytes:
    """Delimited text: bare header row, then one fully quoted row per record.

    Quotes inside values are doubled and rows are joined with a newline
    (no trailing newline). No records means no output at all, not even a
    header.
    """
    if not records:
        return b""

    rows = [record.export_dict() for record in records]
    headers = list(rows[0].keys())

    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=CSV_DELIMITER,
        quoting=csv.QUOTE_ALL,
        doublequote=True,
        lineterminator="\n",
    )
    for row in rows:
        writer.writerow([_csv_cell(row.get(header)) for header in headers])

    body = buffer.getvalue().removesuffix("\n")
    return (CSV_DELIMITER.join(headers) + "\n" + body).encode("utf-8")


def save_export(data: bytes, filename: str, export_dir: Path) -> Path:
    """Write an export to ``export_dir``, replacing a previous file of that name."""
    export_dir.mkdir(parents=True, exist_ok=True)
    output_path = export_dir / filename
    output_path.write_bytes(data)
    logger.success(f"Exported {len(data)} bytes to {escape(str(output_path))}")
    return output_path
