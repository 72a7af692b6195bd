"""Export the visible view to a delimited text file."""

from __future__ import annotations

import csv
from typing import TYPE_CHECKING

from ..models.record import cell_text, format_column_header
from ..utils.debug_trace import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..models.record import Record

logger = get_logger(__name__)


def export_csv(
    path: str, records: Sequence[Record], columns: Sequence[str], delimiter: str = ","
) -> int:
    """Write records to a CSV file.

    Args:
        path: Destination file path
        records: Records in display order
        columns: Displayed columns in display order
        delimiter: Field delimiter

    Returns:
        Number of data rows written
    """
    with open(path, "w", newline="", encoding="utf-8") as csvfile:
        writer = csv.writer(csvfile, delimiter=delimiter)
        writer.writerow([format_column_header(column) for column in columns])
        for record in records:
            writer.writerow([cell_text(record.get(column)) for column in columns])

    logger.info(f"Exported {len(records)} rows to {path}")
    return len(records)


def load_csv(path: str) -> tuple[list[Record], list[str]]:
    """Load records from a CSV file with a header row.

    Returns:
        Tuple of (records, columns); all values are strings
    """
    with open(path, newline="", encoding="utf-8") as csvfile:
        reader = csv.DictReader(csvfile)
        columns = list(reader.fieldnames or [])
        records = [dict(row) for row in reader]

    logger.info(f"Loaded {len(records)} records from {path}")
    return records, columns
