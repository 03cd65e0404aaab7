"""
File readers for usage exports.

Reads delimited text exports into raw header and row lists. Parsing
into records happens in the normalizer.
"""

import csv
import logging
from pathlib import Path
from typing import List, Tuple

logger = logging.getLogger(__name__)


def read_table(path: str) -> List[List[str]]:
    """Read every row of a CSV file, blank lines skipped.

    Args:
        path: Path to the CSV file

    Returns:
        Rows as lists of stripped cell strings, header row included

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Usage file not found: {path}")

    with open(file_path, 'r', encoding='utf-8-sig', newline='') as f:
        rows = [
            [cell.strip() for cell in row]
            for row in csv.reader(f)
            if any(cell.strip() for cell in row)
        ]

    logger.debug("Read %d rows from %s", len(rows), file_path)
    return rows


def read_event_log(path: str) -> Tuple[List[str], List[List[str]]]:
    """Read a per-event log and split off its header row.

    Returns:
        Tuple of (headers, data rows); both empty for an empty file
    """
    rows = read_table(path)
    if not rows:
        logger.warning("Event log %s is empty", path)
        return [], []
    return rows[0], rows[1:]
