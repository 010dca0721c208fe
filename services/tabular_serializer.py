"""
CSV rendering for the Exam Extractor

Renders uniform records into comma-separated text with a header row and
minimal quoting: a value is quoted only when it contains a comma, a double
quote or a line break, and embedded quotes are doubled. Values are written
as given; ``isCorrect`` stays the literal ``yes`` or empty string.
"""
import csv
import io
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from utils.exceptions import OutputWriteError

logger = logging.getLogger(__name__)


QUESTION_FIELDS = ["examNumber", "questionNumber", "question", "reference"]
ANSWER_FIELDS = ["examNumber", "questionNumber", "answerNumber", "answer", "isCorrect"]

ROW_TERMINATOR = "\n"
_QUOTING_TERMINATOR = "\r\n"


def serialize_records(records: Iterable[Mapping[str, Any]], field_names: Sequence[str]) -> str:
    """
    Render records as CSV text.

    Args:
        records: Mappings from field name to value
        field_names: Column order; fields missing from a record render empty

    Returns:
        Header row followed by one row per record
    """
    # The writer quotes values holding any character of its line terminator,
    # so rows are rendered with CR-LF and re-terminated with ROW_TERMINATOR
    row_buffer = io.StringIO()
    writer = csv.DictWriter(
        row_buffer,
        fieldnames=list(field_names),
        restval="",
        extrasaction="ignore",
        quoting=csv.QUOTE_MINIMAL,
        lineterminator=_QUOTING_TERMINATOR,
    )
    writer.writeheader()
    rows = [_take_row(row_buffer)]
    for record in records:
        writer.writerow(record)
        rows.append(_take_row(row_buffer))

    return "".join(rows)


def _take_row(row_buffer: io.StringIO) -> str:
    row = row_buffer.getvalue()[:-len(_QUOTING_TERMINATOR)] + ROW_TERMINATOR
    row_buffer.seek(0)
    row_buffer.truncate()
    return row


def parse_records(text: str) -> List[Dict[str, str]]:
    """
    Parse CSV text produced by serialize_records back into rows.

    Args:
        text: CSV text with a header row

    Returns:
        One dict per data row, keyed by header field
    """
    reader = csv.DictReader(io.StringIO(text, newline=""))
    return [dict(row) for row in reader]


def write_tables(tables: Mapping[Path, str], encoding: str = "utf-8") -> None:
    """
    Write fully rendered tables to disk, all or nothing.

    Every table is first written to a temporary file beside its destination;
    only when all of them are on disk are they renamed over the destinations.
    A failure before the renames leaves every existing table untouched.

    Raises:
        OutputWriteError: If a table cannot be written
    """
    staged: List[Tuple[str, Path]] = []

    try:
        for path, content in tables.items():
            path = Path(path)
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
                staged.append((tmp_name, path))
                with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
                    handle.write(content)
            except OSError as e:
                raise OutputWriteError(
                    f"Failed to write {path}: {e}",
                    output_path=str(path),
                    original_exception=e
                )

        for tmp_name, path in staged:
            try:
                os.replace(tmp_name, path)
            except OSError as e:
                raise OutputWriteError(
                    f"Failed to replace {path}: {e}",
                    output_path=str(path),
                    original_exception=e
                )
    except BaseException:
        for tmp_name, _ in staged:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
        raise

    for path, content in tables.items():
        logger.info(f"Wrote {path} ({content.count(ROW_TERMINATOR)} lines)")
