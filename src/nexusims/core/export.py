import csv
import io
from typing import Any, Dict, Iterable, List


class ExportError(Exception):
    pass


def to_csv(rows: Iterable[Dict[str, Any]]) -> str:
    rows = list(rows)
    if not rows:
        raise ExportError("No data to export")

    headers: List[str] = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if row.get(name) is None else row.get(name) for name in headers])

    return buffer.getvalue().rstrip("\n")
