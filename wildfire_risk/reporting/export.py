"""
File writers for scored rows.

All writers create parent directories, write to disk and return the written
``Path``.  ``export_records()`` picks the writer from the file suffix.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path

SUPPORTED_SUFFIXES = (".csv", ".json", ".parquet")


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Column order is ``fieldnames`` if given, else first-seen key order across
    all records.  ``None`` is written as an empty cell.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or _union_keys(records)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(data: dict | list, path: Path) -> Path:
    """Write ``data`` as pretty-printed JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    return path


def export_to_parquet(records: list[dict], path: Path) -> Path:
    """Write ``records`` as a Parquet table (columns = union of keys)."""
    import pyarrow as pa
    import pyarrow.parquet as pq

    path.parent.mkdir(parents=True, exist_ok=True)
    cols = _union_keys(records)
    table = pa.table({col: [r.get(col) for r in records] for col in cols})
    pq.write_table(table, str(path))
    return path


def export_records(records: list[dict], path: Path) -> Path:
    """Dispatch on ``path.suffix``.

    Raises:
        ValueError: If the suffix is not one of ``SUPPORTED_SUFFIXES``.
    """
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return export_to_csv(records, path)
    if suffix == ".json":
        return export_to_json(records, path)
    if suffix == ".parquet":
        return export_to_parquet(records, path)
    raise ValueError(
        f"Unsupported output format '{suffix}'. Expected one of {SUPPORTED_SUFFIXES}."
    )


def _union_keys(records: list[dict]) -> list[str]:
    cols: dict[str, None] = {}
    for record in records:
        cols.update(dict.fromkeys(record))
    return list(cols)
