"""
Name: CSV export

Responsibilities:
  - Render a collection as CSV (BOM + fixed header + one row per record)
  - Convert the monetary column to the display currency
  - Name the download file and write it to disk

Collaborators:
  - domain.records.RecordSchema (columns, money field, prefix)
  - domain.currency.convert

Constraints:
  - Rows joined by "\\n", no trailing newline
  - Quote a field only when it contains a comma, a quote, "\\n" or "\\r"
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from ..crosscutting.logger import logger
from ..domain.currency import convert
from ..domain.records import Currency, Record, RecordSchema

BOM = "\ufeff"


def escape_csv_field(value: str) -> str:
    if any(ch in value for ch in (",", '"', "\n", "\r")):
        return '"' + value.replace('"', '""') + '"'
    return value


def format_csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _row(record: Record, schema: RecordSchema, target: Currency) -> str:
    cells = []
    for _, attr in schema.csv_columns:
        if attr == schema.money_field:
            amount = getattr(record, attr)
            value = None if amount is None else convert(amount, record.currency, target)
        elif attr == "currency":
            value = target
        else:
            value = getattr(record, attr)
        cells.append(escape_csv_field(format_csv_value(value)))
    return ",".join(cells)


def export_records_csv(
    records: Iterable[Record],
    schema: RecordSchema,
    target_currency: Union[Currency, str] = Currency.USD,
) -> str:
    target = Currency(target_currency)
    header = ",".join(name for name, _ in schema.csv_columns)
    lines = [header] + [_row(r, schema, target) for r in records]
    return BOM + "\n".join(lines)


def export_filename(
    schema: RecordSchema, on: Optional[date] = None, *, legacy: bool = False
) -> str:
    if legacy and schema.legacy_export_name:
        return schema.legacy_export_name
    return f"{schema.export_prefix}_{(on or date.today()).isoformat()}.csv"


def write_csv_export(
    directory: Union[str, Path],
    records: Iterable[Record],
    schema: RecordSchema,
    target_currency: Union[Currency, str] = Currency.USD,
    *,
    on: Optional[date] = None,
    legacy: bool = False,
) -> Path:
    path = Path(directory) / export_filename(schema, on, legacy=legacy)
    path.parent.mkdir(parents=True, exist_ok=True)
    # R: newline="" para que "\n" no se traduzca en Windows.
    with path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(export_records_csv(records, schema, target_currency))
    logger.info("CSV exported", extra={"file_path": str(path)})
    return path
