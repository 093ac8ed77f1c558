"""
Result Cursor.

Adapts the warehouse's lazy, single-pass row iterator to the forward-only
statement interface the ORM expects. Rows are normalized as they are fetched.
Once exhausted the cursor stays exhausted.
"""
import datetime
from typing import Any, Dict, Iterator, List, Optional, Union

from bigquery_orm.models import ColumnDescriptor
from bigquery_orm.schema import mapper

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M:%S"

FETCH_ASSOC = "assoc"
FETCH_NUM = "num"

Row = Union[Dict[str, Any], List[Any]]


def normalize_value(value: Any) -> Any:
    """Renders date/time values as fixed-format strings."""
    if isinstance(value, datetime.datetime):
        return value.strftime(DATETIME_FORMAT)
    if isinstance(value, datetime.date):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, datetime.time):
        return value.strftime(TIME_FORMAT)
    return value


class ResultCursor:
    """Forward-only cursor over one job's rows.

    Args:
        rows: The job's row iterator. It exposes ``schema`` and ``total_rows``
            and can be iterated only once.
        affected_rows: DML affected-row count, used when the job returned no
            result set.
    """

    def __init__(self, rows: Any, affected_rows: Optional[int] = None):
        self._rows = rows
        self._iterator: Iterator[Any] = iter(rows if rows is not None else ())
        self._affected_rows = affected_rows

    def execute(self, params: Optional[Dict[str, Any]] = None) -> bool:
        # The job already ran at submission time.
        return True

    def fetch(self, mode: str = FETCH_ASSOC) -> Optional[Row]:
        """Returns the next normalized row, or ``None`` when exhausted.

        Raises:
            ValueError: If ``mode`` is not ``"assoc"`` or ``"num"``.
        """
        if mode not in (FETCH_ASSOC, FETCH_NUM):
            raise ValueError(f"Unsupported fetch mode: {mode!r}")
        row = next(self._iterator, None)
        if row is None:
            return None
        data = {key: normalize_value(value) for key, value in row.items()}
        if mode == FETCH_NUM:
            return list(data.values())
        return data

    fetch_one = fetch

    def fetch_all(self, mode: str = FETCH_ASSOC) -> List[Row]:
        """Drains the remaining rows."""
        rows = []
        while True:
            row = self.fetch(mode)
            if row is None:
                return rows
            rows.append(row)

    def fetch_column(self, index: int = 0) -> Any:
        row = self.fetch(FETCH_NUM)
        if row is None or index >= len(row):
            return None
        return row[index]

    def row_count(self) -> int:
        total_rows = getattr(self._rows, "total_rows", None)
        if total_rows is not None:
            return int(total_rows)
        return int(self._affected_rows or 0)

    def column_count(self) -> int:
        return len(self.schema)

    @property
    def schema(self) -> List[Any]:
        return list(getattr(self._rows, "schema", None) or [])

    def columns(self) -> List[ColumnDescriptor]:
        return [mapper.describe_field(field) for field in self.schema]

    def error_code(self) -> Optional[str]:
        return None

    def error_info(self) -> List[Any]:
        return []

    def close_cursor(self) -> None:
        pass

    close = close_cursor

    def bind_value(self, param: Any, value: Any, type_: str = "string") -> None:
        pass

    def bind(self, params: Any, types: Any = None) -> None:
        pass

    def last_insert_id(self, table: Optional[str] = None, column: Optional[str] = None) -> None:
        return None

    def __iter__(self):
        return iter(self.fetch, None)

    def __len__(self) -> int:
        return self.row_count()
