import datetime

import pytest

from conftest import FakeRowIterator, SchemaField
from bigquery_orm.execution.cursor import ResultCursor
from bigquery_orm.models import RelationalType


def _cursor(rows=None, **kwargs):
    rows = rows if rows is not None else [{"id": "1", "name": "A"}, {"id": "2", "name": "B"}]
    schema = [SchemaField("id", "STRING", "REQUIRED"), SchemaField("name", "STRING", "NULLABLE")]
    return ResultCursor(FakeRowIterator(rows, schema=schema), **kwargs)


def test_fetch_returns_each_row_then_end_of_results():
    # Arrange
    cursor = _cursor()

    # Act
    fetched = [cursor.fetch() for _ in range(3)]

    # Assert
    assert fetched == [{"id": "1", "name": "A"}, {"id": "2", "name": "B"}, None]


def test_cursor_is_not_restartable():
    cursor = _cursor()
    cursor.fetch_all()

    assert cursor.fetch() is None
    assert cursor.fetch_all() == []
    assert list(cursor) == []


def test_fetch_all_drains_remaining_rows_only():
    cursor = _cursor()
    cursor.fetch_one()

    assert cursor.fetch_all() == [{"id": "2", "name": "B"}]


def test_row_count_does_not_consume_rows():
    cursor = _cursor()

    assert cursor.row_count() == 2
    assert len(cursor) == 2
    assert cursor.fetch() == {"id": "1", "name": "A"}


def test_row_count_falls_back_to_affected_rows():
    rows = FakeRowIterator([])
    rows.total_rows = None

    assert ResultCursor(rows, affected_rows=3).row_count() == 3
    assert ResultCursor(rows).row_count() == 0


def test_column_count_and_descriptors_come_from_schema():
    cursor = _cursor()

    columns = cursor.columns()

    assert cursor.column_count() == 2
    assert [c.name for c in columns] == ["id", "name"]
    assert columns[0].relational_type == RelationalType.STRING
    assert columns[0].is_nullable is False


def test_date_and_time_values_are_normalized():
    row = {
        "created": datetime.datetime(2024, 1, 2, 3, 4, 5),
        "day": datetime.date(2024, 1, 2),
        "at": datetime.time(3, 4, 5),
        "count": 7,
    }

    fetched = _cursor([row]).fetch()

    assert fetched == {"created": "2024-01-02 03:04:05", "day": "2024-01-02", "at": "03:04:05", "count": 7}


def test_num_mode_returns_lists():
    cursor = _cursor()

    assert cursor.fetch("num") == ["1", "A"]
    assert cursor.fetch_all("num") == [["2", "B"]]


def test_unknown_fetch_mode_is_rejected():
    with pytest.raises(ValueError):
        _cursor().fetch("obj")


def test_fetch_column_reads_one_value_per_row():
    cursor = _cursor()

    assert cursor.fetch_column(1) == "A"
    assert cursor.fetch_column(0) == "2"
    assert cursor.fetch_column(0) is None


def test_statement_contract_stubs():
    cursor = _cursor()

    assert cursor.execute() is True
    assert cursor.error_code() is None
    assert cursor.error_info() == []
    assert cursor.last_insert_id() is None
    assert cursor.bind_value(":id", "1") is None
    assert cursor.close_cursor() is None
