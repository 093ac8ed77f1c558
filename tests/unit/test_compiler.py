from sqlalchemy import BigInteger, Boolean, Column, Date, DateTime, Float, MetaData, String, Table, bindparam, select

from bigquery_orm.dialect.compiler import BigQuerySQLDialect, compile_statement
from bigquery_orm.models import BindingType


def _table():
    return Table(
        "t",
        MetaData(),
        Column("id", String, primary_key=True),
        Column("key", String),
        Column("age", BigInteger),
        Column("active", Boolean),
    )


def test_compile_emits_named_placeholders_and_typed_bindings():
    # Arrange
    t = _table()
    stmt = select(t).where(t.c.id == "1", t.c.age > 30).limit(5)

    # Act
    sql, bindings = compile_statement(stmt)

    # Assert
    by_name = {binding.placeholder: binding for binding in bindings}
    assert ":id_1" in sql
    assert ":age_1" in sql
    assert by_name["id_1"].value == "1"
    assert by_name["id_1"].type == BindingType.STRING
    assert by_name["age_1"].type == BindingType.INTEGER
    assert any(b.value == 5 and b.type == BindingType.INTEGER for b in bindings)


def test_boolean_bind_is_typed_boolean():
    t = _table()

    _, bindings = compile_statement(select(t).where(t.c.active == bindparam("flag", True, type_=Boolean())))

    assert [(b.placeholder, b.type) for b in bindings] == [("flag", BindingType.BOOLEAN)]


def test_reserved_column_names_are_backticked():
    t = _table()

    sql, _ = compile_statement(select(t.c["key"]))

    assert "`key`" in sql
    assert '"' not in sql


def test_type_compiler_emits_warehouse_types():
    dialect = BigQuerySQLDialect()

    assert String().compile(dialect=dialect) == "STRING"
    assert BigInteger().compile(dialect=dialect) == "INT64"
    assert Float().compile(dialect=dialect) == "FLOAT64"
    assert Boolean().compile(dialect=dialect) == "BOOL"
    assert Date().compile(dialect=dialect) == "DATE"
    assert DateTime().compile(dialect=dialect) == "DATETIME"


def test_in_list_expands_to_one_placeholder_per_value():
    # Arrange
    t = _table()
    stmt = select(t.c.id).where(t.c.age.in_([30, 40]))

    # Act
    sql, bindings = compile_statement(stmt)

    # Assert
    assert sql.endswith("WHERE t.age IN (:age_1_1, :age_1_2)")
    assert "POSTCOMPILE" not in sql
    assert {b.placeholder: (b.value, b.type) for b in bindings} == {
        "age_1_1": (30, BindingType.INTEGER),
        "age_1_2": (40, BindingType.INTEGER),
    }
