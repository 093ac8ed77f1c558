from bigquery_orm.models import RelationalType, TableSchema
from bigquery_orm.schema.dialect import BigQuerySchemaDialect, quote, to_sqlalchemy_table


def test_create_table_renders_columns_without_constraints(schema):
    dialect = BigQuerySchemaDialect()

    assert dialect.create_table_sql(schema) == [
        "CREATE TABLE `t` (`id` STRING NOT NULL, `name` STRING)"
    ]


def test_create_table_uses_qualified_name(schema, table_ref):
    statements = BigQuerySchemaDialect().create_table_sql(schema, table_ref)

    assert statements[0].startswith("CREATE TABLE `p.d.t` (")


def test_introspection_queries_are_empty():
    dialect = BigQuerySchemaDialect()

    assert dialect.list_tables_sql() == []
    assert dialect.describe_column_sql("t") == []
    assert dialect.describe_index_sql("t") == []
    assert dialect.describe_foreign_key_sql("t") == []


def test_constraint_and_index_ddl_is_empty(schema):
    dialect = BigQuerySchemaDialect()

    assert dialect.constraint_sql(schema, "pk") == ""
    assert dialect.index_sql(schema, "idx") == ""
    assert dialect.add_constraint_sql(schema) == []
    assert dialect.drop_constraint_sql(schema) == []
    assert dialect.truncate_table_sql(schema) == []


def test_column_description_is_appended_as_nullable(schema):
    # Arrange
    dialect = BigQuerySchemaDialect()

    # Act
    described = dialect.convert_column_description(schema, {"name": "age", "type": "int64"})

    # Assert
    column = described.column("age")
    assert column.relational_type == RelationalType.INTEGER
    assert column.warehouse_type == "INT64"
    assert column.is_nullable is True
    assert schema.column("age") is None


def test_index_and_foreign_key_descriptions_are_ignored(schema):
    dialect = BigQuerySchemaDialect()

    assert dialect.convert_index_description(schema, {"name": "idx"}) is schema
    assert dialect.convert_foreign_key_description(schema, {"name": "fk"}) is schema


def test_unknown_column_renders_nothing(schema):
    assert BigQuerySchemaDialect().column_sql(schema, "missing") == ""


def test_quote_escapes_backticks():
    assert quote("we`ird") == "`we\\`ird`"


def test_sqlalchemy_table_mirrors_schema():
    schema = TableSchema.from_types("events", {"id": "integer", "at": "timestamp"}, primary_key=["id"])

    table = to_sqlalchemy_table(schema)

    assert table.name == "events"
    assert [c.name for c in table.columns] == ["id", "at"]
    assert [c.name for c in table.primary_key.columns] == ["id"]
    assert table.c.at.nullable is True
