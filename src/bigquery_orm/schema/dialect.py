"""Schema dialect for the warehouse.

There is no catalog to introspect, so the describe queries are empty and table
schemas are declared statically. DDL generation is limited to a plain
CREATE TABLE without constraints or indexes.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import Column, MetaData, Table

from bigquery_orm.models import ColumnDescriptor, QualifiedTableRef, TableSchema
from bigquery_orm.schema import mapper


def quote(name: str) -> str:
    return "`" + name.replace("`", "\\`") + "`"


def to_sqlalchemy_table(schema: TableSchema, metadata: Optional[MetaData] = None) -> Table:
    """Renders the static schema as a SQLAlchemy Core table for the query builder."""
    return Table(
        schema.name,
        metadata if metadata is not None else MetaData(),
        *[
            Column(
                column.name,
                mapper.to_sqlalchemy_type(column.relational_type)(),
                primary_key=column.is_primary_key,
                nullable=column.is_nullable,
            )
            for column in schema.columns
        ],
    )


class BigQuerySchemaDialect:
    """DDL and schema-description hooks used by the host ORM."""

    def list_tables_sql(self, config: Any = None) -> List[str]:
        return []

    def describe_column_sql(self, table_name: str, config: Any = None) -> List[str]:
        return []

    def describe_index_sql(self, table_name: str, config: Any = None) -> List[str]:
        return []

    def describe_foreign_key_sql(self, table_name: str, config: Any = None) -> List[str]:
        return []

    def convert_column_description(self, schema: TableSchema, row: Dict[str, Any]) -> TableSchema:
        """Returns ``schema`` with the described column appended as nullable.

        ``row`` carries ``name`` and the warehouse ``type``.
        """
        column = ColumnDescriptor(
            name=row["name"],
            warehouse_type=str(row["type"]).upper(),
            relational_type=mapper.to_relational_type(row["type"]),
            is_nullable=True,
        )
        return schema.model_copy(update={"columns": [*schema.columns, column]})

    def convert_index_description(self, schema: TableSchema, row: Dict[str, Any]) -> TableSchema:
        return schema

    def convert_foreign_key_description(self, schema: TableSchema, row: Dict[str, Any]) -> TableSchema:
        return schema

    def column_sql(self, schema: TableSchema, name: str) -> str:
        column = schema.column(name)
        if column is None:
            return ""
        sql = f"{quote(column.name)} {mapper.to_warehouse_type(column.relational_type)}"
        if not column.is_nullable:
            sql += " NOT NULL"
        return sql

    def create_table_sql(
        self,
        schema: TableSchema,
        table_ref: Optional[QualifiedTableRef] = None,
    ) -> List[str]:
        """Renders a single CREATE TABLE statement.

        Args:
            schema: The table's declared schema.
            table_ref: Qualifies the table name when given.
        """
        name = table_ref.quoted if table_ref else quote(schema.name)
        columns = ", ".join(self.column_sql(schema, column) for column in schema.column_names)
        return [f"CREATE TABLE {name} ({columns})"]

    def constraint_sql(self, schema: TableSchema, name: str) -> str:
        return ""

    def index_sql(self, schema: TableSchema, name: str) -> str:
        return ""

    def add_constraint_sql(self, schema: TableSchema) -> List[str]:
        return []

    def drop_constraint_sql(self, schema: TableSchema) -> List[str]:
        return []

    def truncate_table_sql(self, schema: TableSchema) -> List[str]:
        return []
