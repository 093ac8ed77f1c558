from .mapper import SchemaMapper, to_relational_type, to_warehouse_type, coerce
from .dialect import BigQuerySchemaDialect, to_sqlalchemy_table
from .store import SchemaStore, default_store

__all__ = [
    "SchemaMapper",
    "to_relational_type",
    "to_warehouse_type",
    "coerce",
    "BigQuerySchemaDialect",
    "to_sqlalchemy_table",
    "SchemaStore",
    "default_store",
]
