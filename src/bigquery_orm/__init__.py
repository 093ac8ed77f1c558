from .models import (
    Binding,
    BindingType,
    ColumnDescriptor,
    QualifiedTableRef,
    RelationalType,
    TableSchema,
)
from .common.errors import (
    BigQueryOrmError,
    ConfigurationError,
    ExecutionError,
    InvalidPrimaryKeyError,
    MissingConnectionError,
    RecordNotFoundError,
    SaveFailedError,
    TypeCoercionError,
)
from .configs.datasources import BigQueryConnectionConfig
from .driver import BigQueryDriver
from .connection import Connection
from .protocols import Executable, SchemaDescribable, Transactable
from .orm import BigQueryTable, Entity, SaveOptions, TimestampBehavior, WarehouseQuery

__all__ = [
    "Binding",
    "BindingType",
    "ColumnDescriptor",
    "QualifiedTableRef",
    "RelationalType",
    "TableSchema",
    "BigQueryOrmError",
    "ConfigurationError",
    "ExecutionError",
    "InvalidPrimaryKeyError",
    "MissingConnectionError",
    "RecordNotFoundError",
    "SaveFailedError",
    "TypeCoercionError",
    "BigQueryConnectionConfig",
    "BigQueryDriver",
    "Connection",
    "Executable",
    "SchemaDescribable",
    "Transactable",
    "BigQueryTable",
    "Entity",
    "SaveOptions",
    "TimestampBehavior",
    "WarehouseQuery",
]
