from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RelationalType(str, Enum):
    """Column type vocabulary the ORM layer works with."""
    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    TIMESTAMP = "timestamp"


class BindingType(str, Enum):
    """Declared type of a bound placeholder value."""
    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    OTHER = "other"


class QualifiedTableRef(BaseModel):
    """Three-part warehouse table name."""
    project_id: str
    dataset_name: str
    table_name: str

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("project_id", "dataset_name", "table_name")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("table reference components must be non-empty")
        return value

    @property
    def full_name(self) -> str:
        return f"{self.project_id}.{self.dataset_name}.{self.table_name}"

    @property
    def quoted(self) -> str:
        return f"`{self.full_name}`"

    def __str__(self) -> str:
        return self.full_name


class Binding(BaseModel):
    """A named placeholder value produced by the query builder."""
    placeholder: str
    value: Any = None
    type: BindingType = BindingType.OTHER

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class ColumnDescriptor(BaseModel):
    name: str
    warehouse_type: str
    relational_type: RelationalType
    is_nullable: bool = True
    is_primary_key: bool = False

    model_config = ConfigDict(extra="ignore", frozen=True)


class TableSchema(BaseModel):
    """Statically declared schema for one warehouse table.

    Column order is preserved; it drives SELECT lists and DML column order.
    """
    name: str
    columns: List[ColumnDescriptor] = Field(default_factory=list)
    primary_key: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore", frozen=True)

    @model_validator(mode="after")
    def _check_primary_key(self) -> "TableSchema":
        names = {column.name for column in self.columns}
        missing = [key for key in self.primary_key if key not in names]
        if missing:
            raise ValueError(f"Primary key columns {missing} are not declared on table {self.name}")
        return self

    @classmethod
    def from_types(
        cls,
        name: str,
        types: Dict[str, str],
        primary_key: Optional[List[str]] = None,
    ) -> "TableSchema":
        """Builds a schema from a ``{column: relational type}`` mapping."""
        from bigquery_orm.schema.mapper import to_warehouse_type

        primary_key = list(primary_key or [])
        columns = []
        for column, type_name in types.items():
            relational = RelationalType(type_name)
            columns.append(ColumnDescriptor(
                name=column,
                warehouse_type=to_warehouse_type(relational),
                relational_type=relational,
                is_nullable=column not in primary_key,
                is_primary_key=column in primary_key,
            ))
        return cls(name=name, columns=columns, primary_key=primary_key)

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def column(self, name: str) -> Optional[ColumnDescriptor]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def type_of(self, name: str) -> Optional[RelationalType]:
        column = self.column(name)
        return column.relational_type if column else None

    def data_types(self) -> Dict[str, RelationalType]:
        return {column.name: column.relational_type for column in self.columns}
