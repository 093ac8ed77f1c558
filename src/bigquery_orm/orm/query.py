"""
Find queries against one warehouse table.

Statements are built with SQLAlchemy Core, compiled with ``:name``
placeholders, translated to warehouse SQL and finally inlined. The warehouse
has no parameter binding, so inlining is the last step before submission.
"""
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from sqlalchemy import select
from sqlalchemy.sql.expression import ColumnElement

from bigquery_orm.dialect.compiler import compile_statement
from bigquery_orm.dialect.inliner import inline
from bigquery_orm.execution.cursor import ResultCursor
from bigquery_orm.models import Binding
from bigquery_orm.orm.entity import Entity

if TYPE_CHECKING:
    from bigquery_orm.orm.table import BigQueryTable

Conditions = Union[Dict[str, Any], ColumnElement, Sequence[ColumnElement], None]
OrderBy = Union[str, ColumnElement, Sequence[Union[str, ColumnElement]], Dict[str, str], None]


class WarehouseQuery:
    """Generative SELECT over a ``BigQueryTable``.

    Each builder method returns a new query; the original is left untouched.
    """

    def __init__(self, table: "BigQueryTable"):
        self._table = table
        self._sa_table = table.sa_table
        self._conditions: Tuple[ColumnElement, ...] = ()
        self._order_by: Tuple[ColumnElement, ...] = ()
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None

    def _clone(self) -> "WarehouseQuery":
        clone = WarehouseQuery.__new__(WarehouseQuery)
        clone.__dict__ = self.__dict__.copy()
        return clone

    def _column(self, name: str):
        try:
            return self._sa_table.c[name]
        except KeyError:
            raise ValueError(f"Unknown column {name!r} on table {self._table.name}") from None

    def where(self, conditions: Conditions = None, *clauses: ColumnElement) -> "WarehouseQuery":
        """Adds AND-ed conditions.

        Args:
            conditions: ``{column: value}`` equality pairs (``None`` means
                IS NULL), or SQLAlchemy column expressions.
            *clauses: Further column expressions.
        """
        built: List[ColumnElement] = []
        if isinstance(conditions, dict):
            for name, value in conditions.items():
                column = self._column(name)
                built.append(column.is_(None) if value is None else column == value)
        elif isinstance(conditions, ColumnElement):
            built.append(conditions)
        elif conditions is not None:
            built.extend(conditions)
        built.extend(clauses)

        clone = self._clone()
        clone._conditions = self._conditions + tuple(built)
        return clone

    def order_by(self, *order: OrderBy) -> "WarehouseQuery":
        """Adds ordering: ``"name"``, ``"name DESC"``, ``{"name": "DESC"}`` or expressions."""
        built: List[ColumnElement] = []
        for item in order:
            built.extend(self._order_clauses(item))

        clone = self._clone()
        clone._order_by = self._order_by + tuple(built)
        return clone

    def _order_clauses(self, item: OrderBy) -> List[ColumnElement]:
        if item is None:
            return []
        if isinstance(item, ColumnElement):
            return [item]
        if isinstance(item, dict):
            pairs = list(item.items())
        elif isinstance(item, str):
            name, _, direction = item.strip().partition(" ")
            pairs = [(name, direction)]
        else:
            return [clause for sub in item for clause in self._order_clauses(sub)]

        clauses = []
        for name, direction in pairs:
            column = self._column(name)
            clauses.append(column.desc() if direction.strip().upper() == "DESC" else column.asc())
        return clauses

    def limit(self, limit: Optional[int]) -> "WarehouseQuery":
        clone = self._clone()
        clone._limit = limit
        return clone

    def offset(self, offset: Optional[int]) -> "WarehouseQuery":
        clone = self._clone()
        clone._offset = offset
        return clone

    def statement(self):
        stmt = select(self._sa_table)
        if self._conditions:
            stmt = stmt.where(*self._conditions)
        if self._order_by:
            stmt = stmt.order_by(*self._order_by)
        if self._limit is not None:
            stmt = stmt.limit(self._limit)
        if self._offset is not None:
            stmt = stmt.offset(self._offset)
        return stmt

    def compile(self) -> Tuple[str, List[Binding]]:
        """Returns the warehouse SQL, still with placeholders, and its bindings."""
        sql, bindings = compile_statement(self.statement())
        return self._table.translator.translate(sql), bindings

    def sql(self) -> str:
        return self.compile()[0]

    def final_sql(self) -> str:
        """Returns the SQL exactly as it will be submitted."""
        sql, bindings = self.compile()
        return inline(sql, bindings)

    def execute(self) -> ResultCursor:
        return self._table.connection.execute(self.final_sql())

    def all(self) -> List[Entity]:
        return [self._table.hydrate(row) for row in self.execute()]

    def first(self) -> Optional[Entity]:
        row = self.limit(1).execute().fetch()
        return self._table.hydrate(row) if row is not None else None

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.all())
