"""SQLAlchemy Core dialect used as the relational query builder.

Statements compile to generic SQL with ``:name`` placeholders and backtick
identifier quoting. The Translator and Inliner take it from there.
"""
from typing import List, Optional, Tuple

from sqlalchemy import types as sa_types
from sqlalchemy.engine import default
from sqlalchemy.sql import compiler
from sqlalchemy.sql.expression import ClauseElement

from bigquery_orm.dialect.translator import RESERVED_WORDS
from bigquery_orm.models import Binding, BindingType


class BigQueryIdentifierPreparer(compiler.IdentifierPreparer):
    reserved_words = compiler.RESERVED_WORDS | set(RESERVED_WORDS)

    def __init__(self, dialect):
        super().__init__(dialect, initial_quote="`", escape_quote="`")


class BigQueryTypeCompiler(compiler.GenericTypeCompiler):
    """Emits warehouse column type names."""

    def visit_VARCHAR(self, type_, **kw):
        return "STRING"

    visit_CHAR = visit_NVARCHAR = visit_NCHAR = visit_TEXT = visit_VARCHAR

    def visit_INTEGER(self, type_, **kw):
        return "INT64"

    visit_BIGINT = visit_SMALLINT = visit_INTEGER

    def visit_FLOAT(self, type_, **kw):
        return "FLOAT64"

    visit_REAL = visit_DOUBLE = visit_DOUBLE_PRECISION = visit_FLOAT

    def visit_NUMERIC(self, type_, **kw):
        return "NUMERIC"

    visit_DECIMAL = visit_NUMERIC

    def visit_BOOLEAN(self, type_, **kw):
        return "BOOL"

    def visit_DATE(self, type_, **kw):
        return "DATE"

    def visit_DATETIME(self, type_, **kw):
        return "DATETIME"

    def visit_TIMESTAMP(self, type_, **kw):
        return "TIMESTAMP"


class BigQuerySQLDialect(default.DefaultDialect):
    name = "bigquery_orm"
    default_paramstyle = "named"
    preparer = BigQueryIdentifierPreparer
    type_compiler_cls = BigQueryTypeCompiler
    supports_statement_cache = True
    supports_sequences = False
    supports_native_boolean = True
    supports_alter = False
    postfetch_lastrowid = False


_default_dialect = BigQuerySQLDialect()


def sa_binding_type(type_: Optional[sa_types.TypeEngine]) -> BindingType:
    """Maps a bind parameter's SQLAlchemy type to its declared binding type."""
    if isinstance(type_, sa_types.Boolean):
        return BindingType.BOOLEAN
    if isinstance(type_, sa_types.Integer):
        return BindingType.INTEGER
    if isinstance(type_, sa_types.Numeric):
        return BindingType.FLOAT
    if isinstance(type_, sa_types.String):
        return BindingType.STRING
    return BindingType.OTHER


def compile_statement(
    stmt: ClauseElement,
    dialect: Optional[default.DefaultDialect] = None,
) -> Tuple[str, List[Binding]]:
    """Compiles a Core statement into SQL text and its typed bindings.

    Args:
        stmt: A SQLAlchemy Core statement or clause.
        dialect: Dialect override; defaults to ``BigQuerySQLDialect``.

    Returns:
        Tuple[str, List[Binding]]: The SQL with ``:name`` placeholders and one
        binding per placeholder. Expanding parameters (``IN`` lists) are
        rendered as one placeholder per element, ``:id_1_1, :id_1_2``.
    """
    compiled = stmt.compile(dialect=dialect or _default_dialect)
    state = compiled.construct_expanded_state()

    types = {name: bind.type for bind, name in compiled.bind_names.items()}
    for name, expanded in state.parameter_expansion.items():
        for expanded_name in expanded:
            types[expanded_name] = types.get(name)

    bindings = [
        Binding(placeholder=name, value=value, type=sa_binding_type(types.get(name)))
        for name, value in state.parameters.items()
        if name not in state.parameter_expansion
    ]
    return state.statement, bindings
