"""
Table Gateway: CRUD for one warehouse-backed table.

Every find, save or delete is a single blocking round trip to the warehouse.
There are no transactions. A failed save re-raises the warehouse error as
``SaveFailedError`` but cannot undo whatever the warehouse already applied.
"""
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import Table

from bigquery_orm.common.errors import (
    ErrorCode,
    ExecutionError,
    InvalidPrimaryKeyError,
    RecordNotFoundError,
    SaveFailedError,
    TypeCoercionError,
)
from bigquery_orm.common.logger import trace_context
from bigquery_orm.connection import Connection
from bigquery_orm.dialect.inliner import inline
from bigquery_orm.dialect.translator import DialectTranslator
from bigquery_orm.models import Binding, TableSchema
from bigquery_orm.orm import events as table_events
from bigquery_orm.orm.entity import Entity
from bigquery_orm.orm.events import EventManager
from bigquery_orm.orm.query import Conditions, OrderBy, WarehouseQuery
from bigquery_orm.schema import mapper
from bigquery_orm.schema.dialect import quote, to_sqlalchemy_table
from bigquery_orm.schema.store import SchemaStore, default_store

logger = logging.getLogger(__name__)

Rule = Callable[[Entity], Optional[str]]


class SaveOptions(BaseModel):
    """Options recognized by ``save`` and ``delete``.

    Keys may be given in camelCase (``checkRules``) or snake_case.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    atomic: bool = Field(default=False, description="Always false: the warehouse has no transactions.")
    associated: bool = True
    check_rules: bool = Field(default=True, alias="checkRules")
    check_existing: bool = Field(default=True, alias="checkExisting")
    clean_on_success: bool = Field(default=True, alias="_cleanOnSuccess")

    @field_validator("atomic")
    @classmethod
    def _force_non_atomic(cls, value: bool) -> bool:
        if value:
            logger.warning("Atomic saves are not supported by the warehouse; saving non-atomically.")
        return False


def _options(options: Union[SaveOptions, Dict[str, Any], None]) -> SaveOptions:
    if isinstance(options, SaveOptions):
        return options
    return SaveOptions.model_validate(options or {})


class BigQueryTable:
    """Gateway for one table.

    Args:
        connection: The warehouse connection (injected; no global lookup).
        schema: The table's statically declared schema.
        alias: Registry name recorded as the source of loaded entities.
        entity_class: Entity type to hydrate rows into.
        schema_store: Where schema versions are registered and resolved.
        insert_strategy: ``"streaming"`` or ``"dml"``; defaults to the
            connection config.
    """

    def __init__(
        self,
        connection: Connection,
        schema: TableSchema,
        *,
        alias: Optional[str] = None,
        entity_class: Type[Entity] = Entity,
        schema_store: Optional[SchemaStore] = None,
        insert_strategy: Optional[str] = None,
    ):
        self.connection = connection
        self.name = schema.name
        self.alias = alias or schema.name
        self.entity_class = entity_class
        self.schema_store = schema_store if schema_store is not None else default_store
        self.schema_store.register(schema)
        self.insert_strategy = insert_strategy or connection.config.insert_strategy
        if self.insert_strategy not in ("streaming", "dml"):
            raise ValueError(f"Unknown insert strategy {self.insert_strategy!r}")
        self.table_ref = connection.table_ref(schema.name)
        self.translator = DialectTranslator(self.table_ref)
        self.events = EventManager()
        self._rules: List[Tuple[str, Rule]] = []
        self._sa_table: Optional[Tuple[TableSchema, Table]] = None

    def __str__(self):
        return f"{self.alias} ({self.table_ref})"

    @property
    def schema(self) -> TableSchema:
        """Latest registered schema for this table."""
        return self.schema_store.get_latest(self.name)

    def set_schema(self, schema: TableSchema) -> str:
        if schema.name != self.name:
            raise ValueError(f"Schema for {schema.name} cannot be registered on table {self.name}")
        return self.schema_store.register(schema)

    @property
    def primary_key(self) -> List[str]:
        return list(self.schema.primary_key)

    @property
    def sa_table(self) -> Table:
        """Query-builder table for the latest schema, rebuilt only when the schema changes."""
        schema = self.schema
        if self._sa_table is None or self._sa_table[0] is not schema:
            self._sa_table = (schema, to_sqlalchemy_table(schema))
        return self._sa_table[1]

    # Hooks

    def on(self, event: str, listener: Callable[..., Any]) -> None:
        self.events.on(event, listener)

    def add_behavior(self, behavior: Any) -> Any:
        return behavior.attach(self)

    def add_rule(self, rule: Rule, name: Optional[str] = None) -> None:
        """Registers an application rule run before every save.

        ``rule(entity)`` returns ``None`` when the entity passes, or an error
        message recorded on the entity under ``name``.
        """
        self._rules.append((name or getattr(rule, "__name__", "rule"), rule))

    def check_rules(self, entity: Entity) -> bool:
        passed = True
        for name, rule in self._rules:
            message = rule(entity)
            if message:
                entity.set_errors({name: [message]})
                passed = False
        return passed

    # Reads

    def query(self) -> WarehouseQuery:
        return WarehouseQuery(self)

    def find(
        self,
        conditions: Conditions = None,
        order_by: OrderBy = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> WarehouseQuery:
        query = self.query()
        if conditions is not None:
            query = query.where(conditions)
        if order_by is not None:
            query = query.order_by(order_by)
        if limit is not None:
            query = query.limit(limit)
        if offset is not None:
            query = query.offset(offset)
        return query

    def get(self, *primary_key_values: Any) -> Entity:
        """Loads one entity by primary key.

        Raises:
            InvalidPrimaryKeyError: If the number of values does not match the key.
            RecordNotFoundError: If no row matches.
        """
        primary_key = self.primary_key
        if not primary_key or len(primary_key_values) != len(primary_key):
            raise InvalidPrimaryKeyError(
                f"Table {self.name} expects {len(primary_key)} primary key value(s), got {len(primary_key_values)}"
            )
        with trace_context():
            entity = self.find(dict(zip(primary_key, primary_key_values))).first()
        if entity is None:
            raise RecordNotFoundError(
                f"Record not found in table {self.name}",
                details={"primary_key": dict(zip(primary_key, map(str, primary_key_values)))},
            )
        return entity

    def new_entity(self, data: Optional[Dict[str, Any]] = None) -> Entity:
        return self.entity_class(data, new=True, source=self.alias)

    def hydrate(self, row: Dict[str, Any]) -> Entity:
        return self.entity_class(row, new=False, source=self.alias, mark_clean=True)

    # Writes

    def save(self, entity: Entity, options: Union[SaveOptions, Dict[str, Any], None] = None):
        """Inserts a new entity or updates a modified one.

        Returns:
            The entity on success (including the no-op case of a clean,
            persisted entity), or ``False`` when validation fails. No remote
            call is made in either short-circuit case.

        Raises:
            TypeCoercionError: If a value does not fit its column type.
            InvalidPrimaryKeyError: If an update has no primary key values.
            SaveFailedError: If the warehouse call failed. The entity is left
                as it was, but the warehouse write is not rolled back.
        """
        options = _options(options)

        if entity.has_errors(options.associated):
            return False
        if not entity.is_new() and not entity.is_dirty():
            return entity
        if options.check_rules and not self.check_rules(entity):
            return False

        with trace_context() as trace_id:
            is_new = entity.is_new()
            # before_save listeners may stamp fields; a failed save undoes them
            state = entity.snapshot()
            try:
                self.events.dispatch(table_events.BEFORE_SAVE, entity=entity, options=options)
                schema = self.schema
                data = self._coerce(entity, schema)
                if is_new:
                    operation = self._insert_operation(data, schema)
                else:
                    operation = self._update_operation(entity, data, schema)
            except (TypeCoercionError, InvalidPrimaryKeyError):
                entity.restore(state)
                raise

            try:
                operation()
                self.events.dispatch(table_events.AFTER_SAVE, entity=entity, options=options)
            except Exception as e:
                entity.restore(state)
                logger.error(f"Save on {self} failed: {e}")
                self.events.dispatch(table_events.SAVE_ERROR, entity=entity, options=options, error=e)
                raise SaveFailedError(
                    "Save failed; the warehouse write was not rolled back.",
                    cause=e,
                    details={"table": str(self.table_ref), "trace_id": trace_id},
                ) from e

        if options.clean_on_success:
            entity.clean()
            entity.set_new(False)
            entity.set_source(self.alias)
        return entity

    def delete(self, entity: Entity, options: Union[SaveOptions, Dict[str, Any], None] = None) -> bool:
        """Deletes the entity's row; success means the job completed.

        Raises:
            InvalidPrimaryKeyError: If the entity has no primary key values.
            ExecutionError: If the warehouse call failed.
        """
        options = _options(options)
        schema = self.schema
        where, bindings = self._primary_key_predicate(entity, schema)
        sql = self.statement(f"DELETE FROM {quote(self.name)} WHERE {where}", bindings)

        with trace_context():
            self.events.dispatch(table_events.BEFORE_DELETE, entity=entity, options=options)
            try:
                result = self.connection.run(sql)
                success = self.connection.is_complete(result)
            except Exception as e:
                logger.error(f"Delete on {self} failed: {e}")
                self.events.dispatch(table_events.DELETE_ERROR, entity=entity, options=options, error=e)
                raise ExecutionError(
                    f"Delete failed on {self.table_ref}",
                    code=ErrorCode.DELETE_FAILED,
                    cause=e,
                ) from e
            if success:
                self.events.dispatch(table_events.AFTER_DELETE, entity=entity, options=options)
        return success

    def statement(self, sql: str, bindings: Sequence[Binding]) -> str:
        """Translates generic SQL for this table and inlines its bindings."""
        return inline(self.translator.translate(sql), bindings)

    def _coerce(self, entity: Entity, schema: TableSchema) -> Dict[str, Any]:
        data = {}
        for column in schema.columns:
            if column.name in entity:
                data[column.name] = mapper.coerce(entity.get(column.name), column.relational_type)
        return data

    def _binding(self, placeholder: str, value: Any, column: str, schema: TableSchema) -> Binding:
        return Binding(
            placeholder=placeholder,
            value=value,
            type=mapper.binding_type(schema.type_of(column)),
        )

    def _primary_key_predicate(self, entity: Entity, schema: TableSchema) -> Tuple[str, List[Binding]]:
        if not schema.primary_key:
            raise InvalidPrimaryKeyError(f"Table {self.name} declares no primary key")
        clauses = []
        bindings = []
        for key in schema.primary_key:
            value = entity.get_original(key)
            if value is None:
                raise InvalidPrimaryKeyError(
                    f"Primary key column {key!r} has no value",
                    details={"table": self.name, "column": key},
                )
            placeholder = f"pk_{key}"
            clauses.append(f"{quote(key)} = :{placeholder}")
            bindings.append(self._binding(
                placeholder, mapper.coerce(value, schema.type_of(key)), key, schema
            ))
        return " AND ".join(clauses), bindings

    def _insert_operation(self, data: Dict[str, Any], schema: TableSchema) -> Callable[[], None]:
        if self.insert_strategy == "streaming":
            def _stream():
                errors = self.connection.insert_rows(self.table_ref, [data])
                if errors:
                    raise ExecutionError(
                        f"Insert failed: {json.dumps(errors, default=str)}",
                        code=ErrorCode.INSERT_FAILED,
                        details={"errors": errors},
                    )
            return _stream

        columns = list(data)
        placeholders = [f"ins_{column}" for column in columns]
        sql = self.statement(
            f"INSERT INTO {quote(self.name)} ({', '.join(quote(c) for c in columns)}) "
            f"VALUES ({', '.join(':' + p for p in placeholders)})",
            [
                self._binding(placeholder, data[column], column, schema)
                for placeholder, column in zip(placeholders, columns)
            ],
        )
        return lambda: self._run_to_completion(sql)

    def _update_operation(self, entity: Entity, data: Dict[str, Any], schema: TableSchema) -> Callable[[], None]:
        where, bindings = self._primary_key_predicate(entity, schema)
        columns = [
            column for column in schema.column_names
            if column in data and column not in schema.primary_key and entity.is_dirty(column)
        ]
        if not columns:
            logger.debug(f"Nothing to update on {self}")
            return lambda: None

        assignments = []
        for column in columns:
            placeholder = f"set_{column}"
            assignments.append(f"{quote(column)} = :{placeholder}")
            bindings.append(self._binding(placeholder, data[column], column, schema))
        sql = self.statement(
            f"UPDATE {quote(self.name)} SET {', '.join(assignments)} WHERE {where}",
            bindings,
        )
        return lambda: self._run_to_completion(sql)

    def _run_to_completion(self, sql: str) -> None:
        result = self.connection.run(sql)
        if not self.connection.is_complete(result):
            raise ExecutionError(
                f"Warehouse job {result.job_id} did not complete",
                code=ErrorCode.JOB_INCOMPLETE,
            )
