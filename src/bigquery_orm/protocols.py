from typing import Any, List, Protocol, runtime_checkable


@runtime_checkable
class Executable(Protocol):
    """Anything that can run warehouse SQL and hand back a cursor."""

    def execute(self, sql: str) -> Any:
        """Execute ``sql`` and return a result cursor."""
        ...


@runtime_checkable
class Transactable(Protocol):
    """Transaction contract of a relational connection.

    Warehouse implementations report every operation as unsupported.
    """

    def start_transaction(self) -> bool:
        ...

    def commit_transaction(self) -> bool:
        ...

    def rollback_transaction(self) -> bool:
        ...

    def in_transaction(self) -> bool:
        ...


@runtime_checkable
class SchemaDescribable(Protocol):
    """Exposes the DDL and schema-description dialect."""

    def schema_dialect(self) -> Any:
        ...

    def list_tables(self) -> List[str]:
        ...
