from enum import Enum

from pydantic import BaseModel


class DriverCapability(str, Enum):
    """Capability flags a relational driver may advertise."""

    SUPPORTS_TRANSACTIONS = "supports_transactions"
    SUPPORTS_SAVEPOINTS = "supports_savepoints"
    SUPPORTS_FOREIGN_KEYS = "supports_foreign_keys"
    SUPPORTS_DYNAMIC_CONSTRAINTS = "supports_dynamic_constraints"
    SUPPORTS_AUTO_INCREMENT = "supports_auto_increment"
    SUPPORTS_PARAMETER_BINDING = "supports_parameter_binding"
    SUPPORTS_STREAMING_INSERT = "supports_streaming_insert"


class DriverCapabilities(BaseModel):
    supports_transactions: bool = False
    supports_savepoints: bool = False
    supports_foreign_keys: bool = False
    supports_dynamic_constraints: bool = False
    supports_auto_increment: bool = False
    supports_parameter_binding: bool = False
    supports_streaming_insert: bool = True

    def enabled(self) -> set:
        """Returns the set of advertised capabilities."""
        return {
            capability
            for capability in DriverCapability
            if getattr(self, capability.value)
        }


class UnsupportedTransactions:
    """Transaction and savepoint contract for a backend without transactions.

    Every operation is a no-op that reports "unsupported".
    """

    def start_transaction(self) -> bool:
        return False

    def commit_transaction(self) -> bool:
        return False

    def rollback_transaction(self) -> bool:
        return False

    def in_transaction(self) -> bool:
        return False

    def savepoint_sql(self, name: str) -> str:
        return ""

    def release_savepoint_sql(self, name: str) -> str:
        return ""

    def rollback_savepoint_sql(self, name: str) -> str:
        return ""
