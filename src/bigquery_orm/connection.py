import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from bigquery_orm.capabilities import DriverCapabilities, UnsupportedTransactions
from bigquery_orm.configs.datasources import BigQueryConnectionConfig
from bigquery_orm.driver import BigQueryDriver
from bigquery_orm.execution.cursor import ResultCursor
from bigquery_orm.execution.job_client import JobClient, QueryJobResult
from bigquery_orm.models import QualifiedTableRef
from bigquery_orm.schema.dialect import BigQuerySchemaDialect

logger = logging.getLogger(__name__)


class Connection:
    """Connection to one warehouse dataset.

    Composes the driver (client lifecycle), a ``JobClient`` (statement
    execution) and ``UnsupportedTransactions`` (transaction contract).
    """

    def __init__(self, driver: BigQueryDriver, job_client: Optional[JobClient] = None):
        self.driver = driver
        self.transactions = UnsupportedTransactions()
        self._job_client = job_client

    @classmethod
    def from_config(cls, config: Union[BigQueryConnectionConfig, Dict[str, Any], None] = None, **overrides) -> "Connection":
        """Builds a connection from a config model or mapping plus keyword overrides."""
        if isinstance(config, BigQueryConnectionConfig):
            config = config.model_copy(update=overrides)
        else:
            config = BigQueryConnectionConfig.model_validate({**(config or {}), **overrides})
        return cls(BigQueryDriver(config))

    @classmethod
    def from_settings(cls, settings=None) -> "Connection":
        """Builds a connection from environment settings."""
        if settings is None:
            from bigquery_orm.common.settings import settings
        return cls(BigQueryDriver(settings.connection_config()))

    @property
    def config(self) -> BigQueryConnectionConfig:
        return self.driver.config

    def config_name(self) -> str:
        return self.driver.config_name()

    @property
    def job_client(self) -> JobClient:
        if self._job_client is None:
            self._job_client = JobClient(self.driver.get_client(), self.config)
        return self._job_client

    def connect(self) -> bool:
        """Connects the driver; raises ``MissingConnectionError`` on failure."""
        return self.driver.connect()

    def disconnect(self) -> None:
        if self.driver.is_connected():
            self.driver.disconnect()
        self._job_client = None

    def is_connected(self) -> bool:
        return self.driver.is_connected()

    def enabled(self) -> bool:
        return self.driver.enabled()

    def capabilities(self) -> DriverCapabilities:
        return self.driver.capabilities()

    def schema_dialect(self) -> BigQuerySchemaDialect:
        return self.driver.schema_dialect()

    def list_tables(self) -> List[str]:
        return []

    def table_ref(self, table_name: str) -> QualifiedTableRef:
        return QualifiedTableRef(
            project_id=self.config.project_id or "",
            dataset_name=self.config.data_set or "",
            table_name=table_name,
        )

    def run(self, sql: str) -> QueryJobResult:
        """Submits ``sql`` and returns the raw job handle."""
        return self.job_client.execute(sql)

    def execute(self, sql: str) -> ResultCursor:
        result = self.run(sql)
        return ResultCursor(result.rows, affected_rows=result.affected_rows)

    def is_complete(self, result: QueryJobResult) -> bool:
        return self.job_client.is_complete(result)

    def insert_rows(self, table_ref: QualifiedTableRef, rows: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return self.job_client.insert_rows(table_ref, rows)

    def last_insert_id(self, table: Optional[str] = None, column: Optional[str] = None) -> None:
        return None

    def quote_identifier(self, identifier: str) -> str:
        return self.driver.quote_identifier(identifier)

    def start_transaction(self) -> bool:
        return self.transactions.start_transaction()

    def commit_transaction(self) -> bool:
        return self.transactions.commit_transaction()

    def rollback_transaction(self) -> bool:
        return self.transactions.rollback_transaction()

    def in_transaction(self) -> bool:
        return self.transactions.in_transaction()

    def savepoint_sql(self, name: str) -> str:
        return self.transactions.savepoint_sql(name)

    def release_savepoint_sql(self, name: str) -> str:
        return self.transactions.release_savepoint_sql(name)

    def rollback_savepoint_sql(self, name: str) -> str:
        return self.transactions.rollback_savepoint_sql(name)

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()
