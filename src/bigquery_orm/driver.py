"""
Warehouse driver.

Owns the RPC client and answers the relational-driver capability contract.
Everything the warehouse cannot do (transactions, savepoints, foreign keys,
generated keys) is reported as unsupported rather than simulated.
"""
import logging
from typing import Any, Dict, Optional, Union

from google.cloud import bigquery
from google.oauth2 import service_account

from bigquery_orm.capabilities import DriverCapabilities, UnsupportedTransactions
from bigquery_orm.common.errors import MissingConnectionError
from bigquery_orm.configs.datasources import BigQueryConnectionConfig
from bigquery_orm.dialect.compiler import BigQuerySQLDialect
from bigquery_orm.schema.dialect import BigQuerySchemaDialect

logger = logging.getLogger(__name__)


class BigQueryDriver:
    """Driver for one warehouse project/dataset.

    Args:
        config: Connection settings, as a model or as a mapping keyed the way
            datasource files spell them (``projectId``, ``dataSet``, ...).
            Missing keys take their defaults.
    """

    def __init__(self, config: Union[BigQueryConnectionConfig, Dict[str, Any], None] = None):
        if isinstance(config, BigQueryConnectionConfig):
            self.config = config
        else:
            self.config = BigQueryConnectionConfig.model_validate(config or {})
        self._client: Optional[bigquery.Client] = None
        self._sql_dialect = BigQuerySQLDialect()
        self.transactions = UnsupportedTransactions()
        self.connected = False

    def __str__(self):
        return f"{self.config_name()} ({self.config.project_id}.{self.config.data_set})"

    def config_name(self) -> str:
        return self.config.name

    def get_config(self, key: Optional[str] = None) -> Any:
        """Returns the whole config, or one value by its camelCase or field name."""
        data = self.config.to_dict()
        if not key:
            return data
        if key in data:
            return data[key]
        return getattr(self.config, key)

    def _credentials(self):
        if self.config.key_file:
            return service_account.Credentials.from_service_account_info(self.config.key_file)
        if self.config.key_file_path:
            return service_account.Credentials.from_service_account_file(self.config.key_file_path)
        return None

    def connect(self) -> bool:
        """Builds the warehouse client.

        Raises:
            MissingConnectionError: If credentials or the client cannot be
                constructed.
        """
        try:
            self._client = bigquery.Client(
                project=self.config.project_id,
                credentials=self._credentials(),
                location=self.config.location or None,
            )
        except Exception as e:
            logger.error(f"Failed to connect to {self}: {e}")
            raise MissingConnectionError(str(e), cause=e) from e
        self.connected = True
        logger.info(f"Connected to {self}")
        return True

    def get_client(self) -> bigquery.Client:
        if not self.is_connected():
            self.connect()
        return self._client

    def disconnect(self) -> None:
        if self._client is not None and hasattr(self._client, "close"):
            self._client.close()
        self._client = None
        self.connected = False

    def is_connected(self) -> bool:
        return self.connected

    def enabled(self) -> bool:
        return True

    def capabilities(self) -> DriverCapabilities:
        return DriverCapabilities()

    def supports_dynamic_constraints(self) -> bool:
        return False

    def supports_savepoints(self) -> bool:
        return False

    def supports_transactions(self) -> bool:
        return False

    def schema_dialect(self) -> BigQuerySchemaDialect:
        return BigQuerySchemaDialect()

    def sql_dialect(self) -> BigQuerySQLDialect:
        return self._sql_dialect

    def quote_identifier(self, identifier: str) -> str:
        return self._sql_dialect.identifier_preparer.quote(identifier)

    def last_insert_id(self, table: Optional[str] = None, column: Optional[str] = None) -> None:
        return None

    def start_transaction(self) -> bool:
        return self.transactions.start_transaction()

    def commit_transaction(self) -> bool:
        return self.transactions.commit_transaction()

    def rollback_transaction(self) -> bool:
        return self.transactions.rollback_transaction()

    def savepoint_sql(self, name: str) -> str:
        return self.transactions.savepoint_sql(name)

    def release_savepoint_sql(self, name: str) -> str:
        return self.transactions.release_savepoint_sql(name)

    def rollback_savepoint_sql(self, name: str) -> str:
        return self.transactions.rollback_savepoint_sql(name)

    def disable_foreign_key_sql(self) -> str:
        return ""

    def enable_foreign_key_sql(self) -> str:
        return ""
