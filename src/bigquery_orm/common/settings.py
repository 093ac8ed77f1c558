from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

from bigquery_orm.configs.datasources import BigQueryConnectionConfig

# Load environment variables from .env into os.environ
load_dotenv()


class Settings(BaseSettings):
    """Application configuration settings backed by environment variables."""

    project_id: Optional[str] = Field(default=None, validation_alias="GOOGLE_PROJECT_ID")
    data_set: Optional[str] = Field(default=None, validation_alias="BIGQUERY_DATASET")
    credentials_path: Optional[str] = Field(default=None, validation_alias="GOOGLE_CREDENTIALS_PATH")
    location: str = Field(default="", validation_alias="BIGQUERY_LOCATION")
    request_timeout: float = Field(
        default=0,
        validation_alias="BIGQUERY_REQUEST_TIMEOUT",
        description="Per-call timeout in seconds for job submission and polling. 0 means no timeout."
    )
    retries: int = Field(
        default=3,
        validation_alias="BIGQUERY_RETRIES",
        description="0 disables the client library retry policy."
    )
    maximum_bytes_billed: Optional[int] = Field(
        default=1000000,
        validation_alias="BIGQUERY_MAXIMUM_BYTES_BILLED",
    )
    insert_strategy: str = Field(
        default="streaming",
        validation_alias="BIGQUERY_INSERT_STRATEGY",
        description="How new rows are written: 'streaming' (insert-row RPC) or 'dml' (INSERT statement)."
    )
    datasource_config_path: str = Field(default="configs/datasources.yaml", validation_alias="DATASOURCE_CONFIG")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=False, validation_alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    def connection_config(self) -> BigQueryConnectionConfig:
        """Builds the warehouse connection config from environment settings."""
        return BigQueryConnectionConfig(
            project_id=self.project_id,
            data_set=self.data_set,
            key_file_path=self.credentials_path,
            location=self.location,
            request_timeout=self.request_timeout,
            retries=self.retries,
            maximum_bytes_billed=self.maximum_bytes_billed,
            insert_strategy=self.insert_strategy,
        )

    def configure_env(self, env: str) -> None:
        """Loads environment-specific variables and reloads settings."""
        if not env:
            return

        load_dotenv(f".env.{env}", override=True)
        new_settings = Settings()
        self.__dict__.update(new_settings.__dict__)


settings = Settings()

# Configure logging during import
from bigquery_orm.common.logger import configure_logging
configure_logging(
    level=settings.log_level,
    json_format=settings.log_json
)
