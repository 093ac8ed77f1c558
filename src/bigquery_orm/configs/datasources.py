import json
import pathlib
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from bigquery_orm.common.errors import ConfigurationError


class BigQueryConnectionConfig(BaseModel):
    """Connection settings handed to the warehouse client.

    Keys are accepted in the camelCase form used by datasource files
    (``projectId``, ``dataSet``, ...) or by their snake_case field names.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = "bigquery"
    project_id: Optional[str] = Field(default=None, alias="projectId")
    data_set: Optional[str] = Field(default=None, alias="dataSet")
    key_file: Dict[str, Any] = Field(default_factory=dict, alias="keyFile")
    key_file_path: Optional[str] = Field(default=None, alias="keyFilePath")
    request_timeout: float = Field(default=0, alias="requestTimeout", ge=0)
    retries: int = Field(default=3, alias="retries", ge=0)
    location: str = Field(default="", alias="location")
    maximum_bytes_billed: Optional[int] = Field(default=1000000, alias="maximumBytesBilled")
    insert_strategy: Literal["streaming", "dml"] = Field(default="streaming", alias="insertStrategy")
    breaker_fail_max: Optional[int] = Field(
        default=None,
        alias="breakerFailMax",
        description="Consecutive job failures before submissions fail fast. None disables the breaker.",
    )
    breaker_reset_timeout: int = Field(default=60, alias="breakerResetTimeout")

    @field_validator("key_file", mode="before")
    @classmethod
    def _parse_key_file(cls, value: Union[str, Dict[str, Any], None]) -> Dict[str, Any]:
        if value is None or value == "":
            return {}
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError as exc:
                raise ValueError(f"keyFile is not valid JSON: {exc}") from exc
        return value

    def to_dict(self) -> Dict[str, Any]:
        """Returns the config keyed the way datasource files spell it."""
        return self.model_dump(by_alias=True)


class DatasourceConfig(BaseModel):
    """Configuration for a single warehouse datasource."""
    id: str
    description: Optional[str] = None
    connection: BigQueryConnectionConfig


class DatasourceFileConfig(BaseModel):
    """File-level schema for datasources.yaml."""
    version: int = Field(1, description="Schema version")
    datasources: List[DatasourceConfig]


def load_datasources(path: pathlib.Path) -> List[DatasourceConfig]:
    """Loads datasource configurations from YAML.

    Args:
        path: Location of the datasources file.

    Returns:
        List[DatasourceConfig]: The validated datasource entries.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the YAML is malformed or fails validation.
    """
    if not path.exists():
        raise FileNotFoundError(f"Datasource config not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML from {path}: {e}", cause=e) from e

    try:
        return DatasourceFileConfig.model_validate(raw).datasources
    except ValidationError as e:
        raise ConfigurationError(f"Datasource Configuration Invalid: {e}", cause=e) from e


def get_datasource(configs: List[DatasourceConfig], datasource_id: str) -> DatasourceConfig:
    for config in configs:
        if config.id == datasource_id:
            return config
    raise ConfigurationError(f"Unknown datasource ID: {datasource_id}")
