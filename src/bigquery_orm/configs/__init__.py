from .datasources import (
    BigQueryConnectionConfig,
    DatasourceConfig,
    DatasourceFileConfig,
    load_datasources,
    get_datasource,
)

__all__ = [
    "BigQueryConnectionConfig",
    "DatasourceConfig",
    "DatasourceFileConfig",
    "load_datasources",
    "get_datasource",
]
