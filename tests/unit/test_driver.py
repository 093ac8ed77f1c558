from unittest.mock import MagicMock, patch

import pytest

from bigquery_orm.common.errors import MissingConnectionError
from bigquery_orm.driver import BigQueryDriver
from bigquery_orm.schema.dialect import BigQuerySchemaDialect


def test_defaults_are_merged_into_config():
    driver = BigQueryDriver({"projectId": "p", "dataSet": "d"})

    config = driver.get_config()

    assert config["projectId"] == "p"
    assert config["dataSet"] == "d"
    assert config["keyFile"] == {}
    assert config["keyFilePath"] is None
    assert config["requestTimeout"] == 0
    assert config["retries"] == 3
    assert config["location"] == ""
    assert config["maximumBytesBilled"] == 1000000
    assert driver.get_config("retries") == 3
    assert driver.config_name() == "bigquery"


def test_key_file_json_string_is_parsed():
    driver = BigQueryDriver({"projectId": "p", "keyFile": '{"type": "service_account"}'})

    assert driver.get_config("keyFile") == {"type": "service_account"}


def test_connect_builds_client_from_key_file():
    # Arrange
    driver = BigQueryDriver({"projectId": "p", "dataSet": "d", "keyFile": {"type": "service_account"}})
    credentials = MagicMock()

    # Act
    with patch("bigquery_orm.driver.service_account.Credentials.from_service_account_info",
               return_value=credentials) as from_info, \
            patch("bigquery_orm.driver.bigquery.Client") as client_cls:
        connected = driver.connect()

    # Assert
    assert connected is True
    assert driver.is_connected() is True
    from_info.assert_called_once_with({"type": "service_account"})
    client_cls.assert_called_once_with(project="p", credentials=credentials, location=None)
    assert driver.get_client() is client_cls.return_value


def test_connect_uses_key_file_path():
    driver = BigQueryDriver({"projectId": "p", "keyFilePath": "/secrets/key.json", "location": "EU"})

    with patch("bigquery_orm.driver.service_account.Credentials.from_service_account_file") as from_file, \
            patch("bigquery_orm.driver.bigquery.Client") as client_cls:
        driver.connect()

    from_file.assert_called_once_with("/secrets/key.json")
    client_cls.assert_called_once_with(project="p", credentials=from_file.return_value, location="EU")


def test_connect_failure_raises_missing_connection():
    driver = BigQueryDriver({"projectId": "p"})

    with patch("bigquery_orm.driver.bigquery.Client", side_effect=ValueError("no credentials")):
        with pytest.raises(MissingConnectionError) as exc_info:
            driver.connect()

    assert exc_info.value.reason == "no credentials"
    assert isinstance(exc_info.value.__cause__, ValueError)
    assert driver.is_connected() is False


def test_disconnect_closes_client():
    driver = BigQueryDriver({"projectId": "p"})
    with patch("bigquery_orm.driver.bigquery.Client") as client_cls:
        driver.connect()

    driver.disconnect()

    client_cls.return_value.close.assert_called_once()
    assert driver.is_connected() is False


def test_unsupported_features_report_absence():
    driver = BigQueryDriver({"projectId": "p"})

    assert driver.start_transaction() is False
    assert driver.commit_transaction() is False
    assert driver.rollback_transaction() is False
    assert driver.savepoint_sql("sp1") == ""
    assert driver.release_savepoint_sql("sp1") == ""
    assert driver.rollback_savepoint_sql("sp1") == ""
    assert driver.disable_foreign_key_sql() == ""
    assert driver.enable_foreign_key_sql() == ""
    assert driver.supports_savepoints() is False
    assert driver.supports_dynamic_constraints() is False
    assert driver.supports_transactions() is False
    assert driver.last_insert_id() is None
    assert driver.enabled() is True


def test_capabilities_and_dialects():
    driver = BigQueryDriver({"projectId": "p"})

    capabilities = driver.capabilities()

    assert capabilities.supports_transactions is False
    assert capabilities.supports_streaming_insert is True
    assert isinstance(driver.schema_dialect(), BigQuerySchemaDialect)
    assert driver.quote_identifier("key") == "`key`"
    assert driver.quote_identifier("name") == "name"
