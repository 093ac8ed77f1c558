from collections import namedtuple
from unittest.mock import MagicMock

import pytest

from bigquery_orm.configs.datasources import BigQueryConnectionConfig
from bigquery_orm.connection import Connection
from bigquery_orm.driver import BigQueryDriver
from bigquery_orm.execution.job_client import JobClient
from bigquery_orm.models import QualifiedTableRef, TableSchema
from bigquery_orm.orm.table import BigQueryTable
from bigquery_orm.schema.store import SchemaStore

SchemaField = namedtuple("SchemaField", ["name", "field_type", "mode"])


class FakeRowIterator:
    """Single-pass row iterator shaped like the client's RowIterator."""

    def __init__(self, rows=(), schema=None, total_rows=None):
        self._rows = list(rows)
        self.schema = list(schema or [])
        self.total_rows = len(self._rows) if total_rows is None else total_rows
        self._consumed = False

    def __iter__(self):
        if self._consumed:
            return iter(())
        self._consumed = True
        return iter(self._rows)


def make_job(rows=None, done=True, job_id="job_1", affected_rows=None):
    job = MagicMock()
    job.job_id = job_id
    job.num_dml_affected_rows = affected_rows
    job.done.return_value = done
    job.result.return_value = rows if rows is not None else FakeRowIterator()
    return job


@pytest.fixture
def table_ref():
    return QualifiedTableRef(project_id="p", dataset_name="d", table_name="t")


@pytest.fixture
def connection_config():
    return BigQueryConnectionConfig(project_id="p", data_set="d")


@pytest.fixture
def fake_client():
    """Mocked warehouse client: every query returns an empty, completed job."""
    client = MagicMock()
    client.query.return_value = make_job()
    client.insert_rows_json.return_value = []
    return client


@pytest.fixture
def connection(fake_client, connection_config):
    driver = BigQueryDriver(connection_config)
    return Connection(driver, job_client=JobClient(fake_client, connection_config))


@pytest.fixture
def schema():
    return TableSchema.from_types("t", {"id": "string", "name": "string"}, primary_key=["id"])


@pytest.fixture
def table(connection, schema):
    return BigQueryTable(connection, schema, schema_store=SchemaStore())


def submitted_sql(fake_client):
    """Returns the SQL text of the last submitted job."""
    return fake_client.query.call_args[0][0]
