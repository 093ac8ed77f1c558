"""
Job Client Adapter.

Submits SQL to the warehouse as a query job and blocks until the job reaches a
terminal state. There is no statement preparation and no transaction: every
call is one autonomous job. Retry and timeout policy belong to the client
library and are only configured here.
"""
import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import pybreaker
from google.cloud import bigquery

from bigquery_orm.common.errors import ErrorCode, ExecutionError
from bigquery_orm.common.logger import current_trace_id
from bigquery_orm.common.resilience import create_breaker
from bigquery_orm.configs.datasources import BigQueryConnectionConfig
from bigquery_orm.models import QualifiedTableRef

logger = logging.getLogger(__name__)


class QueryJobResult:
    """Raw handle for a finished job: the job itself plus its row iterator."""

    def __init__(self, job: Any, rows: Any):
        self.job = job
        self.rows = rows

    @property
    def job_id(self) -> Optional[str]:
        return getattr(self.job, "job_id", None)

    @property
    def affected_rows(self) -> Optional[int]:
        return getattr(self.job, "num_dml_affected_rows", None)


class JobClient:
    """Runs statements against one warehouse client.

    Args:
        client: A ``google.cloud.bigquery.Client`` (or anything shaped like it).
        config: Connection settings supplying timeout, retry, location and
            billing limits.
    """

    def __init__(self, client: Any, config: Optional[BigQueryConnectionConfig] = None):
        self.client = client
        self.config = config or BigQueryConnectionConfig()
        self._breaker: Optional[pybreaker.CircuitBreaker] = None
        if self.config.breaker_fail_max:
            self._breaker = create_breaker(
                f"bigquery:{self.config.project_id}",
                fail_max=self.config.breaker_fail_max,
                reset_timeout=self.config.breaker_reset_timeout,
            )

    @property
    def timeout(self) -> Optional[float]:
        return self.config.request_timeout or None

    @property
    def retry(self):
        return bigquery.DEFAULT_RETRY if self.config.retries > 0 else None

    def _job_config(self) -> bigquery.QueryJobConfig:
        job_config = bigquery.QueryJobConfig()
        if self.config.maximum_bytes_billed:
            job_config.maximum_bytes_billed = self.config.maximum_bytes_billed
        trace_id = current_trace_id()
        if trace_id:
            job_config.labels = {"trace_id": trace_id}
        return job_config

    def _guarded(self, func, *args, **kwargs):
        if self._breaker is None:
            return func(*args, **kwargs)
        try:
            return self._breaker.call(func, *args, **kwargs)
        except pybreaker.CircuitBreakerError as e:
            logger.warning(f"Circuit breaker '{self._breaker.name}' is open, rejecting submission.")
            raise ExecutionError(
                "Warehouse job submission rejected: circuit breaker open",
                code=ErrorCode.SERVICE_UNAVAILABLE,
                cause=e,
            ) from e

    def _run_query(self, sql: str) -> QueryJobResult:
        job = self.client.query(
            sql,
            job_config=self._job_config(),
            location=self.config.location or None,
            timeout=self.timeout,
            retry=self.retry,
        )
        rows = job.result(timeout=self.timeout)
        return QueryJobResult(job, rows)

    def execute(self, sql: str) -> QueryJobResult:
        """Submits ``sql`` and blocks until the job finishes.

        Transport and job errors raised by the client surface unmodified.
        """
        logger.debug(f"Submitting warehouse job: {sql}")
        start = time.perf_counter()
        result = self._guarded(self._run_query, sql)
        duration = time.perf_counter() - start
        logger.info(f"Warehouse job {result.job_id} finished in {duration * 1000:.1f}ms")
        return result

    def is_complete(self, result: QueryJobResult) -> bool:
        return bool(result.job.done())

    def insert_rows(
        self,
        table_ref: QualifiedTableRef,
        rows: Sequence[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        """Streams ``rows`` into ``table_ref``.

        Returns:
            List[Dict[str, Any]]: Per-row errors reported by the warehouse;
            empty on success.
        """
        logger.debug(f"Streaming {len(rows)} row(s) into {table_ref}")
        errors = self._guarded(
            self.client.insert_rows_json,
            str(table_ref),
            list(rows),
            timeout=self.timeout,
            retry=self.retry,
        )
        if errors:
            logger.error(f"Streaming insert into {table_ref} reported errors: {errors}")
        return list(errors or [])
