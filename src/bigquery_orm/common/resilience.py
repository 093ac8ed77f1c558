"""
Resilience Module: Circuit Breakers for warehouse job submission.

A breaker lets a connection Fail Fast once the warehouse has rejected a run of
consecutive submissions, instead of sending every caller into its own
timeout. It never retries; retries stay with the client library's policy.

Statement errors (bad SQL, missing tables) are caller errors and are excluded
so they cannot open the breaker.
"""
import pybreaker
from typing import Callable, List, Optional, Tuple, Type, Union
from google.api_core import exceptions as google_exceptions

from bigquery_orm.common.logger import get_logger

logger = get_logger(__name__)

# Errors caused by the statement itself, not by warehouse availability.
STATEMENT_ERRORS: Tuple[Type[Exception], ...] = (
    google_exceptions.BadRequest,
    google_exceptions.NotFound,
    google_exceptions.Forbidden,
)

Exclusion = Union[Type[Exception], Callable[[BaseException], bool]]


def is_statement_error(exc: BaseException) -> bool:
    # Passed as a predicate: the client error classes have a custom metaclass.
    return isinstance(exc, STATEMENT_ERRORS)


class ObservabilityListener(pybreaker.CircuitBreakerListener):
    """Listener to export circuit breaker state changes and failures to logs."""

    def state_change(self, cb, old_state, new_state):
        old_name = old_state.name if old_state else None
        logger.warning(
            f"Circuit Breaker '{cb.name}' changed state: {old_name} -> {new_state.name}"
        )

    def failure(self, cb, exc):
        logger.error(
            f"Circuit Breaker '{cb.name}' recorded failure: {type(exc).__name__}: {exc}"
        )


def create_breaker(
    name: str,
    fail_max: int = 5,
    reset_timeout: int = 60,
    exclude: Optional[List[Exclusion]] = None
) -> pybreaker.CircuitBreaker:
    """Factory to create a configured Circuit Breaker."""
    return pybreaker.CircuitBreaker(
        fail_max=fail_max,
        reset_timeout=reset_timeout,
        name=name,
        listeners=[ObservabilityListener()],
        exclude=[is_statement_error] if exclude is None else exclude
    )
