import pytest
from google.api_core import exceptions as google_exceptions

from bigquery_orm.common.resilience import create_breaker, is_statement_error


@pytest.mark.parametrize("exc", [
    google_exceptions.BadRequest("syntax error"),
    google_exceptions.NotFound("no table"),
    google_exceptions.Forbidden("denied"),
])
def test_statement_errors_are_excluded(exc):
    breaker = create_breaker("warehouse", fail_max=1)

    assert is_statement_error(exc) is True
    assert breaker.is_system_error(exc) is False


@pytest.mark.parametrize("exc", [
    google_exceptions.ServiceUnavailable("down"),
    google_exceptions.InternalServerError("boom"),
    RuntimeError("transport"),
])
def test_availability_errors_count_against_the_breaker(exc):
    breaker = create_breaker("warehouse", fail_max=1)

    assert is_statement_error(exc) is False
    assert breaker.is_system_error(exc) is True


def test_breaker_opens_after_consecutive_failures():
    # Arrange
    breaker = create_breaker("warehouse", fail_max=2)

    def fail():
        raise google_exceptions.ServiceUnavailable("down")

    # Act
    for _ in range(2):
        with pytest.raises(Exception):
            breaker.call(fail)

    # Assert
    assert breaker.current_state == "open"
