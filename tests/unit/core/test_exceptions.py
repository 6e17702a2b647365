"""
Tests unitaires pour les exceptions du domaine et leurs codes HTTP.
"""

import pytest

from src.core.exceptions import (
    AuthenticationError,
    ContentAlreadyExistsError,
    ExternalServiceError,
    NotFoundError,
    ServiceUnavailableError,
    StorageError,
    ValidationError,
    WatchListError,
)


class TestExceptions:
    @pytest.mark.parametrize("exc_type,status", [
        (ValidationError, 400),
        (AuthenticationError, 401),
        (NotFoundError, 404),
        (ContentAlreadyExistsError, 409),
        (ExternalServiceError, 502),
        (StorageError, 502),
        (ServiceUnavailableError, 503),
    ])
    def test_status_codes(self, exc_type, status: int) -> None:
        error = exc_type("boom")
        assert isinstance(error, WatchListError)
        assert error.status_code == status
        assert error.message == "boom"

    def test_already_exists_carries_existing_id(self) -> None:
        error = ContentAlreadyExistsError("Movie already exists", existing_id=7)
        assert error.existing_id == 7
