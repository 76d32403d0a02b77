"""Unit tests for error classification utilities."""

import pytest
from pydantic import ValidationError

from src.core.db_client import DatabaseError, RecordNotFoundError
from src.core.errors import ErrorCategory, ErrorCode, ErrorSeverity, classify_error, classify_error_with_response
from src.domain.task import Task


def malformed_row_error() -> ValidationError:
    with pytest.raises(ValidationError) as exc_info:
        Task(id="t1", user_id="u1", title="Bad", priority="urgent")
    return exc_info.value


@pytest.mark.unit
class TestClassifyError:
    """Tests for classify_error function."""

    def test_record_not_found(self):
        assert classify_error(RecordNotFoundError("Record not found in tasks: t1")) == ErrorCategory.RECORD_NOT_FOUND

    def test_permission_error(self):
        assert classify_error(PermissionError("not yours")) == ErrorCategory.PERMISSION_DENIED

    def test_value_error(self):
        assert classify_error(ValueError("Empty update payload")) == ErrorCategory.VALIDATION_FAILED

    def test_store_error_inspects_cause(self):
        try:
            try:
                raise ConnectionError("connection refused")
            except ConnectionError as e:
                raise DatabaseError("Failed to list records in tasks") from e
        except DatabaseError as wrapped:
            category = classify_error(wrapped)

        assert category == ErrorCategory.NETWORK_ERROR

    def test_rate_limited_store(self):
        assert classify_error(DatabaseError("Failed: 429 Too Many Requests")) == ErrorCategory.RATE_LIMIT_EXCEEDED

    def test_unauthorized_store(self):
        assert classify_error(DatabaseError("401 unauthorized")) == ErrorCategory.AUTHENTICATION_FAILED

    def test_plain_database_error(self):
        assert classify_error(DatabaseError("Failed to create record")) == ErrorCategory.STORE_UNAVAILABLE

    def test_malformed_stored_row_is_not_a_client_error(self):
        assert classify_error(malformed_row_error()) == ErrorCategory.INVALID_RECORD

    def test_unknown(self):
        assert classify_error(RuntimeError("something odd")) == ErrorCategory.UNKNOWN


@pytest.mark.unit
class TestClassifyErrorWithResponse:
    """Tests for classify_error_with_response function."""

    def test_not_found_uses_collection_specific_code(self):
        response = classify_error_with_response(RecordNotFoundError("missing"), collection="tasks")

        assert response.code == ErrorCode.ERR_TASK_NOT_FOUND
        assert response.severity == ErrorSeverity.LOW
        assert response.retryable is False

    def test_not_found_without_collection(self):
        response = classify_error_with_response(RecordNotFoundError("missing"))

        assert response.code == ErrorCode.ERR_RECORD_NOT_FOUND

    def test_validation_message_is_passed_through(self):
        response = classify_error_with_response(ValueError("Title must not be empty"))

        assert response.code == ErrorCode.ERR_VALIDATION_FAILED
        assert response.message == "Title must not be empty"

    def test_store_unavailable_is_retryable(self):
        response = classify_error_with_response(DatabaseError("Failed to list records"))

        assert response.code == ErrorCode.ERR_STORE_UNAVAILABLE
        assert response.severity == ErrorSeverity.HIGH
        assert response.retryable is True

    def test_invalid_record_hides_field_errors(self):
        response = classify_error_with_response(malformed_row_error(), collection="tasks")

        assert response.code == ErrorCode.ERR_INVALID_RECORD
        assert "priority" not in response.message
        assert response.retryable is False

    def test_record_not_found_str_is_unquoted(self):
        assert str(RecordNotFoundError("Record not found in tasks: t1")) == "Record not found in tasks: t1"
