import pytest

from tablemodel.errors import ErrorCode, ErrorSeverity, TableError
from tablemodel.results import TableResult


def _error(code, severity=ErrorSeverity.WARNING):
    return TableError(table="test_model_table", operation="find", message="boom", severity=severity, error_code=code)


@pytest.mark.parametrize(
    "code, expected",
    [
        (ErrorCode.INVALID_PRIMARY_KEY, True),
        (ErrorCode.DUPLICATE_PRIMARY_KEY, True),
        (ErrorCode.EMPTY_ROW_SET, True),
        (ErrorCode.DB_EXECUTION_ERROR, False),
        (ErrorCode.NO_ROWS_AFFECTED, False),
        (ErrorCode.ROW_NOT_FOUND, False),
    ],
)
def test_is_validation_error(code, expected):
    assert _error(code).is_validation_error is expected


def test_error_str():
    assert str(_error(ErrorCode.ROW_NOT_FOUND)) == "[ROW_NOT_FOUND] test_model_table.find: boom"


def test_error_serializes_enums_as_strings():
    data = _error(ErrorCode.INVALID_VALUE).model_dump(mode="json")
    assert data["error_code"] == "INVALID_VALUE"
    assert data["severity"] == "WARNING"


def test_result_truthiness():
    ok = TableResult.ok([{"user_id": 1}], affected_rows=1)
    failed = TableResult.fail(_error(ErrorCode.INVALID_VALUE))

    assert ok
    assert ok.row == {"user_id": 1}
    assert not failed
    assert failed.row is None
    assert failed.error.error_code is ErrorCode.INVALID_VALUE
