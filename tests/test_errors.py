import pytest

from gridfill.errors import (
    AddressError,
    AppError,
    BAD_ADDRESS,
    BAD_JOB,
    FILE_LOCKED,
    MISSING_TEMPLATE_PATH,
    SAVE_FAILED,
    SHEET_NOT_FOUND,
    SOURCE_READ_FAILED,
    VALUE_NOT_FOUND,
    friendly_message,
)


def test_app_error_str_with_and_without_details():
    assert str(AppError(BAD_JOB, "nope")) == "BAD_JOB: nope"
    assert str(AppError(BAD_JOB, "nope", {"k": 1})) == "BAD_JOB: nope ({'k': 1})"


def test_address_error_is_app_error():
    e = AddressError("bad ref", {"address": "ZZZZ1"})
    assert isinstance(e, AppError)
    assert e.code == BAD_ADDRESS
    assert e.details == {"address": "ZZZZ1"}
    with pytest.raises(AppError):
        raise e


def test_friendly_file_locked_names_file():
    msg = friendly_message(AppError(FILE_LOCKED, "locked", {"path": "/x/y/report.xlsx"}))
    assert "report.xlsx" in msg
    assert "/x/y" not in msg


def test_friendly_save_failed_permission():
    msg = friendly_message(AppError(SAVE_FAILED, "Permission denied saving", {"path": "out.xlsx"}))
    assert "open in another program" in msg


@pytest.mark.parametrize("code", [
    BAD_ADDRESS, SHEET_NOT_FOUND, SOURCE_READ_FAILED, SAVE_FAILED,
    MISSING_TEMPLATE_PATH, BAD_JOB, VALUE_NOT_FOUND,
])
def test_friendly_message_every_code(code):
    msg = friendly_message(AppError(code, "detail text"))
    assert msg
    assert "Traceback" not in msg


def test_friendly_fallback_first_line_only():
    msg = friendly_message(AppError("OTHER", "first line\nTraceback (most recent call last):"))
    assert msg == "first line"


def test_friendly_fallback_empty():
    assert friendly_message(AppError("OTHER", "")) == "An unexpected error occurred."
