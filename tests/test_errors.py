"""Error hierarchy and the central error handler."""
import pytest

from recombinex import (
    ActionError,
    EffectError,
    ErrorHandler,
    RecombinexError,
    StoreError,
    global_error_handler,
)


@pytest.mark.unit
def test_errors_share_a_base_class():
    for error_type in (ActionError, EffectError, StoreError):
        assert issubclass(error_type, RecombinexError)


@pytest.mark.unit
def test_error_details_are_part_of_message_and_dict():
    error = EffectError("effect failed", effect_name="load_users")

    assert "load_users" in str(error)
    data = error.to_dict()
    assert data["error_type"] == "EffectError"
    assert data["message"] == "effect failed"
    assert data["details"]["effect_name"] == "load_users"
    assert data["traceback"] == ""


@pytest.mark.unit
def test_error_raised_while_handling_keeps_traceback():
    try:
        try:
            raise ValueError("inner")
        except ValueError:
            raise StoreError("outer", operation="dispatch")
    except StoreError as error:
        assert "ValueError" in error.traceback


@pytest.mark.unit
def test_handler_wraps_plain_exceptions_and_notifies_callbacks():
    handler = ErrorHandler(log_to_console=False)
    received = []
    handler.register_handler(received.append)

    handler.handle(KeyError("missing"))
    handler.unregister_handler(received.append)
    handler.handle(ValueError("ignored"))

    assert len(received) == 1
    assert isinstance(received[0], RecombinexError)
    assert received[0].details["original_type"] == "KeyError"


@pytest.mark.unit
def test_handler_logs_errors(caplog):
    handler = ErrorHandler()

    handler.handle(ActionError("bad action", action_type="[Test] Bad"))

    assert any("bad action" in record.getMessage() for record in caplog.records)


@pytest.mark.unit
def test_handler_can_write_to_file(tmp_path):
    log_file = tmp_path / "errors.log"
    handler = ErrorHandler(log_to_console=False, log_to_file=True, log_file=str(log_file))

    handler.handle(StoreError("disk", operation="teardown"))
    handler.close()

    assert "disk" in log_file.read_text(encoding="utf-8")


@pytest.mark.unit
def test_log_files_belong_to_their_own_handler(tmp_path):
    log_file = tmp_path / "errors.log"
    first = ErrorHandler(log_to_console=False, log_to_file=True, log_file=str(log_file))
    second = ErrorHandler(log_to_console=False, log_to_file=True, log_file=str(log_file))

    try:
        global_error_handler.handle(StoreError("from-global"))
        first.handle(StoreError("from-first"))
    finally:
        first.close()
        second.close()

    content = log_file.read_text(encoding="utf-8")
    assert content.count("from-global") == 0
    assert content.count("from-first") == 1


@pytest.mark.unit
def test_console_logging_can_be_turned_off(caplog):
    handler = ErrorHandler(log_to_console=False)

    handler.handle(StoreError("quiet"))

    assert not any("quiet" in record.getMessage() for record in caplog.records)


@pytest.mark.unit
def test_close_is_idempotent(tmp_path):
    handler = ErrorHandler(log_to_console=False, log_to_file=True, log_file=str(tmp_path / "e.log"))

    handler.close()
    handler.close()
    handler.handle(StoreError("after close"))
