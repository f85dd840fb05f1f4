"""Tests for logging setup and secret redaction."""

import logging

import pytest

from helm_readme_mcp.display.logging_config import BASE_LOG_CFG, SecretRedactionFilter, setup_logging


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    for name in [None, *BASE_LOG_CFG["loggers"]]:
        lgr = logging.getLogger(name)
        for handler in list(lgr.handlers):
            lgr.removeHandler(handler)
            handler.close()
        lgr.propagate = True
        lgr.setLevel(logging.NOTSET if name else logging.WARNING)


def _record(msg, args=()):
    return logging.LogRecord("helm_readme_mcp.test", logging.INFO, __file__, 1, msg, args, None)


class TestSecretRedactionFilter:
    def test_message_and_args_redacted(self):
        redactor = SecretRedactionFilter()
        redactor.register("ghp_secret_token")
        record = _record("token=ghp_secret_token url=%s", ("https://x?t=ghp_secret_token",))
        assert redactor.filter(record) is True
        assert record.getMessage() == "token=***REDACTED*** url=https://x?t=***REDACTED***"

    def test_short_and_empty_values_ignored(self):
        redactor = SecretRedactionFilter()
        redactor.register("abc")
        redactor.register(None)
        record = _record("abc")
        redactor.filter(record)
        assert record.getMessage() == "abc"


class TestSetupLogging:
    def test_log_file_and_level(self, tmp_path):
        log_fpath, level = setup_logging("warn", log_dir=str(tmp_path))
        assert level == "WARNING"
        assert log_fpath.startswith(str(tmp_path))
        assert log_fpath.endswith("_WARNING.log")
        assert logging.getLogger("helm_readme_mcp").level == logging.WARNING

    def test_invalid_level_falls_back_to_info(self, tmp_path, capsys):
        _, level = setup_logging("chatty", log_dir=str(tmp_path))
        assert level == "INFO"
        assert "invalid log level" in capsys.readouterr().err
