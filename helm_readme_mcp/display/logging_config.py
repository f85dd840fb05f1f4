"""Logging configuration setup."""

import copy
import logging
import logging.config
import os
import re
import sys
from datetime import datetime
from typing import Optional, Set, Tuple  # noqa: UP035

from helm_readme_mcp.constants import LOG_DIR

# ── Secret redaction filter ──────────────────────────────────────────────

_REDACTED = "***REDACTED***"


class SecretRedactionFilter(logging.Filter):
    """Logging filter that replaces registered secret values with a placeholder.

    The GitHub token is registered at startup so that request headers or
    URLs echoed into log records never leak it.
    """

    def __init__(self) -> None:
        super().__init__()
        self._secrets: Set[str] = set()
        self._pattern: Optional[re.Pattern[str]] = None

    def register(self, value: Optional[str]) -> None:
        """Register a secret value for redaction."""
        if value and len(value) >= 4:  # skip trivially short values
            self._secrets.add(value)
            # Rebuild regex pattern with longest-first ordering
            escaped = sorted((re.escape(s) for s in self._secrets), key=len, reverse=True)
            self._pattern = re.compile("|".join(escaped))

    def filter(self, record: logging.LogRecord) -> bool:
        if self._pattern is not None:
            if isinstance(record.msg, str):
                record.msg = self._pattern.sub(_REDACTED, record.msg)
            if record.args:
                if isinstance(record.args, dict):
                    record.args = {
                        k: self._pattern.sub(_REDACTED, v) if isinstance(v, str) else v
                        for k, v in record.args.items()
                    }
                elif isinstance(record.args, tuple):
                    record.args = tuple(
                        self._pattern.sub(_REDACTED, a) if isinstance(a, str) else a
                        for a in record.args
                    )
        return True


# Module-level singleton so the CLI can register the token once.
secret_redaction_filter = SecretRedactionFilter()

BASE_LOG_CFG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple_file": {
            "format": ("%(asctime)s - %(name)25s:%(lineno)-4d - " "%(levelname)-7s - %(message)s"),
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "stderr": {
            "format": "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
            "datefmt": "%Y-%m-%dT%H:%M:%S",
        },
    },
    "handlers": {
        "file_handler": {
            "class": "logging.FileHandler",
            "level": "DEBUG",
            "formatter": "simple_file",
            "filename": "temp_log_name.log",
            "encoding": "utf-8",
        },
        # stdout carries the stdio MCP stream; console logs go to stderr only.
        "stderr_handler": {
            "class": "logging.StreamHandler",
            "level": "WARNING",
            "formatter": "stderr",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "uvicorn": {
            "handlers": ["file_handler"],
            "propagate": False,
            "level": "INFO",
        },
        "uvicorn.error": {
            "handlers": ["file_handler"],
            "propagate": False,
            "level": "INFO",
        },
        "uvicorn.access": {
            "handlers": ["file_handler"],
            "propagate": False,
            "level": "WARNING",
        },
        "httpx": {
            "handlers": ["file_handler"],
            "propagate": False,
            "level": "WARNING",
        },
        "helm_readme_mcp": {
            "handlers": ["file_handler", "stderr_handler"],
            "propagate": False,
            "level": "INFO",
        },
        "mcp": {
            "handlers": ["file_handler"],
            "propagate": False,
            "level": "INFO",
        },
    },
    "root": {
        "handlers": ["file_handler", "stderr_handler"],
        "level": "WARNING",
    },
}


def setup_logging(
    log_lvl_str: str,
    *,
    log_dir: str = LOG_DIR,
    console_level: Optional[str] = None,
) -> Tuple[str, str]:
    """
    Set up the logging system.

    Uses a timestamped dynamic filename under *log_dir* and adjusts
    package log levels to *log_lvl_str*. Console (stderr) output is kept
    at WARNING unless *console_level* says otherwise.

    Args:
        log_lvl_str: The desired log level string (e.g., 'debug', 'info').
        log_dir: Directory for the log file; created if missing.
        console_level: Optional level for the stderr handler.

    Returns:
        A tuple of (log_file_path, validated_log_level).
    """
    log_lvl_valid = log_lvl_str.upper()
    if log_lvl_valid == "WARN":
        log_lvl_valid = "WARNING"
    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if log_lvl_valid not in valid_levels:
        print(f"Warning: invalid log level '{log_lvl_str}'. Using 'INFO'.", file=sys.stderr)
        log_lvl_valid = "INFO"

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    os.makedirs(log_dir, exist_ok=True)
    log_fpath = os.path.join(log_dir, f"helm_readme_{ts}_{log_lvl_valid}.log")

    log_cfg: dict = copy.deepcopy(BASE_LOG_CFG)
    log_cfg["handlers"]["file_handler"]["filename"] = log_fpath
    if console_level:
        log_cfg["handlers"]["stderr_handler"]["level"] = console_level.upper()

    for name in ("helm_readme_mcp", "mcp", "uvicorn", "uvicorn.error"):
        log_cfg["loggers"][name]["level"] = log_lvl_valid

    log_cfg["loggers"]["uvicorn.access"]["level"] = (
        "INFO" if log_lvl_valid == "DEBUG" else "WARNING"
    )
    log_cfg["loggers"]["httpx"]["level"] = "INFO" if log_lvl_valid == "DEBUG" else "WARNING"
    log_cfg["root"]["level"] = log_lvl_valid if log_lvl_valid == "DEBUG" else "WARNING"

    try:
        logging.config.dictConfig(log_cfg)
        # Attach secret redaction filter to every configured handler
        seen = set()
        for lgr in [logging.root] + [logging.getLogger(n) for n in log_cfg["loggers"]]:
            for handler in lgr.handlers:
                if id(handler) not in seen:
                    handler.addFilter(secret_redaction_filter)
                    seen.add(id(handler))
    except (ValueError, TypeError, AttributeError, ImportError) as e_log_cfg:
        print(
            f"Error applying logging configuration: {e_log_cfg}",
            file=sys.stderr,
        )

    return log_fpath, log_lvl_valid
