"""Logging setup and secret redaction."""

from helm_readme_mcp.display.logging_config import (
    SecretRedactionFilter,
    secret_redaction_filter,
    setup_logging,
)

__all__ = ["SecretRedactionFilter", "secret_redaction_filter", "setup_logging"]
