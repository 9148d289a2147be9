"""
Custom logging configuration that keeps credentials out of log output
"""

import logging
import logging.config
import re
from typing import Any, Dict

# Matches accessKey=..., "sessionName": "...", token: ... and similar forms
_SECRET_PATTERN = re.compile(
    r"""(?P<name>accessKey|sessionName|token)(?P<sep>["']?\s*[:=]\s*["']?)(?P<value>[^\s"',&}]+)"""
)


class SecretRedactionFilter(logging.Filter):
    """Filter that masks credential values in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Rewrite the record message with secrets masked. Never drops a record."""
        message = record.getMessage()
        redacted = _SECRET_PATTERN.sub(r"\g<name>\g<sep>***", message)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


def get_logging_config(level: str = "INFO", stream: str = "ext://sys.stdout") -> Dict[str, Any]:
    """Get logging configuration with secret redaction."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "secret_redaction": {
                "()": SecretRedactionFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": stream,
                "filters": ["secret_redaction"]
            }
        },
        "loggers": {
            "crmgate": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "urllib3": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO", stream: str = "ext://sys.stdout") -> None:
    """Apply the crmgate logging configuration."""
    logging.config.dictConfig(get_logging_config(level, stream))
