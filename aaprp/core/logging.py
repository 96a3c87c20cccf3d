"""Logging setup for the assessment engine.

Development gets a human-readable line format. Every other environment
gets ``key=value`` records so log shippers can index assessment and
actor ids without parsing free text.
"""

import logging
import sys
from typing import Any

from aaprp.core.config import settings

# Attributes passed through ``extra=`` that are promoted to fields
CONTEXT_FIELDS = ("request_id", "user_id", "assessment_id", "action")

QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "httpx")


class StructuredFormatter(logging.Formatter):
    """Render log records as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        fields = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        fields.update(
            (name, getattr(record, name)) for name in CONTEXT_FIELDS if hasattr(record, name)
        )
        if record.exc_info:
            fields["exc"] = self.formatException(record.exc_info)

        return " ".join(f"{key}={value}" for key, value in fields.items())


def setup_logging(level: str | None = None) -> None:
    """Install a single stdout handler on the root logger.

    Safe to call more than once; existing root handlers are replaced.
    """
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if settings.is_dev:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    else:
        handler.setFormatter(StructuredFormatter())

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers[:] = [handler]

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class AuditLogger:
    """Writes one ``AUDIT:`` line per persisted audit event."""

    def __init__(self, name: str = "audit") -> None:
        self.logger = logging.getLogger(name)

    def log(
        self,
        action: str,
        actor_type: str,
        actor_id: str,
        entity_type: str,
        entity_id: str,
        metadata: dict[str, Any] | None = None,
        from_status: str | None = None,
        to_status: str | None = None,
    ) -> None:
        line = (
            f"AUDIT: action={action} actor={actor_type}:{actor_id} "
            f"entity={entity_type}:{entity_id}"
        )
        if to_status:
            line += f" status={from_status or '-'}->{to_status}"
        self.logger.info(f"{line} metadata={metadata or {}}")


audit_logger = AuditLogger()
