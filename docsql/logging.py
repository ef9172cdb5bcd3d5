# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with compilation context
# PURPOSE: Tag compiler log records with the document, view and dialect
# CREATED: 16 OCT 2026
# ============================================================================
"""
Structured Logging

Log records carry the document being compiled, the view being emitted and
the payload dialect, taken from a thread-local context stack. Output is
either one JSON object per line or a readable line with the context
inline; both go to stderr so statements printed by the CLI stay clean.

Usage:
    from docsql.logging import get_logger, log_context

    logger = get_logger(__name__, ComponentType.COMPILER)

    with log_context(document="TAX_RETURN", dialect="xml"):
        logger.info("Compiling document", extra={"views": 5})
"""

import json
import logging
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
from enum import Enum


class ComponentType(str, Enum):
    """Part of docsql a logger belongs to."""
    COMPILER = "compiler"
    EMITTER = "emitter"
    CLI = "cli"
    INFRASTRUCTURE = "infrastructure"


@dataclass
class LogContext:
    """Fields attached to every record logged inside a ``log_context``."""
    document: Optional[str] = None
    view: Optional[str] = None
    dialect: Optional[str] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Set fields only, with ``extra`` merged in."""
        result = {
            key: value
            for key, value in asdict(self).items()
            if value is not None and key != "extra"
        }
        result.update(self.extra)
        return result


_context_stack = threading.local()


def _get_context_stack() -> list:
    if not hasattr(_context_stack, "stack"):
        _context_stack.stack = []
    return _context_stack.stack


def get_current_context() -> LogContext:
    stack = _get_context_stack()
    if stack:
        return stack[-1]
    return LogContext()


@contextmanager
def log_context(**kwargs):
    """
    Push context fields for the duration of the block.

    Unset fields are inherited from the enclosing context; ``extra`` dicts
    are merged.

    Example:
        with log_context(document="TAX_RETURN", dialect="xml"):
            with log_context(view="TAX_RETURN_INCOME"):
                logger.debug("Emitting view")
    """
    parent = get_current_context()
    new_context = LogContext(
        document=kwargs.get("document", parent.document),
        view=kwargs.get("view", parent.view),
        dialect=kwargs.get("dialect", parent.dialect),
        operation=kwargs.get("operation", parent.operation),
        extra={**parent.extra, **kwargs.get("extra", {})},
    )

    stack = _get_context_stack()
    stack.append(new_context)
    try:
        yield new_context
    finally:
        stack.pop()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": _timestamp(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context_dict = get_current_context().to_dict()
        if context_dict:
            log_data["context"] = context_dict

        if getattr(record, "extra", None):
            log_data["data"] = record.extra

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """Single-line records with document, view and dialect inline."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)

        context = get_current_context()
        context_parts = [
            f"{key}={value}"
            for key, value in (
                ("document", context.document),
                ("view", context.view),
                ("dialect", context.dialect),
            )
            if value
        ]
        context_str = f" [{', '.join(context_parts)}]" if context_parts else ""

        extra_str = ""
        if getattr(record, "extra", None):
            extra_str = f" {record.extra}"

        result = f"{timestamp} {level} {record.name}{context_str}: {record.getMessage()}{extra_str}"
        if record.exc_info:
            result += f"\n{self.formatException(record.exc_info)}"
        return result


class ContextLogger(logging.LoggerAdapter):
    """
    Adapter folding the current context and the logger's component into
    ``record.extra``.
    """

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra", {}))
        component = (self.extra or {}).get("component")
        if component is not None:
            extra["component"] = component.value
        extra.update(get_current_context().to_dict())

        # one attribute, read by the formatters
        kwargs["extra"] = {"extra": extra}
        return msg, kwargs


def get_logger(
    name: str,
    component: Optional[ComponentType] = None,
) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (e.g., "docsql.schema.compiler")
        component: Recorded as ``component`` on every record

    Returns:
        ContextLogger instance
    """
    return ContextLogger(logging.getLogger(name), {"component": component})


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
) -> None:
    """
    Replace root handlers with one stderr handler.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Use StructuredFormatter instead of HumanFormatter
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter() if json_output else HumanFormatter())
    root.addHandler(handler)


# ============================================================================
# CHECKPOINT LOGGING
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a named checkpoint on ``docsql.checkpoint``.

    The compiler logs ``schema_compiled`` with object and statement counts
    once a bundle is built.
    """
    if logger is None:
        logger = logging.getLogger("docsql.checkpoint")

    checkpoint_data: Dict[str, Any] = {
        "checkpoint": name,
        "timestamp": _timestamp(),
    }

    context = get_current_context()
    if context.document:
        checkpoint_data["document"] = context.document
    if context.dialect:
        checkpoint_data["dialect"] = context.dialect

    if data:
        checkpoint_data["data"] = data

    logger.info(f"CHECKPOINT: {name}", extra={"extra": checkpoint_data})


__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
