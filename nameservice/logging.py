# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Structured logging setup for the name service.

This module configures **structlog** + the stdlib ``logging`` package so that:
- Component logs are emitted as structured JSON by default (or as a pretty
  console renderer in development).
- Commit secrets, signatures and keys are redacted before rendering.
- Log level & format are configurable via environment variables.

Quick start
-----------
    from nameservice.logging import setup_logging, get_logger

    setup_logging()  # call once on process start
    log = get_logger(__name__)
    log.info("namespace_registered", node="0x…", owner="0x…")

Environment
-----------
- LOG_LEVEL: one of DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_FORMAT: "json" (default) or "console"
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Iterable, Optional

import structlog
from structlog.contextvars import merge_contextvars
from structlog.processors import JSONRenderer

REDACT_KEYS = {"secret", "signature", "private_key", "password", "api_key"}


def _redact_secrets(_: logging.Logger, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    for k in list(event_dict.keys()):
        if k.lower() in REDACT_KEYS and event_dict[k] is not None:
            event_dict[k] = "***"
    return event_dict


def _hexify_bytes(_: logging.Logger, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Render raw node/commitment bytes as 0x-hex so JSON output stays readable."""
    for k, v in list(event_dict.items()):
        if isinstance(v, (bytes, bytearray)):
            event_dict[k] = "0x" + bytes(v).hex()
    return event_dict


def _base_processors(service_name: str, log_format: str) -> Iterable:
    yield structlog.stdlib.add_log_level
    yield structlog.processors.TimeStamper(fmt="iso", utc=True)
    yield merge_contextvars
    yield structlog.processors.StackInfoRenderer()
    if log_format == "json":
        yield structlog.processors.format_exc_info
    yield _redact_secrets
    yield _hexify_bytes
    yield structlog.processors.UnicodeDecoder()

    def _ensure_service(_: logging.Logger, __: str, ev: Dict[str, Any]) -> Dict[str, Any]:
        ev.setdefault("service", service_name)
        return ev

    yield _ensure_service


def setup_logging(
    *,
    service_name: str = "nameservice",
    level: Optional[str | int] = None,
    log_format: Optional[str] = None,
) -> None:
    """
    Configure structlog + stdlib logging. Safe to call once at process start.

    Parameters
    ----------
    service_name: str
        Value injected as "service" into every event.
    level: str|int
        Log level (e.g., "INFO"). Defaults to $LOG_LEVEL or INFO.
    log_format: str
        "json" (default) or "console". Defaults to $LOG_FORMAT or "json".
        JSON output carries formatted tracebacks; the console renderer
        prints its own.
    """
    env_level = os.getenv("LOG_LEVEL", "").upper() or None
    env_format = os.getenv("LOG_FORMAT", "").lower() or None

    level = level or env_level or "INFO"
    if isinstance(level, str):
        level = level.upper()
    log_format = (log_format or env_format or "json").lower()

    processors = list(_base_processors(service_name, log_format))

    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=True, sort_keys=False)
    else:
        renderer = JSONRenderer(sort_keys=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
            foreign_pre_chain=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
                *processors,
            ],
        )
    )

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after *name* (usually ``__name__``)."""
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


__all__ = ["setup_logging", "get_logger"]
