"""Structured Logging — formatters that render error chains into log records.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - A chain in exc_info is rendered through the format engine (trace detail),
      never through the interpreter's traceback printer
    - Extra fields (error_code, http_status, stack_depth) surfaced when present
    - JSON format in production, human-readable text in development

Design Decisions:
    - stdlib logging formatters: the host application keeps its own handlers
    - setup_logging called once on startup via bootstrap.configure
"""

import json
import logging
from datetime import datetime, timezone

from faultchain.core.chain import ChainError, code_of
from faultchain.core.format_chain import Verbosity, render

_TRACE = Verbosity.DETAIL | Verbosity.TRACE


def _chain_from(record: logging.LogRecord) -> ChainError | None:
    if record.exc_info and isinstance(record.exc_info[1], ChainError):
        return record.exc_info[1]
    return None


class JSONFormatter(logging.Formatter):
    """Format logs as JSON; chains become an `error_chain` record list."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("error_code", "http_status", "stack_depth", "path"):
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        chain = _chain_from(record)
        if chain is not None:
            coder = code_of(chain)
            log.setdefault("error_code", coder.code)
            log.setdefault("http_status", coder.http_status)
            log["error_chain"] = render(chain, _TRACE | Verbosity.STRUCTURED)
        elif record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


class ChainTextFormatter(logging.Formatter):
    """Human-readable lines; a chain prints as one trace line."""

    def __init__(self, fmt: str | None = None):
        super().__init__(fmt or "%(asctime)s %(levelname)s %(name)s - %(message)s")

    def formatException(self, ei) -> str:
        if isinstance(ei[1], ChainError):
            return render(ei[1], _TRACE)
        return super().formatException(ei)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure the root logger with a chain-aware formatter."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(ChainTextFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler


def log_chain(
    logger: logging.Logger, err: BaseException, level: int = logging.ERROR,
) -> None:
    """Log a chain with its nearest detail line as the message."""
    coder = code_of(err)
    logger.log(
        level,
        render(err, Verbosity.DETAIL),
        exc_info=(type(err), err, err.__traceback__),
        extra={"error_code": coder.code, "http_status": coder.http_status},
    )
