"""Exit codes and the one-line JSON error envelope printed by failing probebench commands.

Table outcomes (full, duplicate, not found) are ordinary return values. Only bad
arguments, an unusable capacity range, broken invariants and file I/O failures end
up here.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from functools import wraps
from typing import Any, NoReturn, TypeVar

logger = logging.getLogger(__name__)
T = TypeVar("T")


class Exit(IntEnum):
    OK = 0
    BAD_INPUT = 2
    INVARIANT = 3
    UNHANDLED = 4
    IO = 5
    CONFIG = 6


@dataclass(slots=True)
class ErrorEnvelope:
    error: str
    detail: str
    hint: str | None = None

    def to_json(self) -> str:
        payload = {"error": self.error, "detail": self.detail}
        if self.hint:
            payload["hint"] = self.hint
        return json.dumps(payload, ensure_ascii=False)


def die(code: Exit, kind: str, detail: str, hint: str | None = None) -> NoReturn:
    """Write the envelope to stderr and exit with ``code``."""

    env = ErrorEnvelope(error=kind, detail=detail, hint=hint)
    sys.stderr.write(env.to_json() + "\n")
    try:
        sys.stderr.flush()
    finally:
        sys.exit(int(code))


class EnvelopeError(Exception):
    """Base for errors that carry an optional remediation hint."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class BadInputError(EnvelopeError):
    """Malformed arguments, config values, data source ids or dump lines."""


class InvariantError(EnvelopeError):
    """A populated table or a run summary failed its consistency checks."""


class ConfigurationError(EnvelopeError):
    """No twin prime in the capacity range, or a capacity the probe strategy cannot cover."""


class DumpIOError(EnvelopeError):
    """A table dump, run summary or trace export could not be written."""


_EXCEPTION_ORDER: tuple[tuple[type[EnvelopeError], Exit, str], ...] = (
    (BadInputError, Exit.BAD_INPUT, "BadInput"),
    (InvariantError, Exit.INVARIANT, "Invariant"),
    (DumpIOError, Exit.IO, "IO"),
    (ConfigurationError, Exit.CONFIG, "Configuration"),
)


def guard_cli(fn: Callable[..., T]) -> Callable[..., T]:
    """Turn probebench errors raised by ``fn`` into an envelope and exit code."""

    @wraps(fn)
    def _wrapped(*args: Any, **kwargs: Any) -> T:
        try:
            return fn(*args, **kwargs)
        except EnvelopeError as exc:
            for exc_type, exit_code, label in _EXCEPTION_ORDER:
                if isinstance(exc, exc_type):
                    die(exit_code, label, str(exc), hint=exc.hint)
            die(Exit.UNHANDLED, type(exc).__name__, str(exc), hint=exc.hint)
        except OSError as exc:
            die(Exit.IO, "IO", str(exc))
        except Exception as exc:  # pragma: no cover - last resort
            logger.exception("Unhandled CLI exception")
            die(Exit.UNHANDLED, "Unhandled", f"{type(exc).__name__}: {exc}")

    return _wrapped


__all__ = [
    "BadInputError",
    "ConfigurationError",
    "DumpIOError",
    "EnvelopeError",
    "ErrorEnvelope",
    "Exit",
    "InvariantError",
    "die",
    "guard_cli",
]
