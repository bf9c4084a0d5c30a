"""Contract helpers for the probebench CLI."""

from .error import (
    BadInputError,
    ConfigurationError,
    DumpIOError,
    EnvelopeError,
    ErrorEnvelope,
    Exit,
    InvariantError,
    die,
    guard_cli,
)

__all__ = [
    "Exit",
    "ErrorEnvelope",
    "EnvelopeError",
    "BadInputError",
    "InvariantError",
    "ConfigurationError",
    "DumpIOError",
    "guard_cli",
    "die",
]
