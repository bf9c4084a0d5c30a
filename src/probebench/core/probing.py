"""Probe-sequence strategies and the deterministic key hash they consume."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, ClassVar, Dict, Iterator, Union

from probebench.contracts.error import BadInputError, ConfigurationError

from .primes import is_prime

HashFn = Callable[[Any], int]

_MASK_32: int = 0xFFFFFFFF
_MASK_64: int = 0xFFFFFFFFFFFFFFFF
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _to_signed32(value: int) -> int:
    value &= _MASK_32
    return value - (1 << 32) if value & 0x80000000 else value


def _poly31(values: Iterator[int]) -> int:
    h = 0
    for v in values:
        h = (31 * h + v) & _MASK_32
    return _to_signed32(h)


def stable_hash(key: Any) -> int:
    """Process-independent hash used to drive the probe sequences.

    ``hash()`` of ``str``/``bytes`` is salted per interpreter, which would make two runs
    of the same experiment disagree, so strings, bytes, timestamps and tuples get a
    fixed scheme here. Strings and bytes use the 31-polynomial folded to a signed
    32-bit value. Datetimes fold their epoch milliseconds as ``ms ^ (ms >>> 32)``
    truncated to 32 bits, the same value ``java.util.Date.hashCode`` gives. Integers
    hash to themselves. Other objects fall back to their own ``__hash__``.
    """

    if isinstance(key, int):
        return int(key)
    if isinstance(key, str):
        return _poly31(ord(ch) for ch in key)
    if isinstance(key, (bytes, bytearray)):
        return _poly31(iter(key))
    if isinstance(key, datetime):
        aware = key if key.tzinfo is not None else key.replace(tzinfo=timezone.utc)
        millis = ((aware - _EPOCH) // timedelta(milliseconds=1)) & _MASK_64
        return _to_signed32(millis ^ (millis >> 32))
    if isinstance(key, tuple):
        return _poly31(stable_hash(item) & _MASK_32 for item in key)
    return hash(key)


@dataclass(frozen=True)
class LinearProbe:
    """``(h(k) + i) mod m``; always visits every slot, clusters badly."""

    name: ClassVar[str] = "linear"
    label: ClassVar[str] = "Linear Probing"

    def validate_capacity(self, capacity: int) -> None:
        if capacity < 1:
            raise ConfigurationError(f"capacity must be >= 1 (got {capacity})")

    def probe(self, key_hash: int, capacity: int, attempt: int) -> int:
        return (key_hash % capacity + attempt) % capacity


@dataclass(frozen=True)
class DoubleHashProbe:
    """``(h1(k) + i * h2(k)) mod m`` with ``h2`` kept inside ``[1, m - 2]``.

    Full coverage of the table over ``m`` attempts relies on ``m`` being prime, so
    :meth:`validate_capacity` rejects anything else.
    """

    name: ClassVar[str] = "double"
    label: ClassVar[str] = "Double Hashing"

    def validate_capacity(self, capacity: int) -> None:
        if capacity < 3 or not is_prime(capacity):
            raise ConfigurationError(
                f"double hashing needs a prime capacity >= 3 (got {capacity})",
                hint="use find_twin_prime_ceiling() to pick the capacity",
            )

    def step(self, key_hash: int, capacity: int) -> int:
        return 1 + key_hash % (capacity - 2)

    def probe(self, key_hash: int, capacity: int, attempt: int) -> int:
        return (key_hash % capacity + attempt * self.step(key_hash, capacity)) % capacity


ProbeStrategy = Union[LinearProbe, DoubleHashProbe]

LINEAR = LinearProbe()
DOUBLE = DoubleHashProbe()

STRATEGIES: Dict[str, ProbeStrategy] = {LINEAR.name: LINEAR, DOUBLE.name: DOUBLE}


def resolve_strategy(name: str) -> ProbeStrategy:
    try:
        return STRATEGIES[name]
    except KeyError as exc:
        choices = ", ".join(sorted(STRATEGIES))
        raise BadInputError(f"unknown probe strategy {name!r} (expected one of: {choices})") from exc


def probe_sequence(strategy: ProbeStrategy, key_hash: int, capacity: int) -> Iterator[int]:
    """Yield the ``capacity`` candidate slots for ``key_hash`` in probe order."""

    for attempt in range(capacity):
        yield strategy.probe(key_hash, capacity, attempt)


__all__ = [
    "DOUBLE",
    "DoubleHashProbe",
    "HashFn",
    "LINEAR",
    "LinearProbe",
    "ProbeStrategy",
    "STRATEGIES",
    "probe_sequence",
    "resolve_strategy",
    "stable_hash",
]
