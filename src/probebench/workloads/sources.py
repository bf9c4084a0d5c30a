"""Repeatable key sources feeding the probing experiments."""

from __future__ import annotations

import itertools
import logging
import random
import string
import time
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from pathlib import Path
from typing import Any

from probebench.config import WorkloadPolicy
from probebench.contracts.error import BadInputError

logger = logging.getLogger("probebench")

KeySupplier = Callable[[], Iterator[Any]]


class DataSource(IntEnum):
    RANDOM = 1
    DATE = 2
    WORD = 3

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, raw: str | int) -> DataSource:
        try:
            return cls(int(raw))
        except ValueError as exc:
            raise BadInputError(f"data source must be 1, 2, or 3 (got {raw!r})") from exc


_DISPLAY_NAMES = {
    DataSource.RANDOM: "Random Numbers",
    DataSource.DATE: "Date Values",
    DataSource.WORD: "Word List",
}


def read_word_list(path: str | Path) -> list[str]:
    """Return the non-blank, stripped lines of ``path``."""

    with open(path, encoding="utf-8") as fh:
        return [line.strip() for line in fh if line.strip()]


def _random_ints(seed: int, bound: int) -> Iterator[int]:
    rng = random.Random(seed)  # noqa: S311  # nosec B311 - deterministic workload sampler
    while True:
        yield rng.randrange(bound)


def _timestamps(start_ms: int, step_ms: int) -> Iterator[datetime]:
    start = datetime.fromtimestamp(0, tz=timezone.utc) + timedelta(milliseconds=start_ms)
    step = timedelta(milliseconds=step_ms)
    current = start
    while True:
        yield current
        current += step


def _random_words(seed: int, min_len: int, max_len: int) -> Iterator[str]:
    rng = random.Random(seed)  # noqa: S311  # nosec B311 - deterministic workload sampler
    letters = string.ascii_lowercase
    while True:
        length = rng.randint(min_len, max_len)
        yield "".join(rng.choice(letters) for _ in range(length))


def key_supplier(source: DataSource, policy: WorkloadPolicy) -> KeySupplier:
    """Resolve ``source`` once and return a factory of identical, fresh key iterators.

    Every table in an experiment pulls from its own iterator, so both probe strategies
    see exactly the same key sequence.
    """

    if source is DataSource.RANDOM:
        seed, bound = policy.seed, policy.random_key_bound
        return lambda: _random_ints(seed, bound)

    if source is DataSource.DATE:
        start_ms = policy.timestamp_start_ms
        if start_ms is None:
            start_ms = time.time_ns() // 1_000_000
        step_ms = policy.timestamp_step_ms
        return lambda: _timestamps(start_ms, step_ms)

    try:
        words = read_word_list(policy.word_list)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Error reading word list %s: %s", policy.word_list, exc)
        words = []
    else:
        if not words:
            logger.warning("Word list %s is empty", policy.word_list)
    if words:
        logger.info("Loaded %d words from %s", len(words), policy.word_list)
        return lambda: itertools.cycle(words)

    logger.warning("Falling back to random strings")
    seed, min_len, max_len = policy.seed, policy.fallback_min_len, policy.fallback_max_len
    return lambda: _random_words(seed, min_len, max_len)


def key_stream(source: DataSource, policy: WorkloadPolicy) -> Iterator[Any]:
    return key_supplier(source, policy)()


__all__ = ["DataSource", "KeySupplier", "key_stream", "key_supplier", "read_word_list"]
