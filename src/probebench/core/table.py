from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, NamedTuple, Optional

from .probing import HashFn, ProbeStrategy, stable_hash

logger = logging.getLogger("probebench")


@dataclass
class Entry:
    """A stored key with its duplicate counter and the probes it took to place."""

    key: Any
    frequency: int = 1
    probe_count: int = 0

    def __str__(self) -> str:
        return f"{self.key} {self.frequency} {self.probe_count}"


class InsertOutcome(Enum):
    INSERTED = "inserted"
    DUPLICATE_FOUND = "duplicate"
    TABLE_FULL = "full"


class DumpRow(NamedTuple):
    slot: int
    key: Any
    frequency: int
    probe_count: int


class OpenAddressTable:
    """Fixed-capacity open-addressing table driven by a pluggable probe strategy.

    Slots never move once occupied and nothing is ever deleted, so an empty slot on a
    key's probe path proves the key is absent. Mutation is single-writer: callers that
    populate tables in parallel must give every table its own worker.
    """

    __slots__ = (
        "_cap",
        "_strategy",
        "_hash",
        "_table",
        "_size",
        "_total_probes",
        "_duplicates",
    )

    def __init__(self, capacity: int, strategy: ProbeStrategy, hash_fn: HashFn = stable_hash) -> None:
        strategy.validate_capacity(capacity)
        self._cap = capacity
        self._strategy = strategy
        self._hash = hash_fn
        self._table: List[Optional[Entry]] = [None] * capacity
        self._size = 0
        self._total_probes = 0
        self._duplicates = 0

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return (
            f"OpenAddressTable(strategy={self._strategy.name!r}, capacity={self._cap}, "
            f"elements={self._size}, duplicates={self._duplicates})"
        )

    @property
    def capacity(self) -> int:
        return self._cap

    @property
    def strategy(self) -> ProbeStrategy:
        return self._strategy

    @property
    def element_count(self) -> int:
        return self._size

    @property
    def duplicate_count(self) -> int:
        return self._duplicates

    @property
    def total_probes(self) -> int:
        return self._total_probes

    @property
    def is_full(self) -> bool:
        return self._size >= self._cap

    def key_hash(self, key: Any) -> int:
        return self._hash(key)

    def slot(self, index: int) -> Optional[Entry]:
        return self._table[index]

    def insert(self, entry: Entry) -> InsertOutcome:
        key = entry.key
        h = self._hash(key)
        for attempt in range(self._cap):
            idx = self._strategy.probe(h, self._cap, attempt)
            slot = self._table[idx]
            if slot is None:
                entry.probe_count = attempt + 1
                self._table[idx] = entry
                self._size += 1
                self._total_probes += entry.probe_count
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug(
                        "[%s] inserted %s at index %d with %d probes",
                        self._strategy.name,
                        key,
                        idx,
                        entry.probe_count,
                    )
                return InsertOutcome.INSERTED
            if slot.key == key:
                slot.frequency += 1
                self._duplicates += 1
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug(
                        "[%s] duplicate %s at index %d, frequency now %d",
                        self._strategy.name,
                        key,
                        idx,
                        slot.frequency,
                    )
                return InsertOutcome.DUPLICATE_FOUND
        logger.debug("[%s] table full, could not insert %s", self._strategy.name, key)
        return InsertOutcome.TABLE_FULL

    def insert_key(self, key: Any) -> InsertOutcome:
        return self.insert(Entry(key))

    def search(self, key: Any) -> Optional[Entry]:
        h = self._hash(key)
        for attempt in range(self._cap):
            slot = self._table[self._strategy.probe(h, self._cap, attempt)]
            if slot is None:
                return None
            if slot.key == key:
                return slot
        return None

    def __contains__(self, key: Any) -> bool:
        return self.search(key) is not None

    def average_probes(self) -> float:
        if self._size == 0:
            return 0.0
        return self._total_probes / self._size

    def load_factor(self) -> float:
        return self._size / self._cap

    def entries(self) -> Iterator[tuple[int, Entry]]:
        for idx, slot in enumerate(self._table):
            if slot is not None:
                yield idx, slot

    def dump(self) -> List[DumpRow]:
        return [DumpRow(idx, e.key, e.frequency, e.probe_count) for idx, e in self.entries()]

    def summary(self) -> Dict[str, Any]:
        return {
            "strategy": self._strategy.name,
            "capacity": self._cap,
            "element_count": self._size,
            "duplicate_count": self._duplicates,
            "total_probes": self._total_probes,
            "average_probes": self.average_probes(),
            "load_factor": self.load_factor(),
        }


__all__ = ["DumpRow", "Entry", "InsertOutcome", "OpenAddressTable"]
