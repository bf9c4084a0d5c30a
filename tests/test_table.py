from __future__ import annotations

from dataclasses import dataclass

import pytest

from probebench.core.probing import DOUBLE, LINEAR
from probebench.core.table import DumpRow, Entry, InsertOutcome, OpenAddressTable


@dataclass(frozen=True)
class FixedHashKey:
    """Key with an explicit hash code, compared by name."""

    name: str
    code: int

    def __hash__(self) -> int:
        return self.code

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FixedHashKey) and other.name == self.name


def test_linear_scenario_from_colliding_hash_codes() -> None:
    table = OpenAddressTable(11, LINEAR)
    a, b, c = FixedHashKey("a", 11), FixedHashKey("b", 22), FixedHashKey("c", 33)

    assert table.insert(Entry(a)) is InsertOutcome.INSERTED
    assert table.insert(Entry(b)) is InsertOutcome.INSERTED
    assert table.insert(Entry(c)) is InsertOutcome.INSERTED
    assert table.insert(Entry(FixedHashKey("a", 11))) is InsertOutcome.DUPLICATE_FOUND

    assert table.dump() == [
        DumpRow(0, a, 2, 1),
        DumpRow(1, b, 1, 2),
        DumpRow(2, c, 1, 3),
    ]
    assert table.element_count == 3
    assert table.duplicate_count == 1
    assert table.total_probes == 6
    assert table.average_probes() == pytest.approx(2.0)


def test_same_scenario_with_plain_integer_keys() -> None:
    table = OpenAddressTable(11, LINEAR)
    outcomes = [table.insert_key(k) for k in (11, 22, 33, 11)]
    assert outcomes == [
        InsertOutcome.INSERTED,
        InsertOutcome.INSERTED,
        InsertOutcome.INSERTED,
        InsertOutcome.DUPLICATE_FOUND,
    ]
    assert [(row.slot, row.key, row.frequency, row.probe_count) for row in table.dump()] == [
        (0, 11, 2, 1),
        (1, 22, 1, 2),
        (2, 33, 1, 3),
    ]


def test_double_hashing_skips_by_secondary_hash() -> None:
    table = OpenAddressTable(11, DOUBLE)
    # 11 -> slot 0; 22 -> h1 0, h2 = 1 + 22 % 9 = 5 -> slot 5
    table.insert_key(11)
    table.insert_key(22)
    assert [row.slot for row in table.dump()] == [0, 5]
    assert table.search(22).probe_count == 2


def test_duplicate_insert_updates_frequency_only() -> None:
    table = OpenAddressTable(13, DOUBLE)
    first = Entry("word")
    assert table.insert(first) is InsertOutcome.INSERTED
    assert first.frequency == 1
    assert table.element_count == 1

    second = Entry("word")
    assert table.insert(second) is InsertOutcome.DUPLICATE_FOUND
    stored = table.search("word")
    assert stored is first
    assert stored.frequency == 2
    assert second.probe_count == 0
    assert table.duplicate_count == 1
    assert table.element_count == 1
    assert table.total_probes == 1


def test_search_returns_inserted_entry_with_its_probe_count() -> None:
    table = OpenAddressTable(7, LINEAR)
    for key in (0, 7, 14):
        table.insert_key(key)
    found = table.search(14)
    assert found is not None
    assert found.key == 14
    assert found.probe_count == 3
    assert 14 in table


def test_search_stops_at_first_empty_slot() -> None:
    table = OpenAddressTable(7, LINEAR)
    table.insert_key(0)
    table.insert_key(7)
    assert table.search(14) is None
    assert 21 not in table


def test_search_in_full_table_without_match_returns_none() -> None:
    table = OpenAddressTable(5, DOUBLE)
    for key in range(5):
        assert table.insert_key(key) is InsertOutcome.INSERTED
    assert table.is_full
    assert table.search(99) is None


def test_empty_table_statistics() -> None:
    table = OpenAddressTable(11, DOUBLE)
    assert table.average_probes() == 0.0
    assert table.load_factor() == 0.0
    assert table.dump() == []
    assert len(table) == 0
    assert table.is_full is False


def test_full_table_rejects_new_keys_without_mutation() -> None:
    table = OpenAddressTable(5, LINEAR)
    for key in (1, 6, 11, 16, 21):
        assert table.insert_key(key) is InsertOutcome.INSERTED
    assert table.is_full
    before = (table.element_count, table.total_probes, table.duplicate_count, table.dump())

    assert table.insert_key(26) is InsertOutcome.TABLE_FULL
    assert (table.element_count, table.total_probes, table.duplicate_count, table.dump()) == before
    assert table.load_factor() == pytest.approx(1.0)


def test_full_table_still_counts_duplicates() -> None:
    table = OpenAddressTable(3, DOUBLE)
    for key in (0, 1, 2):
        table.insert_key(key)
    assert table.insert_key(2) is InsertOutcome.DUPLICATE_FOUND
    assert table.duplicate_count == 1
    assert table.search(2).frequency == 2


def test_average_probes_is_mean_of_entry_probe_counts() -> None:
    table = OpenAddressTable(11, LINEAR)
    for key in (3, 14, 25, 4, 100):
        table.insert_key(key)
    probes = [row.probe_count for row in table.dump()]
    assert table.average_probes() == pytest.approx(sum(probes) / len(probes))
    assert table.load_factor() == pytest.approx(5 / 11)


def test_dump_is_in_ascending_slot_order() -> None:
    table = OpenAddressTable(13, DOUBLE)
    for key in (12, 3, 7, 25, 1):
        table.insert_key(key)
    slots = [row.slot for row in table.dump()]
    assert slots == sorted(slots)
    assert len(slots) == 5


def test_summary_exposes_plain_values() -> None:
    table = OpenAddressTable(11, LINEAR)
    table.insert_key(1)
    table.insert_key(1)
    summary = table.summary()
    assert summary == {
        "strategy": "linear",
        "capacity": 11,
        "element_count": 1,
        "duplicate_count": 1,
        "total_probes": 1,
        "average_probes": 1.0,
        "load_factor": pytest.approx(1 / 11),
    }


def test_entry_text_form_matches_dump_fields() -> None:
    entry = Entry("abc", frequency=3, probe_count=2)
    assert str(entry) == "abc 3 2"


def test_insert_logs_debug_details(caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch) -> None:
    import logging

    logger = logging.getLogger("probebench")
    monkeypatch.setattr(logger, "propagate", True)
    table = OpenAddressTable(11, LINEAR)
    with caplog.at_level(logging.DEBUG, logger="probebench"):
        table.insert_key(5)
        table.insert_key(5)
    messages = [record.getMessage() for record in caplog.records]
    assert any("inserted 5 at index 5 with 1 probes" in msg for msg in messages)
    assert any("duplicate 5 at index 5, frequency now 2" in msg for msg in messages)
