from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from itertools import islice
from pathlib import Path

import pytest

from probebench.config import WorkloadPolicy
from probebench.contracts.error import BadInputError
from probebench.workloads.sources import DataSource, key_stream, key_supplier, read_word_list


def _take(iterator, n: int) -> list:
    return list(islice(iterator, n))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", DataSource.RANDOM), ("2", DataSource.DATE), (3, DataSource.WORD)],
)
def test_parse_data_source(raw, expected: DataSource) -> None:
    assert DataSource.parse(raw) is expected


@pytest.mark.parametrize("raw", ["0", "4", "words", ""])
def test_parse_data_source_rejects_unknown(raw: str) -> None:
    with pytest.raises(BadInputError):
        DataSource.parse(raw)


def test_display_names() -> None:
    assert DataSource.RANDOM.display_name == "Random Numbers"
    assert DataSource.DATE.display_name == "Date Values"
    assert DataSource.WORD.display_name == "Word List"


def test_random_source_is_repeatable_and_bounded() -> None:
    policy = WorkloadPolicy(seed=3, random_key_bound=50)
    supplier = key_supplier(DataSource.RANDOM, policy)
    first = _take(supplier(), 200)
    second = _take(supplier(), 200)
    assert first == second
    assert all(0 <= value < 50 for value in first)
    assert _take(key_stream(DataSource.RANDOM, WorkloadPolicy(seed=4, random_key_bound=50)), 200) != first


def test_date_source_steps_by_configured_interval() -> None:
    policy = WorkloadPolicy(timestamp_start_ms=1_000, timestamp_step_ms=500)
    values = _take(key_stream(DataSource.DATE, policy), 3)
    start = datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)
    assert values == [start, start + timedelta(milliseconds=500), start + timedelta(seconds=1)]
    assert len(set(values)) == 3


def test_date_source_defaults_to_now_and_is_shared_by_iterators() -> None:
    supplier = key_supplier(DataSource.DATE, WorkloadPolicy())
    first = _take(supplier(), 5)
    second = _take(supplier(), 5)
    assert first == second
    assert abs(first[0] - datetime.now(timezone.utc)) < timedelta(minutes=5)


def test_word_source_cycles_through_file(tmp_path: Path) -> None:
    words = tmp_path / "words.txt"
    words.write_text("alpha\n\n  beta  \ngamma\n", encoding="utf-8")
    assert read_word_list(words) == ["alpha", "beta", "gamma"]
    policy = WorkloadPolicy(word_list=str(words))
    assert _take(key_stream(DataSource.WORD, policy), 5) == ["alpha", "beta", "gamma", "alpha", "beta"]


def test_word_source_falls_back_to_random_strings_when_missing(
    tmp_path: Path, caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(logging.getLogger("probebench"), "propagate", True)
    policy = WorkloadPolicy(word_list=str(tmp_path / "nope.txt"), fallback_min_len=5, fallback_max_len=14)
    with caplog.at_level(logging.WARNING, logger="probebench"):
        supplier = key_supplier(DataSource.WORD, policy)
    words = _take(supplier(), 50)
    assert words == _take(supplier(), 50)
    assert all(5 <= len(word) <= 14 and word.isalpha() and word.islower() for word in words)
    assert any("Error reading word list" in record.getMessage() for record in caplog.records)
    assert any("Falling back to random strings" in record.getMessage() for record in caplog.records)


def test_word_source_falls_back_when_file_is_blank(tmp_path: Path) -> None:
    blank = tmp_path / "blank.txt"
    blank.write_text("\n   \n", encoding="utf-8")
    words = _take(key_stream(DataSource.WORD, WorkloadPolicy(word_list=str(blank))), 10)
    assert len(words) == 10
    assert all(isinstance(word, str) and word for word in words)


def test_word_source_falls_back_when_file_is_not_utf8(
    tmp_path: Path, caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(logging.getLogger("probebench"), "propagate", True)
    latin1 = tmp_path / "latin1.txt"
    latin1.write_bytes("café\nnaïve\nfaçade\n".encode("latin-1"))
    policy = WorkloadPolicy(word_list=str(latin1))
    with caplog.at_level(logging.WARNING, logger="probebench"):
        words = _take(key_stream(DataSource.WORD, policy), 20)
    assert len(words) == 20
    assert all(word.isalpha() and word.islower() and word.isascii() for word in words)
    assert any("Falling back to random strings" in record.getMessage() for record in caplog.records)
