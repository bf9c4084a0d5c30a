"""Text dump files for open-addressing tables."""

from __future__ import annotations

import gzip
import logging
import os
import re
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import IO, List, cast

from probebench.contracts.error import BadInputError, DumpIOError
from probebench.core.table import DumpRow, OpenAddressTable

logger = logging.getLogger("probebench")

_DUMP_LINE = re.compile(r"^table\[(\d+)\]: (.*) (\d+) (\d+)$")


def open_dump_for_read(path: str) -> IO[str]:
    """Open a dump path for text reading (gzip-aware)."""

    if path.endswith(".gz"):
        return cast(IO[str], gzip.open(path, "rt", encoding="utf-8"))
    return cast(IO[str], open(path, encoding="utf-8"))


def open_dump_for_write(path: str, compress: bool) -> IO[str]:
    """Open a dump path for text writing (gzip-aware)."""

    if compress or path.endswith(".gz"):
        return cast(IO[str], gzip.open(path, "wt", encoding="utf-8", newline="\n"))
    return cast(IO[str], open(path, "w", encoding="utf-8", newline="\n"))


def format_dump_line(row: DumpRow) -> str:
    return f"table[{row.slot}]: {row.key} {row.frequency} {row.probe_count}"


def write_table_dump(table: OpenAddressTable, path: str | Path, *, compress: bool = False) -> Path:
    """Write one line per occupied slot, atomically replacing ``path``.

    The table is only read. Any OS-level failure is raised as :class:`DumpIOError`
    and leaves no temporary file behind.
    """

    target = Path(path)
    use_gz = compress or target.name.endswith(".gz")
    try:
        tmp = tempfile.NamedTemporaryFile(
            delete=False,
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=".tmp",
        )
    except OSError as exc:
        raise DumpIOError(f"Error dumping hash table to {target}: {exc}") from exc
    tmp_path = Path(tmp.name)
    tmp.close()
    try:
        with open_dump_for_write(str(tmp_path), use_gz) as fh:
            for row in table.dump():
                fh.write(format_dump_line(row) + "\n")
        os.replace(tmp_path, target)
    except OSError as exc:
        raise DumpIOError(f"Error dumping hash table to {target}: {exc}") from exc
    finally:
        with suppress(FileNotFoundError):
            tmp_path.unlink()
    logger.info("Dumped %d %s slots to %s", table.element_count, table.strategy.name, target)
    return target


def parse_dump_line(line: str, lineno: int = 0) -> DumpRow:
    match = _DUMP_LINE.match(line.rstrip("\n"))
    if match is None:
        raise BadInputError(f"Malformed dump line {lineno}: {line.rstrip()!r}")
    slot, key, frequency, probes = match.groups()
    return DumpRow(int(slot), key, int(frequency), int(probes))


def read_table_dump(path: str | Path) -> List[DumpRow]:
    """Parse a dump back into rows; keys come back as their text form."""

    rows: List[DumpRow] = []
    with open_dump_for_read(str(path)) as fh:
        for lineno, line in enumerate(fh, start=1):
            if not line.strip():
                continue
            rows.append(parse_dump_line(line, lineno))
    return rows


__all__ = [
    "format_dump_line",
    "open_dump_for_read",
    "open_dump_for_write",
    "parse_dump_line",
    "read_table_dump",
    "write_table_dump",
]
