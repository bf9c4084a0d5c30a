"""I/O helpers for the probebench CLI."""

from .dump import (
    format_dump_line,
    open_dump_for_read,
    open_dump_for_write,
    parse_dump_line,
    read_table_dump,
    write_table_dump,
)
from .summary import SUMMARY_SCHEMA_ID, build_summary, validate_summary, write_summary

__all__ = [
    "SUMMARY_SCHEMA_ID",
    "build_summary",
    "format_dump_line",
    "open_dump_for_read",
    "open_dump_for_write",
    "parse_dump_line",
    "read_table_dump",
    "validate_summary",
    "write_summary",
    "write_table_dump",
]
