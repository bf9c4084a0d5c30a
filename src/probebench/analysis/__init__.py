"""Probe tracing and invariant checks for probebench tables."""

from .probe import format_trace_lines, trace_insert, trace_search, verify_table

__all__ = ["format_trace_lines", "trace_insert", "trace_search", "verify_table"]
