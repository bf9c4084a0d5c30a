"""Probe-path tracing and invariant checks for open-addressing tables."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from probebench.core.table import OpenAddressTable

ProbeTrace = Dict[str, Any]


def _json_friendly(value: Any) -> Any:
    """Return a JSON-serialisable representation of ``value``."""

    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return repr(value)


def _walk(table: OpenAddressTable, key: Any, operation: str) -> ProbeTrace:
    cap = table.capacity
    strategy = table.strategy
    key_hash = table.key_hash(key)
    path: List[Dict[str, Any]] = []
    terminal = "full" if operation == "insert" else "exhausted"
    found = False
    for attempt in range(cap):
        idx = strategy.probe(key_hash, cap, attempt)
        slot = table.slot(idx)
        step: Dict[str, Any] = {"step": attempt, "slot": idx}
        if slot is None:
            step["state"] = "empty"
            if operation == "insert":
                step["action"] = "insert"
                terminal = "insert"
            else:
                terminal = "empty"
            path.append(step)
            break
        matches = slot.key == key
        step.update(
            {
                "state": "occupied",
                "occupant_key": repr(slot.key),
                "frequency": slot.frequency,
                "matches": matches,
            }
        )
        if matches:
            found = True
            if operation == "insert":
                step["action"] = "increment"
                terminal = "duplicate"
            else:
                terminal = "match"
            path.append(step)
            break
        if operation == "insert":
            step["action"] = "advance"
        path.append(step)
    return {
        "strategy": strategy.name,
        "operation": operation,
        "key": _json_friendly(key),
        "key_repr": repr(key),
        "key_hash": key_hash,
        "found": found,
        "terminal": terminal,
        "capacity": cap,
        "probes": len(path),
        "path": path,
    }


def trace_insert(table: OpenAddressTable, key: Any) -> ProbeTrace:
    """Replay what ``table.insert_key(key)`` would do, without mutating the table."""

    return _walk(table, key, "insert")


def trace_search(table: OpenAddressTable, key: Any) -> ProbeTrace:
    return _walk(table, key, "search")


def verify_table(table: OpenAddressTable) -> Tuple[bool, List[str]]:
    """Check the structural invariants of a populated table."""

    messages: List[str] = []
    cap = table.capacity
    occupied = 0
    probe_sum = 0
    for idx, entry in table.entries():
        occupied += 1
        probe_sum += entry.probe_count
        if not 1 <= entry.probe_count <= cap:
            messages.append(f"slot {idx}: probe_count {entry.probe_count} out of range [1, {cap}]")
            continue
        if entry.frequency < 1:
            messages.append(f"slot {idx}: frequency {entry.frequency} < 1")
        key_hash = table.key_hash(entry.key)
        expected = table.strategy.probe(key_hash, cap, entry.probe_count - 1)
        if expected != idx:
            messages.append(
                f"slot {idx}: key {entry.key!r} placed after {entry.probe_count} probes should sit at {expected}"
            )
            continue
        for attempt in range(entry.probe_count - 1):
            earlier = table.strategy.probe(key_hash, cap, attempt)
            if table.slot(earlier) is None:
                messages.append(f"slot {idx}: probe path of {entry.key!r} crosses empty slot {earlier}")
                break
    if occupied != table.element_count:
        messages.append(f"element_count {table.element_count} != occupied slots {occupied}")
    if probe_sum != table.total_probes:
        messages.append(f"total_probes {table.total_probes} != sum of entry probe counts {probe_sum}")
    if table.element_count > cap:
        messages.append(f"element_count {table.element_count} exceeds capacity {cap}")
    return not messages, messages


def format_trace_lines(
    trace: Dict[str, Any],
    *,
    seeds: Optional[Sequence[str]] = None,
    export_path: Optional[Union[str, Path]] = None,
) -> List[str]:
    """Return a human-friendly rendering of a probe trace."""

    lines: List[str] = []
    strategy = trace.get("strategy", "?")
    operation = trace.get("operation", "?")
    key_repr = trace.get("key_repr", "?")
    lines.append(f"Probe visualization [{strategy}] {operation.upper()} key={key_repr}")
    lines.append(f"Found: {trace.get('found')} | Terminal: {trace.get('terminal')}")
    if "capacity" in trace:
        lines.append(f"Capacity: {trace['capacity']} | Hash: {trace.get('key_hash')}")
    if seeds:
        lines.append("Seed keys: " + ", ".join(seeds))
    lines.append("Steps:")
    path = trace.get("path")
    if not isinstance(path, list) or not path:
        lines.append("  (no path recorded)")
    else:
        for item in path:
            if not isinstance(item, dict):
                lines.append(f"  {item!r}")
                continue
            attrs: List[str] = []
            for key in ("slot", "state", "action", "matches", "occupant_key", "frequency"):
                if key in item and item[key] is not None:
                    value = item[key]
                    if isinstance(value, bool):
                        value = str(value).lower()
                    attrs.append(f"{key}={value}")
            lines.append(f"  Step {item.get('step', '?')}: " + ", ".join(attrs))
    if export_path:
        lines.append(f"Trace JSON written to: {export_path}")
    return lines


__all__ = [
    "format_trace_lines",
    "trace_insert",
    "trace_search",
    "verify_table",
]
