"""Linear probing vs. double hashing experiment runner."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Iterable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from .config import AppConfig
from .contracts.error import BadInputError
from .core.primes import find_twin_prime_ceiling
from .core.probing import DOUBLE, LINEAR, ProbeStrategy
from .core.table import InsertOutcome, OpenAddressTable
from .workloads.sources import DataSource, KeySupplier, key_supplier

logger = logging.getLogger("probebench")

LOAD_FACTORS: tuple[float, ...] = (0.5, 0.6, 0.7, 0.8, 0.9, 0.95, 0.99)
DEFAULT_STRATEGIES: tuple[ProbeStrategy, ...] = (LINEAR, DOUBLE)


@dataclass
class TableReport:
    strategy: str
    label: str
    element_count: int
    duplicate_count: int
    total_probes: int
    average_probes: float
    load_factor: float
    reached_target: bool
    elapsed_seconds: float
    table: OpenAddressTable = field(repr=False, compare=False)

    @property
    def inserted_total(self) -> int:
        return self.element_count + self.duplicate_count


@dataclass
class ExperimentResult:
    source: DataSource
    capacity: int
    load_factor: float
    target_count: int
    parallel: bool
    reports: list[TableReport]

    def report(self, strategy: str) -> TableReport:
        for item in self.reports:
            if item.strategy == strategy:
                return item
        raise KeyError(strategy)


def validate_load_factor(load_factor: float) -> float:
    if not 0.0 < load_factor < 1.0:
        raise BadInputError(f"load factor must be between 0 and 1 (got {load_factor})")
    return load_factor


def target_element_count(load_factor: float, capacity: int) -> int:
    return math.ceil(load_factor * capacity)


def pick_capacity(config: AppConfig) -> int:
    capacity = find_twin_prime_ceiling(config.capacity.min_range, config.capacity.max_range)
    logger.info("Table size (twin prime): %d", capacity)
    return capacity


def populate(
    table: OpenAddressTable,
    keys: Iterator[Any],
    target: int,
    *,
    stall_limit: int | None = None,
) -> bool:
    """Insert keys until ``target`` distinct elements are stored.

    Returns ``False`` when the table fills up, the key stream runs dry, or
    ``stall_limit`` keys in a row (default ``4 * capacity``) were all duplicates,
    which is how a cycled word list shorter than the target shows up.
    """

    limit = stall_limit if stall_limit is not None else 4 * table.capacity
    stalled = 0
    if table.element_count < target:
        for key in keys:
            outcome = table.insert_key(key)
            if outcome is InsertOutcome.TABLE_FULL:
                logger.warning("[%s] table full before reaching %d elements", table.strategy.name, target)
                break
            if table.element_count >= target:
                break
            stalled = stalled + 1 if outcome is InsertOutcome.DUPLICATE_FOUND else 0
            if stalled >= limit:
                logger.warning("[%s] %d duplicates in a row, key source exhausted", table.strategy.name, stalled)
                break
    reached = table.element_count >= target
    if not reached:
        logger.warning(
            "Could not reach target load factor. Inserted %d out of %d elements (%s).",
            table.element_count,
            target,
            table.strategy.name,
        )
    return reached


def _fill(strategy: ProbeStrategy, capacity: int, supplier: KeySupplier, target: int) -> TableReport:
    table = OpenAddressTable(capacity, strategy)
    logger.info("Inserting into %s table...", strategy.label)
    started = time.perf_counter()
    reached = populate(table, supplier(), target)
    elapsed = time.perf_counter() - started
    logger.info(
        "[%s] %d elements, %d duplicates, avg probes %.4f (%.3fs)",
        strategy.name,
        table.element_count,
        table.duplicate_count,
        table.average_probes(),
        elapsed,
    )
    return TableReport(
        strategy=strategy.name,
        label=strategy.label,
        element_count=table.element_count,
        duplicate_count=table.duplicate_count,
        total_probes=table.total_probes,
        average_probes=table.average_probes(),
        load_factor=table.load_factor(),
        reached_target=reached,
        elapsed_seconds=elapsed,
        table=table,
    )


def _run(
    source: DataSource,
    load_factor: float,
    capacity: int,
    supplier: KeySupplier,
    strategies: Sequence[ProbeStrategy],
    parallel: bool,
) -> ExperimentResult:
    validate_load_factor(load_factor)
    for strategy in strategies:
        strategy.validate_capacity(capacity)
    target = target_element_count(load_factor, capacity)
    logger.info(
        "Target load factor %.2f -> %d elements (source=%s)", load_factor, target, source.display_name
    )
    if parallel:
        # One worker per table keeps every table single-writer.
        with ThreadPoolExecutor(max_workers=len(strategies)) as pool:
            futures = [pool.submit(_fill, s, capacity, supplier, target) for s in strategies]
            reports = [future.result() for future in futures]
    else:
        reports = [_fill(s, capacity, supplier, target) for s in strategies]
    return ExperimentResult(
        source=source,
        capacity=capacity,
        load_factor=load_factor,
        target_count=target,
        parallel=parallel,
        reports=reports,
    )


def run_experiment(
    source: DataSource,
    load_factor: float,
    config: AppConfig,
    *,
    parallel: bool = False,
    capacity: int | None = None,
    strategies: Sequence[ProbeStrategy] = DEFAULT_STRATEGIES,
) -> ExperimentResult:
    validate_load_factor(load_factor)
    cap = capacity if capacity is not None else pick_capacity(config)
    supplier = key_supplier(source, config.workload)
    return _run(source, load_factor, cap, supplier, strategies, parallel)


def run_sweep(
    source: DataSource,
    config: AppConfig,
    load_factors: Iterable[float] = LOAD_FACTORS,
    *,
    parallel: bool = False,
    capacity: int | None = None,
) -> list[ExperimentResult]:
    factors = [validate_load_factor(lf) for lf in load_factors]
    cap = capacity if capacity is not None else pick_capacity(config)
    supplier = key_supplier(source, config.workload)
    return [_run(source, lf, cap, supplier, DEFAULT_STRATEGIES, parallel) for lf in factors]


def format_report_lines(result: ExperimentResult) -> list[str]:
    lines = [
        f"Found a twin prime table capacity: {result.capacity}",
        f"Input: {result.source.display_name}   Loadfactor: {result.load_factor:.2f}",
    ]
    for report in result.reports:
        lines.append(f"        Using {report.label}")
        lines.append(f"Size of hash table is {report.element_count}")
        lines.append(
            f"        Inserted {report.inserted_total} elements, "
            f"of which {report.duplicate_count} were duplicates"
        )
        lines.append(f"        Avg. no. of probes = {report.average_probes:.2f}")
        if not report.reached_target:
            lines.append(
                f"        Warning: reached only {report.element_count} of {result.target_count} elements"
            )
    return lines


def format_sweep_lines(results: Sequence[ExperimentResult]) -> list[str]:
    if not results:
        return ["(no load factors)"]
    labels = [report.label for report in results[0].reports]
    header = "alpha  " + "  ".join(f"{label:>16}" for label in labels)
    lines = [
        f"Capacity: {results[0].capacity}   Input: {results[0].source.display_name}",
        header,
    ]
    for result in results:
        cells = "  ".join(f"{report.average_probes:>16.2f}" for report in result.reports)
        lines.append(f"{result.load_factor:<5.2f}  {cells}")
    return lines


__all__ = [
    "DEFAULT_STRATEGIES",
    "ExperimentResult",
    "LOAD_FACTORS",
    "TableReport",
    "format_report_lines",
    "format_sweep_lines",
    "pick_capacity",
    "populate",
    "run_experiment",
    "run_sweep",
    "target_element_count",
    "validate_load_factor",
]
