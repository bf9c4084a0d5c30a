"""CLI command registration and handlers for probebench."""

from __future__ import annotations

import argparse
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from probebench.analysis import format_trace_lines, trace_insert, trace_search, verify_table
from probebench.config import AppConfig
from probebench.contracts.error import BadInputError, DumpIOError, Exit, InvariantError
from probebench.core.primes import find_twin_prime_ceiling
from probebench.core.probing import STRATEGIES, resolve_strategy
from probebench.core.table import OpenAddressTable
from probebench.experiment import (
    LOAD_FACTORS,
    ExperimentResult,
    format_report_lines,
    format_sweep_lines,
    run_experiment,
    run_sweep,
)
from probebench.io.dump import write_table_dump
from probebench.io.summary import build_summary, write_summary
from probebench.workloads.sources import DataSource

_INT_KEY = re.compile(r"^-?\d+$")


@dataclass(frozen=True)
class CLIContext:
    """Runtime hooks supplied by the top-level CLI entrypoint."""

    emit_success: Callable[..., None]
    config: Callable[[], AppConfig]
    logger: logging.Logger
    guard: Callable[[Callable[[argparse.Namespace], int]], Callable[[argparse.Namespace], int]]


def register_subcommands(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    ctx: CLIContext,
) -> Dict[str, Callable[[argparse.Namespace], int]]:
    """Define CLI subcommands and return their handlers."""

    handlers: Dict[str, Callable[[argparse.Namespace], int]] = {}

    def _register(
        name: str,
        help_text: Optional[str],
        configure: Callable[[argparse.ArgumentParser], Callable[[argparse.Namespace], int]],
    ) -> None:
        parser = subparsers.add_parser(name, help=help_text)
        handler = configure(parser)
        handlers[name] = ctx.guard(handler)

    _register(
        "run",
        "Fill a linear-probing and a double-hashing table and compare average probes.",
        lambda parser: _configure_run(parser, ctx),
    )
    _register(
        "sweep",
        "Repeat the comparison over a list of load factors.",
        lambda parser: _configure_sweep(parser, ctx),
    )
    _register(
        "twin-prime",
        "Print the twin-prime table capacity for a range.",
        lambda parser: _configure_twin_prime(parser, ctx),
    )
    _register(
        "probe-visualize",
        "Trace the probe path of an insert or search (text/JSON).",
        lambda parser: _configure_probe_visualize(parser, ctx),
    )
    return handlers


def parse_key(raw: str) -> Any:
    """CLI keys that look like integers are integers, everything else stays text."""

    return int(raw) if _INT_KEY.match(raw) else raw


def _parse_source(raw: str) -> DataSource:
    return DataSource.parse(raw)


def _verify_results(results: List[ExperimentResult]) -> None:
    problems: List[str] = []
    for result in results:
        for report in result.reports:
            ok, messages = verify_table(report.table)
            if not ok:
                problems.extend(f"[{report.strategy}] {msg}" for msg in messages)
    if problems:
        raise InvariantError(f"{len(problems)} table invariant violation(s): " + "; ".join(problems[:5]))


def _configure_run(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("data_source", metavar="dataSource", help="1=random numbers, 2=date values, 3=word list")
    parser.add_argument("load_factor", metavar="loadFactor", type=float, help="target alpha = n/m in (0, 1)")
    parser.add_argument(
        "debug_level",
        metavar="debugLevel",
        nargs="?",
        type=int,
        default=0,
        choices=(0, 1, 2),
        help="0=summary, 1=also dump both tables, 2=also log every insert",
    )
    parser.add_argument("--parallel", action="store_true", help="Populate both tables on separate workers")
    parser.add_argument("--json-summary-out", default=None, help="Write a summary.v1 JSON document")
    parser.add_argument("--verify", action="store_true", help="Check table invariants after the run")

    def handler(args: argparse.Namespace) -> int:
        source = _parse_source(args.data_source)
        cfg = ctx.config()
        if args.debug_level >= 2:
            ctx.logger.setLevel(logging.DEBUG)
        result = run_experiment(source, args.load_factor, cfg, parallel=args.parallel)
        if args.verify:
            _verify_results([result])

        lines = format_report_lines(result)
        dumps: Dict[str, str] = {}
        dump_errors: List[str] = []
        if args.debug_level >= 1:
            for report in result.reports:
                path = cfg.output.dump_path(report.strategy)
                try:
                    write_table_dump(report.table, path, compress=cfg.output.compress)
                except DumpIOError as exc:
                    ctx.logger.error("%s", exc)
                    dump_errors.append(str(exc))
                else:
                    dumps[report.strategy] = path
            if dumps:
                lines.append("Hash tables saved to files " + " and ".join(dumps.values()))

        summary = build_summary([result])
        if args.json_summary_out:
            try:
                write_summary(summary, args.json_summary_out)
            except DumpIOError as exc:
                ctx.logger.error("%s", exc)
                dump_errors.append(str(exc))
        data: Dict[str, Any] = dict(summary)
        data["debug_level"] = args.debug_level
        if dumps:
            data["dumps"] = dumps
        if dump_errors:
            data["dump_errors"] = dump_errors
        ctx.emit_success("run", text="\n".join(lines), data=data)
        return int(Exit.IO) if dump_errors else int(Exit.OK)

    return handler


def _configure_sweep(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("data_source", metavar="dataSource", help="1=random numbers, 2=date values, 3=word list")
    parser.add_argument(
        "--load-factors",
        type=float,
        nargs="+",
        default=list(LOAD_FACTORS),
        help="Load factors to test (default: %(default)s)",
    )
    parser.add_argument("--parallel", action="store_true", help="Populate both tables on separate workers")
    parser.add_argument("--json-summary-out", default=None, help="Write a summary.v1 JSON document")
    parser.add_argument("--verify", action="store_true", help="Check table invariants after every run")

    def handler(args: argparse.Namespace) -> int:
        source = _parse_source(args.data_source)
        results = run_sweep(source, ctx.config(), args.load_factors, parallel=args.parallel)
        if args.verify:
            _verify_results(results)
        summary = build_summary(results)
        data: Dict[str, Any] = dict(summary)
        code = Exit.OK
        if args.json_summary_out:
            try:
                write_summary(summary, args.json_summary_out)
            except DumpIOError as exc:
                ctx.logger.error("%s", exc)
                data["dump_errors"] = [str(exc)]
                code = Exit.IO
        ctx.emit_success("sweep", text="\n".join(format_sweep_lines(results)), data=data)
        return int(code)

    return handler


def _configure_twin_prime(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("--min", dest="min_value", type=int, default=None, help="Lower bound (default: config)")
    parser.add_argument("--max", dest="max_value", type=int, default=None, help="Upper bound (default: config)")

    def handler(args: argparse.Namespace) -> int:
        policy = ctx.config().capacity
        lo = policy.min_range if args.min_value is None else args.min_value
        hi = policy.max_range if args.max_value is None else args.max_value
        if hi <= lo:
            raise BadInputError(f"--max ({hi}) must be greater than --min ({lo})")
        capacity = find_twin_prime_ceiling(lo, hi)
        ctx.emit_success(
            "twin-prime",
            text=str(capacity),
            data={"capacity": capacity, "pair": [capacity - 2, capacity], "range": [lo, hi]},
        )
        return int(Exit.OK)

    return handler


def _configure_probe_visualize(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("--strategy", choices=sorted(STRATEGIES), default="double")
    parser.add_argument("--capacity", type=int, default=None, help="Table capacity (default: twin prime from config)")
    parser.add_argument(
        "--seed",
        action="append",
        default=[],
        help="Key inserted before tracing (repeatable)",
    )
    parser.add_argument("--key", required=True, help="Key to trace")
    parser.add_argument("--operation", choices=("insert", "search"), default="search")
    parser.add_argument("--export-json", default=None, help="Write the trace as JSON to this path")

    def handler(args: argparse.Namespace) -> int:
        strategy = resolve_strategy(args.strategy)
        capacity = args.capacity
        if capacity is None:
            policy = ctx.config().capacity
            capacity = find_twin_prime_ceiling(policy.min_range, policy.max_range)
        table = OpenAddressTable(capacity, strategy)
        for raw in args.seed:
            table.insert_key(parse_key(raw))
        key = parse_key(args.key)
        trace = trace_insert(table, key) if args.operation == "insert" else trace_search(table, key)

        export_path: Optional[Path] = None
        if args.export_json:
            export_path = Path(args.export_json)
            try:
                export_path.write_text(json.dumps(trace, indent=2), encoding="utf-8")
            except OSError as exc:
                raise DumpIOError(f"Could not write trace to {export_path}: {exc}") from exc
        lines = format_trace_lines(trace, seeds=args.seed, export_path=export_path)
        data: Dict[str, Any] = {"trace": trace}
        if export_path is not None:
            data["export_path"] = str(export_path)
        ctx.emit_success("probe-visualize", text="\n".join(lines), data=data)
        return int(Exit.OK)

    return handler


__all__ = ["CLIContext", "parse_key", "register_subcommands"]
