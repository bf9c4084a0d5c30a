"""JSON run summaries validated against the bundled ``summary.v1`` schema."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Sequence
from contextlib import suppress
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict

from jsonschema import Draft202012Validator

from probebench.contracts.error import DumpIOError, InvariantError
from probebench.experiment import ExperimentResult

logger = logging.getLogger("probebench")

SUMMARY_SCHEMA_ID = "probebench.summary.v1"


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    schema_resource = resources.files("probebench.contracts") / "summary_schema.json"
    with schema_resource.open(encoding="utf-8") as stream:
        schema = json.load(stream)
    return Draft202012Validator(schema)


def build_summary(results: Sequence[ExperimentResult]) -> Dict[str, Any]:
    if not results:
        raise InvariantError("summary needs at least one experiment result")
    first = results[0]
    runs = []
    for result in results:
        runs.append(
            {
                "load_factor": result.load_factor,
                "target_count": result.target_count,
                "parallel": result.parallel,
                "tables": [
                    {
                        "strategy": report.strategy,
                        "element_count": report.element_count,
                        "duplicate_count": report.duplicate_count,
                        "total_probes": report.total_probes,
                        "average_probes": report.average_probes,
                        "load_factor": report.load_factor,
                        "reached_target": report.reached_target,
                        "elapsed_seconds": report.elapsed_seconds,
                    }
                    for report in result.reports
                ],
            }
        )
    return {
        "schema": SUMMARY_SCHEMA_ID,
        "capacity": first.capacity,
        "source": {"id": int(first.source), "name": first.source.display_name},
        "runs": runs,
    }


def validate_summary(summary: Dict[str, Any]) -> None:
    errors = sorted(_validator().iter_errors(summary), key=lambda err: list(err.path))
    if errors:
        detail = "; ".join(f"{err.message} @ {list(err.path)}" for err in errors)
        raise InvariantError(f"summary does not match {SUMMARY_SCHEMA_ID}: {detail}")


def write_summary(summary: Dict[str, Any], path: str | Path) -> Path:
    validate_summary(summary)
    target = Path(path)
    try:
        tmp = tempfile.NamedTemporaryFile(
            "w",
            delete=False,
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=".tmp",
            encoding="utf-8",
        )
    except OSError as exc:
        raise DumpIOError(f"Could not write summary to {target}: {exc}") from exc
    tmp_path = Path(tmp.name)
    try:
        with tmp:
            json.dump(summary, tmp, indent=2, ensure_ascii=False)
            tmp.write("\n")
        os.replace(tmp_path, target)
    except OSError as exc:
        raise DumpIOError(f"Could not write summary to {target}: {exc}") from exc
    finally:
        with suppress(FileNotFoundError):
            tmp_path.unlink()
    logger.info("Wrote JSON summary to %s", target)
    return target


__all__ = ["SUMMARY_SCHEMA_ID", "build_summary", "validate_summary", "write_summary"]
