"""Typed configuration loader for the probebench CLI."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from .contracts.error import BadInputError


@dataclass
class CapacityPolicy:
    min_range: int = 95_500
    max_range: int = 96_000

    def validate(self) -> None:
        if self.min_range < 0:
            raise BadInputError("capacity.min_range must be >= 0")
        if self.max_range <= self.min_range:
            raise BadInputError("capacity.max_range must be > capacity.min_range")


@dataclass
class WorkloadPolicy:
    seed: int = 42
    random_key_bound: int = 1_000_000
    timestamp_start_ms: int | None = None
    timestamp_step_ms: int = 1000
    word_list: str = "word-list.txt"
    fallback_min_len: int = 5
    fallback_max_len: int = 14

    def validate(self) -> None:
        if self.random_key_bound <= 0:
            raise BadInputError("workload.random_key_bound must be > 0")
        if self.timestamp_step_ms <= 0:
            raise BadInputError("workload.timestamp_step_ms must be > 0")
        if self.timestamp_start_ms is not None and self.timestamp_start_ms < 0:
            raise BadInputError("workload.timestamp_start_ms must be >= 0 when set")
        if self.fallback_min_len <= 0:
            raise BadInputError("workload.fallback_min_len must be > 0")
        if self.fallback_max_len < self.fallback_min_len:
            raise BadInputError("workload.fallback_max_len must be >= workload.fallback_min_len")


@dataclass
class OutputPolicy:
    linear_dump: str = "linear-dump.txt"
    double_dump: str = "double-dump.txt"
    compress: bool = False

    def validate(self) -> None:
        if not self.linear_dump or not self.double_dump:
            raise BadInputError("output.linear_dump and output.double_dump must be non-empty")
        if self.linear_dump == self.double_dump:
            raise BadInputError("output.linear_dump and output.double_dump must differ")

    def dump_path(self, strategy_name: str) -> str:
        return self.linear_dump if strategy_name == "linear" else self.double_dump


def _parse_bool(raw: Any, name: str) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        normalized = raw.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    raise BadInputError(f"{name} must be boolean")


def _coerce(value: Any, default: Any, name: str) -> Any:
    """Coerce a TOML value to the type of the field's default (``None`` means int)."""

    if isinstance(default, bool):
        return _parse_bool(value, name)
    if isinstance(default, str):
        if not isinstance(value, str):
            raise BadInputError(f"{name} must be a string")
        return value
    if isinstance(value, (bool, float)):
        raise BadInputError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise BadInputError(f"{name} must be an integer") from exc


def _section(data: dict[str, Any], name: str, cls: type[Any]) -> Any:
    raw = data.get(name, {})
    if not isinstance(raw, dict):
        raise BadInputError(f"[{name}] section must be a table")
    defaults = {f.name: f.default for f in fields(cls)}
    unknown = sorted(set(raw) - set(defaults))
    if unknown:
        raise BadInputError(f"Unknown key(s) in [{name}]: {', '.join(unknown)}")
    kwargs = {key: _coerce(value, defaults[key], f"{name}.{key}") for key, value in raw.items()}
    return cls(**kwargs)


@dataclass
class AppConfig:
    capacity: CapacityPolicy = field(default_factory=CapacityPolicy)
    workload: WorkloadPolicy = field(default_factory=WorkloadPolicy)
    output: OutputPolicy = field(default_factory=OutputPolicy)

    @classmethod
    def load(cls, path: Path | None) -> AppConfig:
        if path is None:
            cfg = cls()
        else:
            try:
                data = tomllib.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError as exc:
                raise BadInputError(f"Config file not found: {path}") from exc
            except tomllib.TOMLDecodeError as exc:
                raise BadInputError(f"Invalid TOML: {exc}") from exc
            cfg = cls.from_dict(data)
        cfg.apply_env_overrides(os.environ)
        cfg.validate()
        return cfg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        capacity = _section(data, "capacity", CapacityPolicy)
        workload = _section(data, "workload", WorkloadPolicy)
        output = _section(data, "output", OutputPolicy)
        return cls(capacity=capacity, workload=workload, output=output)

    def apply_env_overrides(self, env: Mapping[str, str]) -> None:
        mapping: dict[str, tuple[Any, str, Callable[[str], Any]]] = {
            "PROBEBENCH_MIN_RANGE": (self.capacity, "min_range", int),
            "PROBEBENCH_MAX_RANGE": (self.capacity, "max_range", int),
            "PROBEBENCH_SEED": (self.workload, "seed", int),
            "PROBEBENCH_RANDOM_KEY_BOUND": (self.workload, "random_key_bound", int),
            "PROBEBENCH_TIMESTAMP_START_MS": (self.workload, "timestamp_start_ms", int),
            "PROBEBENCH_TIMESTAMP_STEP_MS": (self.workload, "timestamp_step_ms", int),
            "PROBEBENCH_WORD_LIST": (self.workload, "word_list", str),
            "PROBEBENCH_LINEAR_DUMP": (self.output, "linear_dump", str),
            "PROBEBENCH_DOUBLE_DUMP": (self.output, "double_dump", str),
        }
        for key, (target, attr, caster) in mapping.items():
            raw_value = env.get(key)
            if raw_value is None:
                continue
            try:
                value = caster(raw_value)
            except ValueError as exc:
                raise BadInputError(f"Invalid env override {key}={raw_value!r}") from exc
            setattr(target, attr, value)

        raw_compress = env.get("PROBEBENCH_COMPRESS")
        if raw_compress is not None:
            try:
                self.output.compress = _parse_bool(raw_compress, "PROBEBENCH_COMPRESS")
            except BadInputError as exc:
                raise BadInputError(f"Invalid env override PROBEBENCH_COMPRESS={raw_compress!r}") from exc

    def validate(self) -> None:
        self.capacity.validate()
        self.workload.validate()
        self.output.validate()


def load_app_config(path: str | None) -> AppConfig:
    config_path = Path(path) if path else None
    return AppConfig.load(config_path)
