"""Open-addressing probe benchmark: linear probing vs. double hashing."""

from . import analysis, contracts, core, io, workloads

__version__ = "0.1.0"

__all__ = [
    "analysis",
    "contracts",
    "core",
    "io",
    "workloads",
]
