from .primes import find_twin_prime_ceiling, is_prime
from .probing import (
    DOUBLE,
    LINEAR,
    STRATEGIES,
    DoubleHashProbe,
    LinearProbe,
    ProbeStrategy,
    probe_sequence,
    resolve_strategy,
    stable_hash,
)
from .table import DumpRow, Entry, InsertOutcome, OpenAddressTable

__all__ = [
    "DOUBLE",
    "DoubleHashProbe",
    "DumpRow",
    "Entry",
    "InsertOutcome",
    "LINEAR",
    "LinearProbe",
    "OpenAddressTable",
    "ProbeStrategy",
    "STRATEGIES",
    "find_twin_prime_ceiling",
    "is_prime",
    "probe_sequence",
    "resolve_strategy",
    "stable_hash",
]
