"""Twin-prime capacity selection."""

from __future__ import annotations

import logging

from probebench.contracts.error import ConfigurationError

logger = logging.getLogger("probebench")


def is_prime(n: int) -> bool:
    """Deterministic trial division over the 6k +/- 1 wheel."""

    if n <= 1:
        return False
    if n <= 3:
        return True
    if n % 2 == 0 or n % 3 == 0:
        return False
    i = 5
    while i * i <= n:
        if n % i == 0 or n % (i + 2) == 0:
            return False
        i += 6
    return True


def find_twin_prime_ceiling(min_value: int, max_value: int) -> int:
    """Return the larger member of the first twin-prime pair inside ``[min_value, max_value]``.

    The scan starts at ``max(min_value, 3)`` (rounded up to odd) and both members of
    the pair must lie inside the range. Raises :class:`ConfigurationError` when the
    range holds no twin primes.
    """

    start = max(min_value, 3)
    if start % 2 == 0:
        start += 1
    for i in range(start, max_value - 1, 2):
        if is_prime(i) and is_prime(i + 2):
            logger.debug("Twin prime pair (%d, %d) found in [%d, %d]", i, i + 2, min_value, max_value)
            return i + 2
    raise ConfigurationError(
        f"No twin prime pair in range [{min_value}, {max_value}]",
        hint="widen capacity.min_range/capacity.max_range",
    )


__all__ = ["is_prime", "find_twin_prime_ceiling"]
