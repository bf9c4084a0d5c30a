import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
if SRC.exists():
    sys.path.insert(0, str(SRC))

# Register shared Hypothesis profiles for deterministic CI runs and fast local loops.
from tests.util import hypothesis_profiles  # noqa: E402,F401  pylint: disable=unused-import

ENV_OVERRIDES = (
    "PROBEBENCH_CONFIG",
    "PROBEBENCH_MIN_RANGE",
    "PROBEBENCH_MAX_RANGE",
    "PROBEBENCH_SEED",
    "PROBEBENCH_RANDOM_KEY_BOUND",
    "PROBEBENCH_TIMESTAMP_START_MS",
    "PROBEBENCH_TIMESTAMP_STEP_MS",
    "PROBEBENCH_WORD_LIST",
    "PROBEBENCH_LINEAR_DUMP",
    "PROBEBENCH_DOUBLE_DUMP",
    "PROBEBENCH_COMPRESS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's PROBEBENCH_* environment out of the tests."""

    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
