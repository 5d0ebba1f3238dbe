"""Test suite for matchquant."""

from __future__ import annotations

import sys
from pathlib import Path

try:
    from pydantic_settings import SettingsConfigDict  # noqa: F401  # import check only
except ImportError as exc:  # pragma: no cover - import-time guard
    msg = (
        "pydantic-settings>=2 is required for the test suite; "
        "install it alongside pydantic>=2."
    )
    raise RuntimeError(msg) from exc

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
