"""Risk-of-spread estimation and result aggregation."""

from __future__ import annotations

from . import stats  # noqa: F401
from .risk_spread import estimate  # noqa: F401

__all__: list[str] = ["estimate", "stats"]
