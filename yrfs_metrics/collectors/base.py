"""
yrfs_metrics.collectors.base
AUTHOR: carter-vin

Light result wrapper -> probe failures become data the aggregator can log and return
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class ProbeOutcome:
    """
    Normalized probe result
    - ok: false=failure, exception kept in error
    - value: probe result object if ok=true
    """

    name: str
    ok: bool
    value: Optional[Any] = None
    error: Optional[BaseException] = None

    @property
    def error_type(self) -> Optional[str]:
        return type(self.error).__name__ if self.error is not None else None

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None


def run_probe(name: str, fn, *args, **kwargs) -> ProbeOutcome:
    """
    Run probe & collect failure as data
    """
    try:
        v = fn(*args, **kwargs)
        return ProbeOutcome(name=name, ok=True, value=v)
    except Exception as e:
        return ProbeOutcome(name=name, ok=False, error=e)
