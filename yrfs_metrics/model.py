"""
yrfs_metrics.model
AUTHOR: carter-vin

Volume metrics snapshot + deterministic serialization primitives.

Design goals:
- Immutable snapshot, fresh per collection call
- Explicit structure (no accidental serialization via __dict__)
- Unpopulated fields stay None rather than a fake zero
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from yrfs_metrics.quantity import Quantity

BYTE_FIELDS = ("available", "capacity", "used")
INODE_FIELDS = ("inodes", "inodes_free", "inodes_used")


@dataclass(frozen=True)
class VolumeMetrics:
    """
    Usage snapshot for one volume
    - time: capture time (UTC), set at call start
    - byte fields: available / capacity / used
    - inode fields: inodes / inodes_free / inodes_used
    """

    time: datetime
    available: Optional[Quantity] = None
    capacity: Optional[Quantity] = None
    used: Optional[Quantity] = None
    inodes: Optional[Quantity] = None
    inodes_free: Optional[Quantity] = None
    inodes_used: Optional[Quantity] = None

    def to_dict(self) -> dict[str, Any]:
        """
        Integers on the wire; None for fields a failed probe never filled

        Byte fields also get a "<name>_human" display string scaled per the
        quantity's format (GiB for BinarySI, GB for DecimalSI).
        """
        payload: dict[str, Any] = {"time": self.time.isoformat()}
        for name in BYTE_FIELDS:
            q = getattr(self, name)
            payload[name] = q.as_int() if q is not None else None
            payload[f"{name}_human"] = q.human() if q is not None else None
        for name in INODE_FIELDS:
            q = getattr(self, name)
            payload[name] = q.as_int() if q is not None else None
        return payload


def dumps_compact(payload: dict[str, Any]) -> str:
    """
    Serialize a dict as a single JSON object string

    Rules:
    - sort_keys=True ensures stable key order
    - separators remove whitespace to avoid formatting drift
    """
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
