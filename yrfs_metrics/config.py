"""
yrfs_metrics.config
AUTHOR: carter-vin

Runtime configuration

Precedence:
1) CLI option (applied by the caller via with_overrides)
2) env var
3) built-in default
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

QUOTA_INFO_GLOB_ENV = "YRFS_QUOTA_INFO_GLOB"
QUOTA_NICE_ENV = "YRFS_QUOTA_NICE"
FIND_BINARY_ENV = "YRFS_FIND_BINARY"

DEFAULT_QUOTA_INFO_GLOB = "/proc/fs/yrfs/*/project_quota_info"
DEFAULT_QUOTA_NICE = 19
DEFAULT_FIND_BINARY = "find"


@dataclass(frozen=True)
class MetricsConfig:
    quota_info_glob: str = DEFAULT_QUOTA_INFO_GLOB
    quota_nice: int = DEFAULT_QUOTA_NICE
    find_binary: str = DEFAULT_FIND_BINARY

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "MetricsConfig":
        """
        Build config from environment variables

        Raises ValueError if YRFS_QUOTA_NICE is not an integer
        """
        env = os.environ if environ is None else environ

        nice_raw = env.get(QUOTA_NICE_ENV, "").strip()
        if nice_raw:
            try:
                nice = int(nice_raw)
            except ValueError:
                raise ValueError(f"{QUOTA_NICE_ENV} must be an integer, got {nice_raw!r}") from None
        else:
            nice = DEFAULT_QUOTA_NICE

        return cls(
            quota_info_glob=env.get(QUOTA_INFO_GLOB_ENV) or DEFAULT_QUOTA_INFO_GLOB,
            quota_nice=nice,
            find_binary=env.get(FIND_BINARY_ENV) or DEFAULT_FIND_BINARY,
        )

    def with_overrides(self, **overrides: object) -> "MetricsConfig":
        # None means "option not given"
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)
