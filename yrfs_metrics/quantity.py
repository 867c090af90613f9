"""
yrfs_metrics.quantity
AUTHOR: carter-vin

Exact size quantities

- value held as Decimal, never float
- format tag decides display scaling (BinarySI = powers of 1024)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation

import humanize

BINARY_SI = "BinarySI"
DECIMAL_SI = "DecimalSI"

_BINARY_SUFFIXES = {
    "Ki": 1024,
    "Mi": 1024**2,
    "Gi": 1024**3,
    "Ti": 1024**4,
    "Pi": 1024**5,
    "Ei": 1024**6,
}

_DECIMAL_SUFFIXES = {
    "": 1,
    "k": 10**3,
    "M": 10**6,
    "G": 10**9,
    "T": 10**12,
    "P": 10**15,
    "E": 10**18,
}

_QUANTITY_RE = re.compile(r"^([+-]?(?:\d+\.?\d*|\.\d+))([A-Za-z]*)$")


@dataclass(frozen=True)
class Quantity:
    """
    Size quantity
    - value: exact number of base units (bytes or inodes)
    - format: BINARY_SI or DECIMAL_SI
    """

    value: Decimal
    format: str = DECIMAL_SI

    @classmethod
    def parse(cls, text: str) -> "Quantity":
        """
        Parse "1024", "1.5Gi", "3k" etc

        Raises ValueError on anything else
        """
        text = text.strip()
        match = _QUANTITY_RE.match(text)
        if match is None:
            raise ValueError(f"quantities must match the regular expression: {text!r}")

        number, suffix = match.groups()
        if suffix in _BINARY_SUFFIXES:
            multiplier, fmt = _BINARY_SUFFIXES[suffix], BINARY_SI
        elif suffix in _DECIMAL_SUFFIXES:
            multiplier, fmt = _DECIMAL_SUFFIXES[suffix], DECIMAL_SI
        else:
            raise ValueError(f"unable to parse quantity's suffix: {text!r}")

        try:
            value = Decimal(number) * multiplier
        except InvalidOperation as e:
            raise ValueError(f"invalid quantity: {text!r}") from e

        return cls(value=value, format=fmt)

    @classmethod
    def from_int(cls, value: int, fmt: str = BINARY_SI) -> "Quantity":
        return cls(value=Decimal(int(value)), format=fmt)

    def with_format(self, fmt: str) -> "Quantity":
        if fmt not in (BINARY_SI, DECIMAL_SI):
            raise ValueError(f"unknown quantity format: {fmt}")
        return replace(self, format=fmt)

    def as_int(self) -> int:
        """
        Integer value, fractions rounded up
        """
        integral = self.value.to_integral_value()
        if integral < self.value:
            integral += 1
        return int(integral)

    def is_zero(self) -> bool:
        return self.value == 0

    def human(self) -> str:
        """
        Display string, e.g. "2.0 GiB" for BinarySI, "2.1 GB" for DecimalSI
        """
        return humanize.naturalsize(self.as_int(), binary=self.format == BINARY_SI)

    def __str__(self) -> str:
        return str(self.as_int())
