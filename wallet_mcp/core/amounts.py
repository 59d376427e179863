"""
Amount / decimal conversion.

The raw integer in base units is authoritative; the decimal string is a view
derived from it with the token's decimals. Conversions run under a wide
decimal context so full uint256 values survive untouched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Any, Dict, Union

MAX_DECIMALS = 255
_PRECISION = 400
_DECIMAL_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$", re.ASCII)

DecimalLike = Union[str, int, Decimal]


def _check_decimals(decimals: int) -> None:
    if not isinstance(decimals, int) or isinstance(decimals, bool):
        raise ValueError("decimals must be an integer")
    if decimals < 0 or decimals > MAX_DECIMALS:
        raise ValueError(f"decimals must be within [0, {MAX_DECIMALS}]")


def parse_decimal(value: DecimalLike) -> Decimal:
    """Parse a human decimal string into a finite ``Decimal``.

    Raises:
        ValueError: if the value is empty, not numeric, or not finite.
    """

    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, bool):
        raise ValueError("not a decimal number")
    elif isinstance(value, int):
        parsed = Decimal(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("value cannot be empty")
        if not _DECIMAL_RE.match(text):
            raise ValueError(f"not a decimal number: {value!r}")
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"not a decimal number: {value!r}") from None
    else:
        raise ValueError("value must be a decimal string")

    if not parsed.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return parsed


def to_raw(value: DecimalLike, decimals: int) -> int:
    """Convert a human-readable amount into integer base units.

    Conversion is lossless: a value with more fractional digits than
    ``decimals`` allows is rejected rather than rounded.

    Raises:
        ValueError: for negative amounts, malformed input, or excess precision.
    """

    _check_decimals(decimals)
    amount = parse_decimal(value)
    if amount < 0:
        raise ValueError("amount cannot be negative")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        scaled = amount.scaleb(decimals)
        integral = scaled.to_integral_value(rounding=ROUND_DOWN)
        if scaled != integral:
            raise ValueError(f"more than {decimals} decimal places")
        return int(integral)


def to_decimal(raw: int, decimals: int) -> str:
    """Render base units as a plain decimal string without trailing zeros."""

    _check_decimals(decimals)
    if raw < 0:
        raise ValueError("raw amount cannot be negative")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        value = Decimal(raw).scaleb(-decimals).normalize()
        return format(value, "f")


@dataclass(frozen=True)
class Amount:
    """A non-negative quantity of a token in base units."""

    raw: int
    decimals: int

    def __post_init__(self) -> None:
        _check_decimals(self.decimals)
        if not isinstance(self.raw, int) or isinstance(self.raw, bool):
            raise ValueError("raw amount must be an integer")
        if self.raw < 0:
            raise ValueError("raw amount cannot be negative")

    @classmethod
    def from_decimal(cls, value: DecimalLike, decimals: int) -> "Amount":
        return cls(raw=to_raw(value, decimals), decimals=decimals)

    @property
    def formatted(self) -> str:
        return to_decimal(self.raw, self.decimals)

    def to_dict(self) -> Dict[str, Any]:
        # Raw stays a string: uint256 does not fit JSON number precision.
        return {"raw": str(self.raw), "formatted": self.formatted, "decimals": self.decimals}


__all__ = [
    "Amount",
    "MAX_DECIMALS",
    "parse_decimal",
    "to_decimal",
    "to_raw",
]
