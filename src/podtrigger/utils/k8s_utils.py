# src/podtrigger/utils/k8s_utils.py
"""
Helpers for Kubernetes resource quantities ("500m", "1Gi", "2.5") and
label selectors.

Quantities are held as Decimal values expressed in base units (cores for
CPU, bytes for memory) so that comparisons normalize differing suffixes.
"""

import re
from decimal import ROUND_CEILING, Decimal, InvalidOperation
from typing import Dict, Optional

_QUANTITY_RE = re.compile(
    r"^(?P<number>[+-]?(?:\d+(?:\.\d*)?|\.\d+))(?P<suffix>[KMGTPE]i|[numkMGTPE]|[eE][+-]?\d+)?$"
)

_BINARY_SUFFIXES = {
    "Ki": 1024,
    "Mi": 1024**2,
    "Gi": 1024**3,
    "Ti": 1024**4,
    "Pi": 1024**5,
    "Ei": 1024**6,
}

_DECIMAL_SUFFIXES = {
    "n": Decimal("0.000000001"),
    "u": Decimal("0.000001"),
    "m": Decimal("0.001"),
    "k": Decimal(1000),
    "M": Decimal(1000**2),
    "G": Decimal(1000**3),
    "T": Decimal(1000**4),
    "P": Decimal(1000**5),
    "E": Decimal(1000**6),
}

NANO = 9


def parse_quantity(quantity: str) -> Decimal:
    """
    Parse a kubernetes quantity string to a Decimal in base units.

    Raises:
        ValueError: If the string is not a valid quantity.
    """
    if isinstance(quantity, (int, Decimal)):
        return Decimal(quantity)
    if quantity is None:
        raise ValueError("quantity must not be empty")

    text = str(quantity).strip()
    match = _QUANTITY_RE.match(text)
    if not match:
        raise ValueError(f"quantities must match the regular expression '{_QUANTITY_RE.pattern}': {quantity!r}")

    try:
        value = Decimal(match.group("number"))
    except InvalidOperation as e:
        raise ValueError(f"invalid quantity number: {quantity!r}") from e

    suffix = match.group("suffix")
    if not suffix:
        return value
    if suffix in _BINARY_SUFFIXES:
        return value * _BINARY_SUFFIXES[suffix]
    if suffix in _DECIMAL_SUFFIXES:
        return value * _DECIMAL_SUFFIXES[suffix]
    # Decimal exponent, e.g. "1e3"
    return value.scaleb(int(suffix[1:]))


def parse_optional_quantity(quantity: Optional[str]) -> Decimal:
    """Like parse_quantity, but treats a missing value as zero."""
    if quantity is None or quantity == "":
        return Decimal(0)
    return parse_quantity(quantity)


def _ceil(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_CEILING))


def milli_value(quantity: Decimal) -> int:
    """Returns the quantity in milli-units, rounded up."""
    return _ceil(quantity * 1000)


def unit_value(quantity: Decimal) -> int:
    """Returns the quantity in whole units, rounded up."""
    return _ceil(quantity)


def nano_value(quantity: Decimal) -> int:
    """Returns the quantity in nano-units, rounded up."""
    return _ceil(quantity.scaleb(NANO))


def from_nano(value: int) -> Decimal:
    """Builds a quantity from an integer count of nano-units."""
    return Decimal(value).scaleb(-NANO)


def is_binary_si(quantity: str) -> bool:
    """True when a quantity string uses a binary suffix (Ki, Mi, ...)."""
    return str(quantity).strip()[-2:] in _BINARY_SUFFIXES


def format_quantity(quantity: Decimal, binary: bool = False) -> str:
    """
    Renders a quantity in canonical form. Integral values take the largest
    suffix that divides them exactly (binary suffixes when binary is set);
    fractional values fall back to m, u or n (the last rounded up).
    """
    if quantity == quantity.to_integral_value():
        value = int(quantity)
        if value == 0:
            return "0"
        suffixes = _BINARY_SUFFIXES if binary else {k: int(v) for k, v in _DECIMAL_SUFFIXES.items() if v >= 1}
        for suffix, factor in sorted(suffixes.items(), key=lambda item: item[1], reverse=True):
            if value % factor == 0:
                return f"{value // factor}{suffix}"
        return str(value)
    for suffix in ("m", "u"):
        scaled = quantity / _DECIMAL_SUFFIXES[suffix]
        if scaled == scaled.to_integral_value():
            return f"{int(scaled)}{suffix}"
    return f"{nano_value(quantity)}n"


def format_label_selector(match_labels: Dict[str, str]) -> str:
    """Renders match labels as a label selector string ("a=b,c=d")."""
    return ",".join(f"{key}={value}" for key, value in sorted(match_labels.items()))
