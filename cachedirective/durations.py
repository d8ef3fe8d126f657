"""Duration strings such as ``10s``, ``1h30m`` or ``300ms``, in seconds."""

from __future__ import annotations

import re
from fractions import Fraction
from numbers import Real

_NS_PER_SECOND = 1_000_000_000
_NS_PER_UNIT = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": _NS_PER_SECOND,
    "m": 60 * _NS_PER_SECOND,
    "h": 3600 * _NS_PER_SECOND,
}
_MAX_NS = (1 << 63) - 1
_COMPONENT = re.compile(r"(\d*)(?:\.(\d*))?([^\d.]*)")


def parse_duration(text: str) -> float:
    """Parse a duration such as ``1h30m`` or ``-1.5s`` and return seconds.

    A unit is required on every component, except for a bare ``0``.
    Raises ValueError when the text is not a valid duration.
    """
    original = text
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return 0.0
    if not text:
        raise ValueError(f'invalid duration "{original}"')

    total_ns = 0
    limit = _MAX_NS + 1 if sign < 0 else _MAX_NS
    position = 0
    while position < len(text):
        match = _COMPONENT.match(text, position)
        whole, fraction, unit = match.group(1), match.group(2), match.group(3)
        if not whole and not fraction:
            raise ValueError(f'invalid duration "{original}"')
        if not unit:
            raise ValueError(f'missing unit in duration "{original}"')
        if unit not in _NS_PER_UNIT:
            raise ValueError(f'unknown unit "{unit}" in duration "{original}"')
        value = Fraction(int(whole or "0"))
        if fraction:
            value += Fraction(int(fraction), 10 ** len(fraction))
        total_ns += int(value * _NS_PER_UNIT[unit])
        if total_ns > limit:
            raise ValueError(f'invalid duration "{original}"')
        position = match.end()

    return sign * total_ns / _NS_PER_SECOND


def _split_fraction(value: int, precision: int) -> tuple[int, str]:
    """Split off ``precision`` decimal digits, dropping trailing zeros."""
    digits: list[str] = []
    printed = False
    for _ in range(precision):
        digit = value % 10
        printed = printed or digit != 0
        if printed:
            digits.append(str(digit))
        value //= 10
    fraction = "".join(reversed(digits))
    return value, f".{fraction}" if fraction else ""


def format_duration(seconds: Real) -> str:
    """Format a number of seconds the way durations are written: ``1h0m0s``."""
    nanoseconds = round(Fraction(seconds) * _NS_PER_SECOND)
    negative = nanoseconds < 0
    remaining = abs(nanoseconds)

    if remaining < _NS_PER_SECOND:
        if remaining == 0:
            return "0s"
        if remaining < 1_000:
            text = f"{remaining}ns"
        elif remaining < 1_000_000:
            whole, fraction = _split_fraction(remaining, 3)
            text = f"{whole}{fraction}\u00b5s"
        else:
            whole, fraction = _split_fraction(remaining, 6)
            text = f"{whole}{fraction}ms"
    else:
        whole, fraction = _split_fraction(remaining, 9)
        text = f"{whole % 60}{fraction}s"
        whole //= 60
        if whole:
            text = f"{whole % 60}m{text}"
            whole //= 60
            if whole:
                text = f"{whole}h{text}"

    return f"-{text}" if negative else text