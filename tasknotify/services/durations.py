from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

_MICROS = 1_000_000
_UNITS = (("d", 86_400), ("h", 3_600), ("m", 60), ("s", 1))


@dataclass(frozen=True)
class DisplayDuration:
    text: str
    milliseconds: int


def _total_micros(d: timedelta) -> int:
    return (d.days * 86_400 + d.seconds) * _MICROS + d.microseconds


def round_to_seconds(d: timedelta) -> timedelta:
    """Round to whole seconds, half-up on the sub-second remainder.

    Negative durations round half away from zero. If the rounded value does
    not fit in a timedelta the input is returned unchanged.
    """
    total = _total_micros(d)
    seconds, remainder = divmod(abs(total), _MICROS)
    if remainder >= _MICROS // 2:
        seconds += 1
    try:
        return timedelta(seconds=-seconds if total < 0 else seconds)
    except OverflowError:
        return d


def format_duration(d: timedelta) -> str:
    """Compact form such as ``3m42s``; ``0s`` for an empty duration."""
    total = _total_micros(d)
    sign = "-" if total < 0 else ""
    seconds, micros = divmod(abs(total), _MICROS)

    parts = []
    for suffix, size in _UNITS:
        amount, seconds = divmod(seconds, size)
        if amount:
            parts.append(f"{amount}{suffix}")
    if micros >= 1000:
        parts.append(f"{micros // 1000}ms")
    elif micros:
        parts.append(f"{micros}us")

    if not parts:
        return "0s"
    return sign + "".join(parts)


def milliseconds(d: timedelta) -> int:
    # truncates toward negative infinity, like timedelta itself
    return _total_micros(d) // 1000


def normalize(d: timedelta) -> DisplayDuration:
    return DisplayDuration(text=format_duration(round_to_seconds(d)), milliseconds=milliseconds(d))


def per_second(count: Optional[int], ms: int) -> Optional[float]:
    """Documents per second, or None when it cannot be computed."""
    if count is None or ms <= 0:
        return None
    return count / (ms / 1000.0)


def throughput(count: Optional[int], d: timedelta) -> Optional[float]:
    return per_second(count, milliseconds(d))


def format_throughput(value: float) -> str:
    return f"{value:.2f}"
