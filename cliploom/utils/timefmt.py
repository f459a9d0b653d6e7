"""Time label formatting for timeline and transport displays.

    format_time(s)         mm:ss.mmm   precise playhead / selection labels
    format_clock(s)        mm:ss       transport "current / total" readout
    format_clip_length(s)  m:ss        length badge on a timeline clip
    format_ruler(s)        '2m' / '15s' ruler tick labels (whole seconds)

Negative inputs display as zero.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

__all__ = ["format_time", "format_clock", "format_clip_length", "format_ruler"]


_MILLI = Decimal("0.001")


def _millis(seconds: float) -> int:
    # str() keeps the shortest repr, so 1.2345 rounds up instead of down
    if seconds <= 0:
        return 0
    return int(Decimal(str(seconds)).quantize(_MILLI, rounding=ROUND_HALF_UP) * 1000)


def format_time(seconds: float) -> str:
    """Return mm:ss.mmm with half-up millisecond rounding (1.2345 -> 00:01.235)."""
    minutes, ms = divmod(_millis(seconds), 60_000)
    return f"{minutes:02d}:{ms // 1000:02d}.{ms % 1000:03d}"


def _whole_seconds(seconds: float) -> int:
    return int(seconds) if seconds > 0 else 0


def format_clock(seconds: float) -> str:
    """Truncated mm:ss, so the readout only ticks over on whole seconds."""
    m, s = divmod(_whole_seconds(seconds), 60)
    return f"{m:02d}:{s:02d}"


def format_clip_length(seconds: float) -> str:
    m, s = divmod(_whole_seconds(seconds), 60)
    return f"{m}:{s:02d}"


def format_ruler(seconds: float) -> str:
    """Minute marks read '1m', everything else the seconds within the minute."""
    m, s = divmod(_whole_seconds(seconds), 60)
    return f"{m}m" if s == 0 else f"{s}s"
