"""
Unit formatting helpers for sizes, transfer rates and durations
"""
from enum import Enum
from typing import Optional

BITS_PER_BYTE = 8

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400

# Sizes use binary multiples, rates use decimal multiples.
SIZE_UNITS = [
    ("PiB", 1024 ** 5),
    ("TiB", 1024 ** 4),
    ("GiB", 1024 ** 3),
    ("MiB", 1024 ** 2),
    ("KiB", 1024),
]

RATE_UNITS = [
    ("Pbps", 1000.0 ** 5),
    ("Tbps", 1000.0 ** 4),
    ("Gbps", 1000.0 ** 3),
    ("Mbps", 1000.0 ** 2),
    ("Kbps", 1000.0),
]

ZERO_RATE = "0 bps"
UNKNOWN_ETA = "--:--"


class DurationStyle(Enum):
    NARRATIVE = "narrative"
    COMPACT = "compact"


def format_size(size_bytes: int) -> str:
    """
    Format a byte count using the largest binary unit it fills

    Args:
        size_bytes (int): Number of bytes

    Returns:
        str: e.g. "1023 Bytes", "1.00 KiB", "3.50 GiB"
    """
    for unit, multiple in SIZE_UNITS:
        if size_bytes >= multiple:
            return f"{size_bytes / multiple:.2f} {unit}"
    return f"{size_bytes} Bytes"


def format_rate(size_bytes: int, seconds: float) -> str:
    """
    Format the average throughput of a transfer in bits per second

    Args:
        size_bytes (int): Bytes transferred since the transfer started
        seconds (float): Seconds elapsed since the transfer started

    Returns:
        str: e.g. "1.00 Mbps"; ZERO_RATE when no time has elapsed
    """
    if seconds <= 0:
        return ZERO_RATE

    bps = size_bytes * BITS_PER_BYTE / seconds
    for unit, multiple in RATE_UNITS:
        if bps >= multiple:
            return f"{bps / multiple:.2f} {unit}"
    return f"{bps:.0f} bps"


def _split_seconds(total_seconds: int):
    days, remaining = divmod(total_seconds, SECONDS_PER_DAY)
    hours, remaining = divmod(remaining, SECONDS_PER_HOUR)
    minutes, seconds = divmod(remaining, SECONDS_PER_MINUTE)
    return days, hours, minutes, seconds


def _plural(value: int, unit: str) -> str:
    return f"{value} {unit}" if value == 1 else f"{value} {unit}s"


def format_duration(total_seconds: int, style: DurationStyle = DurationStyle.NARRATIVE) -> str:
    """
    Format a number of seconds as a human readable duration

    Narrative style drops leading zero units ("1 minute, 30 seconds") and
    never returns an empty string. Compact style is clock-like ("01:30",
    "01:01:01", "2:00:00:05") and always shows at least minutes and seconds.

    Args:
        total_seconds (int): Duration in whole seconds
        style (DurationStyle): Output style

    Returns:
        str: Formatted duration
    """
    total_seconds = max(0, int(total_seconds))
    days, hours, minutes, seconds = _split_seconds(total_seconds)

    if style is DurationStyle.COMPACT:
        if days > 0:
            return f"{days}:{hours:02d}:{minutes:02d}:{seconds:02d}"
        if hours > 0:
            return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
        return f"{minutes:02d}:{seconds:02d}"

    parts = [(days, "day"), (hours, "hour"), (minutes, "minute"), (seconds, "second")]
    while len(parts) > 1 and parts[0][0] == 0:
        parts.pop(0)
    return ", ".join(_plural(value, unit) for value, unit in parts)


def estimate_remaining(bytes_done: int, total_bytes: int, elapsed_seconds: float) -> Optional[int]:
    """Seconds left at the average rate since start, or None if it can't be known"""
    if total_bytes <= 0 or bytes_done <= 0 or elapsed_seconds <= 0:
        return None
    remaining = max(0, total_bytes - bytes_done)
    rate = bytes_done / elapsed_seconds
    return int(round(remaining / rate))


def format_eta(seconds: Optional[int]) -> str:
    """Compact time-remaining text, or UNKNOWN_ETA when there is no estimate"""
    if seconds is None:
        return UNKNOWN_ETA
    return format_duration(seconds, DurationStyle.COMPACT)
