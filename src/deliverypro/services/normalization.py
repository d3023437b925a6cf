"""Normalization of loosely formatted delivery fields coming from uploads."""

from __future__ import annotations

import math
from datetime import datetime, time
from typing import Any, Optional

from ..models.domain import PackageSize, Priority, TimeWindow

URGENT_KEYWORDS = ("urgent", "rush", "emergency")
HIGH_KEYWORDS = ("high", "important")
LOW_KEYWORDS = ("low", "normal")

TIME_FORMATS = ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M%p", "%I %p", "%I%p")


def normalize_priority(value: Any) -> Priority:
    """Map free text such as ``"RUSH order"`` or ``"normal"`` onto a priority tag."""

    if isinstance(value, Priority):
        return value
    text = str(value or "").strip().lower()
    if any(keyword in text for keyword in URGENT_KEYWORDS):
        return Priority.URGENT
    if any(keyword in text for keyword in HIGH_KEYWORDS):
        return Priority.HIGH
    if any(keyword in text for keyword in LOW_KEYWORDS):
        return Priority.LOW
    return Priority.MEDIUM


def normalize_package_size(value: Any) -> PackageSize:
    if isinstance(value, PackageSize):
        return value
    try:
        return PackageSize(str(value or "").strip().lower())
    except ValueError:
        return PackageSize.MEDIUM


def parse_clock_time(value: str) -> Optional[time]:
    text = value.strip().upper()
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None


def parse_time_window(value: Optional[str]) -> Optional[TimeWindow]:
    """Parse ``"09:00 - 12:30"`` style ranges; anything unparseable yields ``None``."""

    if not value or "-" not in value:
        return None
    start_text, _, end_text = value.partition("-")
    start = parse_clock_time(start_text) if start_text.strip() else None
    end = parse_clock_time(end_text) if end_text.strip() else None
    if start is None or end is None:
        return None
    return TimeWindow(start=start, end=end)


def coerce_positive_float(value: Any, default: float) -> float:
    """Parse numeric cells such as ``"1,200.50"``; fall back to ``default`` when unusable."""

    if value is None or value == "":
        return default
    try:
        number = float(str(value).replace(",", "")) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number <= 0:
        return default
    return number
