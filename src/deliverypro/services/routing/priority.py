"""Urgency scoring for delivery requests."""

from __future__ import annotations

from datetime import datetime, time

from ...models.domain import DeliveryRequest, Priority

BASE_SCORES: dict[Priority, float] = {
    Priority.URGENT: 100.0,
    Priority.HIGH: 75.0,
    Priority.MEDIUM: 50.0,
    Priority.LOW: 25.0,
}

IN_WINDOW_BONUS = 25.0
UPCOMING_WINDOW_BONUS = 15.0
MAX_CASH_BONUS = 20.0


def _minute_of_day(value: datetime | time) -> int:
    return value.hour * 60 + value.minute


def time_window_bonus(request: DeliveryRequest, now: datetime | time) -> float:
    window = request.time_window
    if window is None:
        return 0.0
    current = _minute_of_day(now)
    start = _minute_of_day(window.start)
    end = _minute_of_day(window.end)
    if start <= current <= end:
        return IN_WINDOW_BONUS
    if current < start:
        # Decays by one point every ten minutes, gone once the window is 150+ minutes out.
        return max(0.0, UPCOMING_WINDOW_BONUS - (start - current) / 10)
    return 0.0


def cash_bonus(request: DeliveryRequest) -> float:
    if request.cash_on_delivery and request.cash_on_delivery > 0:
        return min(MAX_CASH_BONUS, request.cash_on_delivery / 100)
    return 0.0


def priority_score(request: DeliveryRequest, now: datetime | time) -> float:
    """Score a delivery's urgency at the reference time ``now``.

    The base comes from the priority tag; an open or upcoming time window and a
    cash collection amount add bonuses on top.
    """

    score = BASE_SCORES.get(request.priority, BASE_SCORES[Priority.MEDIUM])
    return score + time_window_bonus(request, now) + cash_bonus(request)
