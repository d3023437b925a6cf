from datetime import datetime, time

from deliverypro.models.domain import DeliveryRequest, Priority, TimeWindow
from deliverypro.services.routing.priority import priority_score

NOW = datetime(2025, 3, 10, 10, 0)


def _delivery(priority: Priority, window: TimeWindow | None = None, cod: float = 0.0) -> DeliveryRequest:
    return DeliveryRequest(
        request_id="D1",
        address="1 Test Street",
        priority=priority,
        time_window=window,
        cash_on_delivery=cod,
    )


def test_base_scores_by_priority():
    assert priority_score(_delivery(Priority.URGENT), NOW) == 100
    assert priority_score(_delivery(Priority.HIGH), NOW) == 75
    assert priority_score(_delivery(Priority.MEDIUM), NOW) == 50
    assert priority_score(_delivery(Priority.LOW), NOW) == 25


def test_cash_bonus_is_capped_at_twenty():
    assert priority_score(_delivery(Priority.LOW, cod=2000), NOW) == 45
    assert priority_score(_delivery(Priority.LOW, cod=50_000), NOW) == 45
    assert priority_score(_delivery(Priority.LOW, cod=200), NOW) == 27


def test_open_window_adds_full_bonus():
    window = TimeWindow(start=time(9, 0), end=time(12, 0))
    assert priority_score(_delivery(Priority.MEDIUM, window), NOW) == 75


def test_upcoming_window_bonus_decays():
    soon = TimeWindow(start=time(11, 0), end=time(13, 0))
    far = TimeWindow(start=time(13, 0), end=time(14, 0))
    assert priority_score(_delivery(Priority.MEDIUM, soon), NOW) == 50 + 15 - 6
    assert priority_score(_delivery(Priority.MEDIUM, far), NOW) == 50


def test_past_window_has_no_bonus_or_penalty():
    window = TimeWindow(start=time(7, 0), end=time(8, 0))
    assert priority_score(_delivery(Priority.HIGH, window), NOW) == 75


def test_accepts_plain_clock_time():
    window = TimeWindow(start=time(9, 0), end=time(12, 0))
    assert priority_score(_delivery(Priority.URGENT, window), time(9, 0)) == 125
