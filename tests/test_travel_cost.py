import math
import time

import pytest

from deliverypro.models.domain import Coordinate
from deliverypro.services.routing import travel_cost
from deliverypro.services.routing.models import TrafficLevel
from deliverypro.services.routing.travel_cost import (
    HaversineStrategy,
    ProviderStrategy,
    TravelCostEstimator,
    build_distance_matrix,
    build_estimator,
    classify_traffic,
)

ORIGIN = Coordinate(lat=21.50, lng=39.20)
DESTINATION = Coordinate(lat=21.55, lng=39.25)


class StaticDistanceService:
    def __init__(self, payload):
        self.payload = payload
        self.calls = 0

    def query(self, origin, destination):
        self.calls += 1
        return self.payload


class FailingDistanceService:
    def query(self, origin, destination):
        raise TimeoutError("provider timed out")


class SlowDistanceService:
    def __init__(self, delay: float = 0.5):
        self.delay = delay

    def query(self, origin, destination):
        time.sleep(self.delay)
        return {"distance_m": 999_999, "duration_s": 1, "duration_in_traffic_s": 1}


@pytest.mark.parametrize(
    "ratio, expected",
    [
        (1.6, TrafficLevel.SEVERE),
        (1.5, TrafficLevel.HEAVY),
        (1.4, TrafficLevel.HEAVY),
        (1.2, TrafficLevel.MODERATE),
        (1.1, TrafficLevel.LIGHT),
        (1.0, TrafficLevel.LIGHT),
    ],
)
def test_classify_traffic(ratio, expected):
    assert classify_traffic(ratio) is expected


def test_fallback_for_ten_km_leg(monkeypatch):
    monkeypatch.setattr(travel_cost, "coordinate_distance_km", lambda origin, destination: 10.0)

    cost = build_estimator().estimate(ORIGIN, DESTINATION)

    assert cost.distance_m == 10_000
    assert cost.duration_s == 1800
    assert cost.duration_in_traffic_s == 2400
    assert cost.traffic_level is TrafficLevel.MODERATE
    assert cost.source == "haversine"


def test_fallback_with_missing_coordinate_is_zero_length():
    cost = HaversineStrategy().estimate(ORIGIN, None)
    assert cost.distance_m == 0
    assert cost.duration_s == 0


def test_provider_result_is_classified():
    service = StaticDistanceService({"distance_m": 4200, "duration_s": 600, "duration_in_traffic_s": 960})

    cost = build_estimator(service).estimate(ORIGIN, DESTINATION)

    assert cost.source == "provider"
    assert cost.distance_m == 4200
    assert cost.delay_s == 360
    assert cost.traffic_level is TrafficLevel.SEVERE


def test_provider_without_traffic_data_uses_default_ratio():
    service = StaticDistanceService({"distance_m": 1000, "duration_s": 120})

    cost = ProviderStrategy(service).estimate(ORIGIN, DESTINATION)

    assert cost.duration_in_traffic_s == 120
    assert cost.traffic_level is TrafficLevel.MODERATE


@pytest.mark.parametrize("service", [FailingDistanceService(), StaticDistanceService(None)])
def test_provider_failure_falls_back_to_haversine(service):
    estimator = build_estimator(service)

    cost = estimator.estimate(ORIGIN, DESTINATION)

    assert cost.source == "haversine"
    assert cost.distance_m > 0


def test_estimator_always_ends_with_haversine():
    estimator = TravelCostEstimator()
    assert len(estimator.strategies) == 1
    assert isinstance(estimator.strategies[-1], HaversineStrategy)
    assert not estimator.has_live_provider


def test_distance_matrix_uses_haversine_without_provider():
    coordinates = [Coordinate(0.0, 0.0), Coordinate(0.0, math.degrees(5 / 6371)), Coordinate(0.0, math.degrees(10 / 6371))]

    matrix = build_distance_matrix(coordinates, build_estimator())

    assert matrix[0][0] == 0
    assert matrix[0][1] == pytest.approx(5.0)
    assert matrix[0][2] == pytest.approx(10.0)
    assert matrix[2][1] == pytest.approx(5.0)


def test_distance_matrix_queries_provider_once_per_ordered_pair():
    service = StaticDistanceService({"distance_m": 2500, "duration_s": 300, "duration_in_traffic_s": 300})
    coordinates = [ORIGIN, DESTINATION, Coordinate(21.6, 39.3)]

    matrix = build_distance_matrix(coordinates, build_estimator(service, max_workers=2, call_delay=0))

    assert service.calls == 6
    assert matrix[1][2] == 2.5
    assert matrix[2][2] == 0


def test_distance_matrix_times_out_to_haversine():
    estimator = build_estimator(SlowDistanceService(), call_delay=0)

    matrix = build_distance_matrix([ORIGIN, DESTINATION], estimator, deadline=0.05)

    expected_km = HaversineStrategy().estimate(ORIGIN, DESTINATION).distance_m / 1000
    assert matrix[0][1] == pytest.approx(expected_km)


def test_slow_provider_counts_as_failure():
    estimator = build_estimator(SlowDistanceService(), timeout=0.05, call_delay=0)

    started = time.monotonic()
    cost = estimator.estimate(ORIGIN, DESTINATION)
    elapsed = time.monotonic() - started
    estimator.close()

    assert cost.source == "haversine"
    assert cost.distance_m < 999_999
    assert elapsed < 0.4


def test_distance_matrix_deadline_covers_all_legs():
    coordinates = [Coordinate(21.5 + i / 100, 39.2) for i in range(5)]
    estimator = build_estimator(SlowDistanceService(), max_workers=1, call_delay=0)

    started = time.monotonic()
    matrix = build_distance_matrix(coordinates, estimator, deadline=0.05)
    elapsed = time.monotonic() - started
    estimator.close()

    assert elapsed < 0.4
    assert matrix[0][4] == pytest.approx(HaversineStrategy().estimate(coordinates[0], coordinates[4]).distance_m / 1000)
    assert all(matrix[i][j] < 999 for i in range(5) for j in range(5))


def test_explicit_zero_rates_are_respected():
    cost = HaversineStrategy(base_seconds_per_km=0, traffic_seconds_per_km=0).from_distance_km(5.0)
    assert cost.duration_s == 0
    assert cost.duration_in_traffic_s == 0
