import math
import random
from datetime import datetime

import pytest

from deliverypro.models.domain import Coordinate, DeliveryRequest, Priority
from deliverypro.services.routing.constructor import construct_route
from deliverypro.services.routing.two_opt import refine_route, route_distance

NOW = datetime(2025, 3, 10, 9, 0)
KM_IN_DEGREES = math.degrees(1 / 6371)


def _delivery(rid: str, km_east: float, priority: Priority = Priority.MEDIUM) -> DeliveryRequest:
    return DeliveryRequest(
        request_id=rid,
        address=f"{rid} Equator Road",
        coordinate=Coordinate(lat=0.0, lng=km_east * KM_IN_DEGREES),
        priority=priority,
    )


def _line_matrix(positions: list[float]) -> list[list[float]]:
    return [[abs(a - b) for b in positions] for a in positions]


def test_two_or_fewer_requests_are_returned_unchanged():
    requests = [_delivery("A", 10), _delivery("B", 0, Priority.URGENT)]
    assert construct_route(requests, NOW) == requests


def test_construct_seeds_with_highest_priority_then_nearest():
    requests = [
        _delivery("FAR", 10),
        _delivery("NEAR", 5),
        _delivery("SEED", 0, Priority.URGENT),
    ]

    route = construct_route(requests, NOW)

    assert [request.request_id for request in route] == ["SEED", "NEAR", "FAR"]


def test_construct_ties_keep_input_order():
    requests = [_delivery("A", 0), _delivery("B", 3), _delivery("C", 3)]

    route = construct_route(requests, NOW)

    assert [request.request_id for request in route] == ["A", "B", "C"]


def test_priority_outweighs_small_detours():
    requests = [
        _delivery("SEED", 0, Priority.URGENT),
        _delivery("CLOSE_LOW", 1, Priority.LOW),
        _delivery("FARTHER_HIGH", 8, Priority.HIGH),
    ]

    route = construct_route(requests, NOW)

    assert [request.request_id for request in route] == ["SEED", "FARTHER_HIGH", "CLOSE_LOW"]


def test_construct_rejects_ungeocoded_requests():
    requests = [_delivery("A", 0), _delivery("B", 1), DeliveryRequest(request_id="C", address="Nowhere")]
    with pytest.raises(ValueError):
        construct_route(requests, NOW)


def test_refine_reverses_crossing_segment():
    matrix = _line_matrix([0, 1, 2, 3])

    refined = refine_route([0, 2, 1, 3], matrix)

    assert refined == [0, 1, 2, 3]
    assert route_distance(refined, matrix) == 3


def test_refine_keeps_short_routes():
    matrix = _line_matrix([0, 2, 1])
    assert refine_route([0, 1, 2], matrix) == [0, 1, 2]


def test_refine_keeps_endpoints_fixed():
    matrix = _line_matrix([5, 0, 1, 2, 3, 9])

    refined = refine_route([0, 3, 1, 4, 2, 5], matrix)

    assert refined[0] == 0
    assert refined[-1] == 5
    assert sorted(refined) == [0, 1, 2, 3, 4, 5]


def test_refine_reaches_a_fixed_point():
    rng = random.Random(7)
    points = [(rng.uniform(0, 50), rng.uniform(0, 50)) for _ in range(12)]
    matrix = [[math.dist(a, b) for b in points] for a in points]
    order = list(range(len(points)))

    once = refine_route(order, matrix)
    twice = refine_route(once, matrix)

    assert route_distance(once, matrix) <= route_distance(order, matrix)
    assert route_distance(twice, matrix) == route_distance(once, matrix)
    assert twice == once
