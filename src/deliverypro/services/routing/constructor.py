"""Priority-weighted nearest-neighbour route construction."""

from __future__ import annotations

from datetime import datetime, time
from typing import Sequence

from ...models.domain import DeliveryRequest
from ..geospatial import coordinate_distance_km
from .priority import priority_score

PRIORITY_WEIGHT = 0.6
PROXIMITY_WEIGHT = 0.4


def proximity_score(distance_km: float) -> float:
    return max(0.0, 50.0 - distance_km * 2)


def construct_route(requests: Sequence[DeliveryRequest], now: datetime | time) -> list[DeliveryRequest]:
    """Build the initial visiting order.

    Starts from the most urgent delivery, then repeatedly appends the candidate
    with the best blend of urgency and closeness to the current tail. Distances
    here are haversine only.
    """

    if len(requests) <= 2:
        return list(requests)

    missing = [request.request_id for request in requests if request.coordinate is None]
    if missing:
        raise ValueError(f"Cannot construct a route with ungeocoded deliveries: {missing}")

    scores = {request.request_id: priority_score(request, now) for request in requests}
    # sorted() is stable, so equal scores keep their input order.
    remaining = sorted(requests, key=lambda request: scores[request.request_id], reverse=True)
    route = [remaining.pop(0)]

    while remaining:
        current = route[-1]
        best_index = 0
        best_score = float("-inf")
        for index, candidate in enumerate(remaining):
            distance_km = coordinate_distance_km(current.coordinate, candidate.coordinate)
            combined = scores[candidate.request_id] * PRIORITY_WEIGHT + proximity_score(distance_km) * PROXIMITY_WEIGHT
            if combined > best_score:
                best_score = combined
                best_index = index
        route.append(remaining.pop(best_index))

    return route
