"""Per-stop arrival estimates and aggregate route metrics."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, time, timedelta
from functools import reduce
from typing import Sequence

from ...config import settings
from ...models.domain import DeliveryRequest, Priority, Vehicle
from .load import total_weight
from .models import OptimizedRoute, RouteStop, TrafficImpact
from .priority import priority_score
from .travel_cost import TravelCostEstimator


@dataclass(slots=True, frozen=True)
class _Progress:
    distance_km: float = 0.0
    base_min: float = 0.0
    traffic_min: float = 0.0
    delay_min: float = 0.0
    service_min: float = 0.0
    stops: tuple[RouteStop, ...] = ()
    sources: frozenset[str] = frozenset()


def _service_minutes(request: DeliveryRequest) -> float:
    if request.service_minutes is None or request.service_minutes < 0:
        return settings.default_service_minutes
    return request.service_minutes


def synthesize_schedule(
    ordered: Sequence[DeliveryRequest],
    vehicle: Vehicle,
    start_time: datetime,
    estimator: TravelCostEstimator,
    *,
    now: datetime | time | None = None,
    fuel_price: float | None = None,
) -> OptimizedRoute:
    """Walk the final ordering and accumulate distance, time and arrival estimates.

    Each stop's cumulative time is the traffic-adjusted driving time so far
    plus the service time spent at every earlier stop.
    """

    now = start_time if now is None else now
    fuel_price = settings.fuel_price_per_liter if fuel_price is None else fuel_price

    def _step(progress: _Progress, item: tuple[int, DeliveryRequest]) -> _Progress:
        index, request = item
        leg = None
        if index > 0:
            leg = estimator.estimate(ordered[index - 1].coordinate, request.coordinate)
            progress = replace(
                progress,
                distance_km=progress.distance_km + leg.distance_m / 1000.0,
                base_min=progress.base_min + leg.duration_s / 60.0,
                traffic_min=progress.traffic_min + leg.duration_in_traffic_s / 60.0,
                delay_min=progress.delay_min + leg.delay_s / 60.0,
                sources=progress.sources | {leg.source},
            )

        cumulative_time = progress.traffic_min + progress.service_min
        stop = RouteStop(
            request=request,
            sequence=index + 1,
            estimated_arrival=start_time + timedelta(minutes=cumulative_time),
            service_minutes=_service_minutes(request),
            traffic_delay_min=leg.delay_s / 60.0 if leg else 0.0,
            cumulative_distance_km=progress.distance_km,
            cumulative_time_min=cumulative_time,
            leg=leg,
        )
        return replace(
            progress,
            service_min=progress.service_min + stop.service_minutes,
            stops=progress.stops + (stop,),
        )

    result = reduce(_step, enumerate(ordered), _Progress())

    mean_priority = 0.0
    if ordered:
        mean_priority = sum(priority_score(request, now) for request in ordered) / len(ordered)
    fuel_cost = 0.0
    if vehicle.fuel_efficiency_km_per_l > 0:
        fuel_cost = result.distance_km / vehicle.fuel_efficiency_km_per_l * fuel_price
    utilization = 0
    if vehicle.max_weight_kg > 0:
        utilization = round(total_weight(ordered) / vehicle.max_weight_kg * 100)
    delay_minutes = round(result.delay_min)

    return OptimizedRoute(
        stops=result.stops,
        total_distance_km=round(result.distance_km, 2),
        total_time_min=round(result.base_min),
        total_time_with_traffic_min=round(result.traffic_min),
        fuel_cost=round(fuel_cost, 2),
        priority_score=round(mean_priority, 2),
        load_utilization_pct=utilization,
        traffic_impact=TrafficImpact(
            delay_minutes=delay_minutes,
            alternative_routes=min(3, max(0, delay_minutes // 15)),
        ),
        metadata={"travel_cost_sources": sorted(result.sources)},
    )


def urgent_stop_count(route: OptimizedRoute) -> int:
    return sum(1 for stop in route.stops if stop.request.priority is Priority.URGENT)
