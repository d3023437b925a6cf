"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ...models.domain import DeliveryRequest


class TrafficLevel(str, Enum):
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"
    SEVERE = "severe"


@dataclass(slots=True, frozen=True)
class TravelCost:
    distance_m: float
    duration_s: float
    duration_in_traffic_s: float
    traffic_level: TrafficLevel
    source: str

    @property
    def delay_s(self) -> float:
        return self.duration_in_traffic_s - self.duration_s


@dataclass(slots=True, frozen=True)
class RouteStop:
    request: DeliveryRequest
    sequence: int
    estimated_arrival: datetime
    service_minutes: float
    traffic_delay_min: float
    cumulative_distance_km: float
    cumulative_time_min: float
    leg: Optional[TravelCost] = None

    @property
    def arrival_label(self) -> str:
        return self.estimated_arrival.strftime("%I:%M %p")


@dataclass(slots=True, frozen=True)
class LoadReport:
    feasible: bool
    total_weight_kg: float
    available_capacity_kg: float
    advisories: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class TrafficImpact:
    delay_minutes: int
    alternative_routes: int


@dataclass(slots=True, frozen=True)
class OptimizedRoute:
    stops: tuple[RouteStop, ...]
    total_distance_km: float
    total_time_min: int
    total_time_with_traffic_min: int
    fuel_cost: float
    priority_score: float
    load_utilization_pct: int
    traffic_impact: TrafficImpact
    recommendations: tuple[str, ...] = ()
    load: Optional[LoadReport] = None
    unresolved_addresses: tuple[str, ...] = ()
    metadata: dict = field(default_factory=dict)

    @property
    def stop_count(self) -> int:
        return len(self.stops)
