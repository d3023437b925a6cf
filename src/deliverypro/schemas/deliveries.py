"""Delivery optimization request/response schemas."""

from __future__ import annotations

from datetime import datetime, time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..config import settings
from ..models.domain import Coordinate, DeliveryRequest, PackageSize, Priority, TimeWindow, Vehicle
from ..services.normalization import (
    coerce_positive_float,
    normalize_package_size,
    normalize_priority,
    parse_time_window,
)


class TimeWindowModel(BaseModel):
    start: time
    end: time


class DeliveryModel(BaseModel):
    id: Optional[str] = Field(default=None, description="Stable identifier; generated from the row index when absent.")
    address: str
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)
    customer_name: Optional[str] = None
    phone_number: Optional[str] = None
    notes: Optional[str] = None
    priority: Priority = Priority.MEDIUM
    time_window: Optional[TimeWindowModel] = Field(
        default=None,
        description="Either {start, end} or a 'HH:MM-HH:MM' string.",
    )
    package_weight_kg: float = 1.0
    package_size: PackageSize = PackageSize.MEDIUM
    cash_on_delivery: float = 0.0
    service_minutes: float = Field(default=settings.default_service_minutes, ge=0)

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize_priority(cls, value: Any) -> Priority:
        return normalize_priority(value)

    @field_validator("package_size", mode="before")
    @classmethod
    def _normalize_size(cls, value: Any) -> PackageSize:
        return normalize_package_size(value)

    @field_validator("package_weight_kg", mode="before")
    @classmethod
    def _coerce_weight(cls, value: Any) -> float:
        return coerce_positive_float(value, 1.0)

    @field_validator("cash_on_delivery", mode="before")
    @classmethod
    def _coerce_cod(cls, value: Any) -> float:
        return coerce_positive_float(value, 0.0)

    @field_validator("time_window", mode="before")
    @classmethod
    def _parse_window(cls, value: Any) -> Any:
        if isinstance(value, str):
            window = parse_time_window(value)
            return {"start": window.start, "end": window.end} if window else None
        return value

    @model_validator(mode="after")
    def _check_coordinates(self) -> "DeliveryModel":
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be provided together.")
        return self

    def to_domain(self, index: int) -> DeliveryRequest:
        coordinate = Coordinate(lat=self.lat, lng=self.lng) if self.lat is not None else None
        window = TimeWindow(start=self.time_window.start, end=self.time_window.end) if self.time_window else None
        return DeliveryRequest(
            request_id=self.id or f"delivery-{index}",
            address=self.address.strip(),
            coordinate=coordinate,
            formatted_address=self.address.strip() if coordinate else None,
            customer_name=self.customer_name,
            phone_number=self.phone_number,
            notes=self.notes,
            priority=self.priority,
            time_window=window,
            package_weight_kg=self.package_weight_kg,
            package_size=self.package_size,
            cash_on_delivery=self.cash_on_delivery,
            service_minutes=self.service_minutes,
        )


class VehicleModel(BaseModel):
    id: Optional[str] = None
    max_weight_kg: float = Field(..., gt=0)
    max_volume_m3: float = Field(default=0.0, ge=0)
    fuel_efficiency_km_per_l: float = Field(..., gt=0)
    current_load_kg: float = Field(default=0.0, ge=0)

    def to_domain(self) -> Vehicle:
        return Vehicle(
            max_weight_kg=self.max_weight_kg,
            fuel_efficiency_km_per_l=self.fuel_efficiency_km_per_l,
            max_volume_m3=self.max_volume_m3,
            current_load_kg=self.current_load_kg,
            vehicle_id=self.id,
        )


class OptimizeRequest(BaseModel):
    deliveries: List[DeliveryModel]
    vehicle: VehicleModel
    start_time: Optional[datetime] = Field(default=None, description="Departure time; defaults to now.")
    reference_time: Optional[datetime] = Field(
        default=None,
        description="Clock used for time-window scoring; defaults to start_time.",
    )

    def to_domain(self) -> list[DeliveryRequest]:
        return [delivery.to_domain(index) for index, delivery in enumerate(self.deliveries)]


class TravelLegModel(BaseModel):
    distance_m: float
    duration_s: float
    duration_in_traffic_s: float
    traffic_level: str
    source: str


class RouteStopModel(BaseModel):
    id: str
    sequence: int
    address: str
    formatted_address: Optional[str]
    lat: float
    lng: float
    customer_name: Optional[str]
    phone_number: Optional[str]
    priority: str
    estimated_arrival: datetime
    arrival_label: str
    service_minutes: float
    traffic_delay_min: float
    cumulative_distance_km: float
    cumulative_time_min: float
    leg: Optional[TravelLegModel]


class LoadReportModel(BaseModel):
    feasible: bool
    total_weight_kg: float
    available_capacity_kg: float
    advisories: List[str]


class TrafficImpactModel(BaseModel):
    delay_minutes: int
    alternative_routes: int


class OptimizedRouteResponse(BaseModel):
    stops: List[RouteStopModel]
    total_distance_km: float
    total_time_min: int
    total_time_with_traffic_min: int
    fuel_cost: float
    priority_score: float
    load_utilization_pct: int
    traffic_impact: TrafficImpactModel
    recommendations: List[str]
    load: Optional[LoadReportModel]
    unresolved_addresses: List[str]
    metadata: Dict[str, Any]
