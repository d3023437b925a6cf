"""Domain models for delivery requests and vehicles."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import time
from enum import Enum
from typing import Optional


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class PackageSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


@dataclass(slots=True, frozen=True)
class Coordinate:
    lat: float
    lng: float


@dataclass(slots=True, frozen=True)
class TimeWindow:
    """Preferred delivery window as local wall-clock times."""

    start: time
    end: time


@dataclass(slots=True, frozen=True)
class DeliveryRequest:
    """A single delivery destination with its operational attributes.

    ``coordinate`` and ``formatted_address`` stay empty until geocoding fills
    them in through :meth:`with_location`.
    """

    request_id: str
    address: str
    coordinate: Optional[Coordinate] = None
    formatted_address: Optional[str] = None
    customer_name: Optional[str] = None
    phone_number: Optional[str] = None
    notes: Optional[str] = None
    priority: Priority = Priority.MEDIUM
    time_window: Optional[TimeWindow] = None
    package_weight_kg: float = 1.0
    package_size: PackageSize = PackageSize.MEDIUM
    cash_on_delivery: float = 0.0
    service_minutes: float = 5.0

    @property
    def dedupe_key(self) -> str:
        return self.address.strip().lower()

    @property
    def is_geocoded(self) -> bool:
        return self.coordinate is not None

    def with_location(self, coordinate: Coordinate, formatted_address: Optional[str] = None) -> "DeliveryRequest":
        if self.coordinate is not None:
            raise ValueError(f"Delivery '{self.request_id}' is already geocoded.")
        return replace(self, coordinate=coordinate, formatted_address=formatted_address or self.address)


@dataclass(slots=True, frozen=True)
class Vehicle:
    """Capacity and efficiency profile of the single delivery vehicle."""

    max_weight_kg: float
    fuel_efficiency_km_per_l: float
    max_volume_m3: float = 0.0
    current_load_kg: float = 0.0
    vehicle_id: Optional[str] = None

    @property
    def available_capacity_kg(self) -> float:
        return self.max_weight_kg - self.current_load_kg
