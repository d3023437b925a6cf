"""Vehicle load feasibility checks."""

from __future__ import annotations

from typing import Sequence

from ...config import settings
from ...models.domain import DeliveryRequest, Vehicle
from .models import LoadReport

DEFAULT_PACKAGE_WEIGHT_KG = 1.0


def package_weight(request: DeliveryRequest) -> float:
    weight = request.package_weight_kg
    if not weight or weight <= 0:
        return DEFAULT_PACKAGE_WEIGHT_KG
    return weight


def total_weight(requests: Sequence[DeliveryRequest]) -> float:
    return sum(package_weight(request) for request in requests)


def validate_load(
    requests: Sequence[DeliveryRequest],
    vehicle: Vehicle,
    *,
    near_capacity_ratio: float | None = None,
) -> LoadReport:
    """Compare the packages against the vehicle's free capacity.

    An overloaded vehicle is reported through ``feasible`` and the advisories,
    never raised, so callers still get a route to plan with.
    """

    near_capacity_ratio = settings.near_capacity_ratio if near_capacity_ratio is None else near_capacity_ratio
    weight = total_weight(requests)
    available = vehicle.available_capacity_kg
    feasible = weight <= available

    advisories: list[str] = []
    if not feasible:
        advisories.append(f"Overweight by {weight - available:.1f}kg")
        advisories.append("Consider multiple trips or larger vehicle")

    utilization = weight / available if available > 0 else float("inf")
    if utilization > near_capacity_ratio:
        advisories.append("Near capacity limit - plan for fuel efficiency")

    return LoadReport(
        feasible=feasible,
        total_weight_kg=weight,
        available_capacity_kg=available,
        advisories=tuple(advisories),
    )
