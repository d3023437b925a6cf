"""Delivery route optimization orchestration."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Sequence

from ...config import settings
from ...models.domain import DeliveryRequest, Vehicle
from ..geocoding import Geocoder, geocode_requests
from .constructor import construct_route
from .errors import InputError
from .load import validate_load
from .models import OptimizedRoute
from .recommendations import build_recommendations
from .schedule import synthesize_schedule
from .travel_cost import DistanceService, TravelCostEstimator, build_distance_matrix, build_estimator
from .two_opt import refine_route, route_distance

logger = logging.getLogger(__name__)

MIN_STOPS_FOR_REFINEMENT = 4


def deduplicate_requests(requests: Sequence[DeliveryRequest]) -> list[DeliveryRequest]:
    """Drop blank addresses and repeats of the same address, keeping the first occurrence."""

    seen: set[str] = set()
    unique: list[DeliveryRequest] = []
    for request in requests:
        key = request.dedupe_key
        if not key or key in seen:
            continue
        seen.add(key)
        unique.append(request)
    return unique


def _check_input_size(requests: Sequence[DeliveryRequest], max_deliveries: int) -> None:
    if not requests:
        raise InputError("No valid delivery addresses provided.")
    if len(requests) > max_deliveries:
        raise InputError(
            f"Too many addresses ({len(requests)}). "
            f"Please limit to {max_deliveries} deliveries for optimal performance."
        )


def order_deliveries(
    requests: Sequence[DeliveryRequest],
    estimator: TravelCostEstimator,
    now: datetime,
) -> list[DeliveryRequest]:
    """Construct the priority-weighted order, then shorten it with 2-opt."""

    ordered = construct_route(requests, now)
    if len(ordered) < MIN_STOPS_FOR_REFINEMENT:
        return ordered

    matrix = build_distance_matrix([request.coordinate for request in ordered], estimator)
    initial = list(range(len(ordered)))
    refined = refine_route(initial, matrix)
    logger.info(
        f"2-opt refinement: {route_distance(initial, matrix):.2f} km -> {route_distance(refined, matrix):.2f} km"
    )
    return [ordered[index] for index in refined]


def optimize_delivery_route(
    requests: Sequence[DeliveryRequest],
    vehicle: Vehicle,
    *,
    geocoder: Geocoder | None = None,
    distance_service: DistanceService | None = None,
    start_time: datetime | None = None,
    reference_time: datetime | None = None,
    max_deliveries: int | None = None,
) -> OptimizedRoute:
    """Turn an unordered delivery list into a scheduled single-vehicle route.

    ``reference_time`` drives priority scoring and defaults to ``start_time``,
    which itself defaults to the current local time. Addresses that cannot be
    geocoded are left out and listed in ``unresolved_addresses``.

    Raises:
        InputError: no usable addresses, too many addresses, or none geocoded.
    """

    max_deliveries = settings.max_deliveries if max_deliveries is None else max_deliveries
    unique = deduplicate_requests(requests)
    if len(unique) < len(requests):
        logger.info(f"Dropped {len(requests) - len(unique)} blank or duplicate deliveries")
    _check_input_size(unique, max_deliveries)

    geocoded, unresolved = geocode_requests(unique, geocoder)
    if not geocoded:
        raise InputError("Could not geocode any delivery addresses. Please check the address format.")
    logger.info(f"Successfully geocoded {len(geocoded)} out of {len(unique)} deliveries")

    start_time = start_time or datetime.now()
    now = reference_time or start_time
    estimator = build_estimator(distance_service)

    load_report = validate_load(geocoded, vehicle)
    if not load_report.feasible:
        logger.warning(
            f"Load of {load_report.total_weight_kg:.1f}kg exceeds available capacity "
            f"{load_report.available_capacity_kg:.1f}kg"
        )

    try:
        ordered = order_deliveries(geocoded, estimator, now)
        route = synthesize_schedule(ordered, vehicle, start_time, estimator, now=now)
    finally:
        estimator.close()

    metadata = {
        **route.metadata,
        "requested": len(requests),
        "unique": len(unique),
        "geocoded": len(geocoded),
        "live_traffic": estimator.has_live_provider,
        "start_time": start_time.isoformat(),
    }
    return replace(
        route,
        recommendations=tuple(build_recommendations(load_report, route)),
        load=load_report,
        unresolved_addresses=tuple(unresolved),
        metadata=metadata,
    )
