"""Serializers for optimized delivery routes."""

from __future__ import annotations

import csv
import io

from ..routing.models import OptimizedRoute, RouteStop


def _stop_to_json(stop: RouteStop) -> dict:
    request = stop.request
    leg = None
    if stop.leg is not None:
        leg = {
            "distance_m": stop.leg.distance_m,
            "duration_s": stop.leg.duration_s,
            "duration_in_traffic_s": stop.leg.duration_in_traffic_s,
            "traffic_level": stop.leg.traffic_level.value,
            "source": stop.leg.source,
        }
    return {
        "id": request.request_id,
        "sequence": stop.sequence,
        "address": request.address,
        "formatted_address": request.formatted_address,
        "lat": request.coordinate.lat,
        "lng": request.coordinate.lng,
        "customer_name": request.customer_name,
        "phone_number": request.phone_number,
        "priority": request.priority.value,
        "estimated_arrival": stop.estimated_arrival.isoformat(),
        "arrival_label": stop.arrival_label,
        "service_minutes": stop.service_minutes,
        "traffic_delay_min": stop.traffic_delay_min,
        "cumulative_distance_km": stop.cumulative_distance_km,
        "cumulative_time_min": stop.cumulative_time_min,
        "leg": leg,
    }


def route_to_json(route: OptimizedRoute) -> dict:
    load = None
    if route.load is not None:
        load = {
            "feasible": route.load.feasible,
            "total_weight_kg": route.load.total_weight_kg,
            "available_capacity_kg": route.load.available_capacity_kg,
            "advisories": list(route.load.advisories),
        }
    return {
        "stops": [_stop_to_json(stop) for stop in route.stops],
        "total_distance_km": route.total_distance_km,
        "total_time_min": route.total_time_min,
        "total_time_with_traffic_min": route.total_time_with_traffic_min,
        "fuel_cost": route.fuel_cost,
        "priority_score": route.priority_score,
        "load_utilization_pct": route.load_utilization_pct,
        "traffic_impact": {
            "delay_minutes": route.traffic_impact.delay_minutes,
            "alternative_routes": route.traffic_impact.alternative_routes,
        },
        "recommendations": list(route.recommendations),
        "load": load,
        "unresolved_addresses": list(route.unresolved_addresses),
        "metadata": route.metadata,
    }


def route_to_csv(route: OptimizedRoute) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "sequence",
        "id",
        "address",
        "customer_name",
        "phone_number",
        "priority",
        "estimated_arrival",
        "cumulative_distance_km",
        "cumulative_time_min",
        "traffic_delay_min",
        "cash_on_delivery",
        "notes",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for stop in route.stops:
        request = stop.request
        writer.writerow(
            {
                "sequence": stop.sequence,
                "id": request.request_id,
                "address": request.address,
                "customer_name": request.customer_name or "",
                "phone_number": request.phone_number or "",
                "priority": request.priority.value,
                "estimated_arrival": stop.arrival_label,
                "cumulative_distance_km": round(stop.cumulative_distance_km, 2),
                "cumulative_time_min": round(stop.cumulative_time_min, 1),
                "traffic_delay_min": round(stop.traffic_delay_min, 1),
                "cash_on_delivery": request.cash_on_delivery,
                "notes": request.notes or "",
            }
        )
    return buffer.getvalue()
