"""Operator-facing advisories for an optimized route."""

from __future__ import annotations

from ...config import settings
from .models import LoadReport, OptimizedRoute
from .schedule import urgent_stop_count


def build_recommendations(load_report: LoadReport, route: OptimizedRoute) -> list[str]:
    recommendations = list(load_report.advisories)

    if route.traffic_impact.delay_minutes > settings.heavy_traffic_delay_minutes:
        recommendations.append("Heavy traffic detected - consider alternative departure time")

    if route.stop_count > settings.large_batch_stop_count:
        recommendations.append("Large delivery batch - consider splitting into multiple routes")

    urgent = urgent_stop_count(route)
    if urgent > 0:
        recommendations.append(f"{urgent} urgent deliveries - prioritized in route")

    return recommendations
