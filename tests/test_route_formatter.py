import csv
import io
import math
from dataclasses import replace
from datetime import datetime

from deliverypro.models.domain import Coordinate, DeliveryRequest, Priority, Vehicle
from deliverypro.schemas.deliveries import OptimizedRouteResponse
from deliverypro.services.outputs.route_formatter import route_to_csv, route_to_json
from deliverypro.services.routing.load import validate_load
from deliverypro.services.routing.schedule import synthesize_schedule
from deliverypro.services.routing.travel_cost import build_estimator

KM_IN_DEGREES = math.degrees(1 / 6371)


def _route():
    requests = [
        DeliveryRequest(
            request_id="a",
            address="1 Dock Street",
            coordinate=Coordinate(0.0, 0.0),
            customer_name="Huda",
            priority=Priority.HIGH,
            cash_on_delivery=120.0,
        ),
        DeliveryRequest(
            request_id="b",
            address="2 Dock Street",
            coordinate=Coordinate(0.0, 2 * KM_IN_DEGREES),
            notes="Ring twice, then wait",
        ),
    ]
    vehicle = Vehicle(max_weight_kg=25, fuel_efficiency_km_per_l=35)
    route = synthesize_schedule(requests, vehicle, datetime(2025, 3, 10, 14, 0), build_estimator())
    return replace(route, load=validate_load(requests, vehicle))


def test_route_to_json_matches_response_schema():
    payload = route_to_json(_route())

    response = OptimizedRouteResponse(**payload)

    assert response.stops[0].arrival_label == "02:00 PM"
    assert response.stops[0].priority == "high"
    assert response.stops[1].leg.traffic_level == "moderate"
    assert response.load.feasible is True
    assert payload["stops"][1]["estimated_arrival"] == "2025-03-10T14:13:00"


def test_route_to_csv_quotes_free_text():
    rows = list(csv.DictReader(io.StringIO(route_to_csv(_route()))))

    assert [row["sequence"] for row in rows] == ["1", "2"]
    assert rows[0]["customer_name"] == "Huda"
    assert rows[0]["cash_on_delivery"] == "120.0"
    assert rows[1]["notes"] == "Ring twice, then wait"
    assert rows[1]["cumulative_distance_km"] == "2.0"
