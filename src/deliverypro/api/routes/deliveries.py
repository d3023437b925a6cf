"""Delivery route optimization endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, Response, status

from ...schemas.deliveries import OptimizedRouteResponse, OptimizeRequest
from ...services.outputs.route_formatter import route_to_csv, route_to_json
from ...services.routing.models import OptimizedRoute
from ...services.routing.service import optimize_delivery_route

router = APIRouter(prefix="/deliveries", tags=["deliveries"])
logger = logging.getLogger(__name__)


def _run(payload: OptimizeRequest, request: Request) -> OptimizedRoute:
    try:
        return optimize_delivery_route(
            payload.to_domain(),
            payload.vehicle.to_domain(),
            geocoder=getattr(request.app.state, "geocoder", None),
            distance_service=getattr(request.app.state, "distance_service", None),
            start_time=payload.start_time,
            reference_time=payload.reference_time,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error optimizing delivery route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize delivery route: {str(exc)}",
        ) from exc


@router.post("/optimize", response_model=OptimizedRouteResponse, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizeRequest, request: Request) -> OptimizedRouteResponse:
    route = _run(payload, request)
    return OptimizedRouteResponse(**route_to_json(route))


@router.post("/optimize/csv", status_code=status.HTTP_200_OK)
def optimize_csv(payload: OptimizeRequest, request: Request) -> Response:
    """Same optimization, returned as a printable stop manifest."""
    route = _run(payload, request)
    return Response(
        content=route_to_csv(route),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="delivery_route.csv"'},
    )
