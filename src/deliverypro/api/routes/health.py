"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/providers", status_code=status.HTTP_200_OK)
def health_providers(request: Request) -> dict:
    """Report which external collaborators are wired in.

    Without them the engine still runs: addresses must then carry coordinates
    and travel costs use the haversine estimate.
    """
    geocoder = getattr(request.app.state, "geocoder", None)
    distance_service = getattr(request.app.state, "distance_service", None)
    return {
        "geocoder": {"configured": geocoder is not None},
        "distance_service": {"configured": distance_service is not None},
        "degraded": geocoder is None or distance_service is None,
    }
