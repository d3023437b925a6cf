"""Batched, throttled geocoding of delivery addresses through pluggable resolvers."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

from ..config import settings
from ..models.domain import Coordinate, DeliveryRequest
from .throttle import Throttle

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class GeocodeResult:
    lat: float
    lng: float
    formatted_address: str

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)


class Geocoder(Protocol):
    """Resolve free-text addresses. Returning ``None`` or raising means failure."""

    name: str

    def resolve(self, address: str) -> Optional[GeocodeResult]:
        ...


class GeocoderChain:
    """Ask each resolver in turn and keep the first answer."""

    name = "chain"

    def __init__(self, resolvers: Sequence[Geocoder]) -> None:
        self.resolvers = tuple(resolvers)

    def resolve(self, address: str) -> Optional[GeocodeResult]:
        for resolver in self.resolvers:
            try:
                result = resolver.resolve(address)
            except Exception as exc:
                logger.warning(f"Geocoder '{getattr(resolver, 'name', resolver)}' failed for '{address}': {exc}")
                continue
            if result is not None:
                return result
        return None


def geocode_addresses(
    addresses: Sequence[str],
    geocoder: Geocoder,
    *,
    batch_size: int | None = None,
    call_delay: float | None = None,
    batch_delay: float | None = None,
    max_workers: int | None = None,
    timeout: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[Optional[GeocodeResult]]:
    """Geocode addresses in batches, keeping the input order.

    Calls inside a batch run on a small thread pool but are spaced by
    ``call_delay``; a longer ``batch_delay`` separates batches. Each batch
    must finish within ``timeout`` seconds. A failed or unanswered address
    yields ``None`` and never aborts the batch.
    """

    batch_size = settings.geocode_batch_size if batch_size is None else batch_size
    call_delay = settings.geocode_call_delay_seconds if call_delay is None else call_delay
    batch_delay = settings.geocode_batch_delay_seconds if batch_delay is None else batch_delay
    max_workers = settings.geocode_max_workers if max_workers is None else max_workers
    timeout = settings.provider_timeout_seconds if timeout is None else timeout
    throttle = Throttle(call_delay, sleep=sleep)

    def _resolve(address: str) -> Optional[GeocodeResult]:
        throttle.wait()
        try:
            return geocoder.resolve(address)
        except Exception as exc:
            logger.warning(f"Failed to geocode: {address} - {exc}")
            return None

    results: list[Optional[GeocodeResult]] = []
    executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="geocode")
    try:
        for start in range(0, len(addresses), batch_size):
            batch = addresses[start : start + batch_size]
            futures = [executor.submit(_resolve, address) for address in batch]
            done, _ = wait(futures, timeout=timeout)
            for address, future in zip(batch, futures):
                if future in done:
                    results.append(future.result())
                else:
                    future.cancel()
                    logger.warning(f"Geocoding timed out after {timeout}s: {address}")
                    results.append(None)
            if start + batch_size < len(addresses) and batch_delay > 0:
                sleep(batch_delay)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
    return results


def geocode_requests(
    requests: Sequence[DeliveryRequest],
    geocoder: Geocoder | None,
    **options,
) -> tuple[list[DeliveryRequest], list[str]]:
    """Attach coordinates to deliveries that lack them.

    Returns ``(geocoded, unresolved_addresses)``. Deliveries that already carry
    a coordinate pass through untouched. Without a geocoder every other
    delivery is unresolved.
    """

    pending = [index for index, request in enumerate(requests) if not request.is_geocoded]
    resolved: dict[int, GeocodeResult] = {}
    if pending and geocoder is not None:
        results = geocode_addresses([requests[index].address for index in pending], geocoder, **options)
        for index, result in zip(pending, results):
            if result is not None:
                resolved[index] = result

    geocoded: list[DeliveryRequest] = []
    unresolved: list[str] = []
    for index, request in enumerate(requests):
        if request.is_geocoded:
            geocoded.append(request)
        elif index in resolved:
            result = resolved[index]
            geocoded.append(request.with_location(result.coordinate, result.formatted_address))
        else:
            unresolved.append(request.address)

    if unresolved:
        logger.warning(f"Failed to geocode {len(unresolved)} addresses: {unresolved}")
    return geocoded, unresolved
