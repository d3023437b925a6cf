"""Traffic-aware travel cost estimation with a closed-form fallback."""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Any, Mapping, Optional, Protocol, Sequence

from ...config import settings
from ...models.domain import Coordinate
from ..geospatial import coordinate_distance_km
from ..throttle import Throttle
from .models import TrafficLevel, TravelCost

logger = logging.getLogger(__name__)

# Ratio assumed when a provider returns no in-traffic duration.
DEFAULT_TRAFFIC_RATIO = 1.2


class DistanceService(Protocol):
    """Live distance/traffic collaborator.

    ``query`` returns a mapping with ``distance_m``, ``duration_s`` and
    ``duration_in_traffic_s`` (the last may be missing or ``None``). Raising or
    returning ``None`` is treated as a failed call.
    """

    def query(self, origin: Coordinate, destination: Coordinate) -> Optional[Mapping[str, Any]]:
        ...


class TravelCostStrategy(Protocol):
    name: str

    def estimate(self, origin: Optional[Coordinate], destination: Optional[Coordinate]) -> TravelCost:
        ...


def classify_traffic(ratio: float) -> TrafficLevel:
    if ratio > 1.5:
        return TrafficLevel.SEVERE
    if ratio > 1.3:
        return TrafficLevel.HEAVY
    if ratio > 1.1:
        return TrafficLevel.MODERATE
    return TrafficLevel.LIGHT


class ProviderStrategy:
    """Adapt a :class:`DistanceService` to the strategy interface."""

    name = "provider"

    def __init__(self, service: DistanceService) -> None:
        self.service = service

    def estimate(self, origin: Optional[Coordinate], destination: Optional[Coordinate]) -> TravelCost:
        if origin is None or destination is None:
            raise ValueError("Live provider needs both coordinates.")
        payload = self.service.query(origin, destination)
        if not payload:
            raise ValueError("No route found by distance provider.")

        distance_m = float(payload["distance_m"])
        duration_s = float(payload["duration_s"])
        in_traffic = payload.get("duration_in_traffic_s")
        if in_traffic is None:
            duration_in_traffic_s = duration_s
            ratio = DEFAULT_TRAFFIC_RATIO
        else:
            duration_in_traffic_s = float(in_traffic)
            ratio = duration_in_traffic_s / duration_s if duration_s > 0 else 1.0

        return TravelCost(
            distance_m=distance_m,
            duration_s=duration_s,
            duration_in_traffic_s=duration_in_traffic_s,
            traffic_level=classify_traffic(ratio),
            source=self.name,
        )


class HaversineStrategy:
    """Great-circle estimate at a fixed urban speed. Never fails."""

    name = "haversine"

    def __init__(
        self,
        base_seconds_per_km: float | None = None,
        traffic_seconds_per_km: float | None = None,
    ) -> None:
        self.base_seconds_per_km = (
            settings.fallback_base_seconds_per_km if base_seconds_per_km is None else base_seconds_per_km
        )
        self.traffic_seconds_per_km = (
            settings.fallback_traffic_seconds_per_km if traffic_seconds_per_km is None else traffic_seconds_per_km
        )

    def from_distance_km(self, distance_km: float) -> TravelCost:
        return TravelCost(
            distance_m=distance_km * 1000.0,
            duration_s=round(distance_km * self.base_seconds_per_km),
            duration_in_traffic_s=round(distance_km * self.traffic_seconds_per_km),
            traffic_level=TrafficLevel.MODERATE,
            source=self.name,
        )

    def estimate(self, origin: Optional[Coordinate], destination: Optional[Coordinate]) -> TravelCost:
        if origin is None or destination is None:
            return self.from_distance_km(0.0)
        return self.from_distance_km(coordinate_distance_km(origin, destination))


class TravelCostEstimator:
    """Try each strategy in order and adopt the first one that answers.

    A :class:`HaversineStrategy` is always the last entry so every pair of
    coordinates gets an estimate. The live strategies run on a worker pool and
    must answer within ``timeout`` seconds; a late answer counts as a failure.
    """

    def __init__(
        self,
        strategies: Sequence[TravelCostStrategy] = (),
        *,
        timeout: float | None = None,
        max_workers: int | None = None,
        call_delay: float | None = None,
    ) -> None:
        chain = list(strategies)
        if not chain or not isinstance(chain[-1], HaversineStrategy):
            chain.append(HaversineStrategy())
        self.strategies: tuple[TravelCostStrategy, ...] = tuple(chain)
        self.timeout = settings.provider_timeout_seconds if timeout is None else timeout
        self.throttle = Throttle(settings.distance_call_delay_seconds if call_delay is None else call_delay)
        self._executor: ThreadPoolExecutor | None = None
        if self.has_live_provider:
            self._executor = ThreadPoolExecutor(
                max_workers=settings.matrix_max_workers if max_workers is None else max_workers,
                thread_name_prefix="travel-cost",
            )

    @property
    def has_live_provider(self) -> bool:
        return len(self.strategies) > 1

    @property
    def fallback(self) -> TravelCostStrategy:
        return self.strategies[-1]

    def _estimate_live(self, origin: Optional[Coordinate], destination: Optional[Coordinate]) -> TravelCost:
        for strategy in self.strategies[:-1]:
            try:
                self.throttle.wait()
                return strategy.estimate(origin, destination)
            except Exception as exc:
                logger.warning(f"Travel cost strategy '{strategy.name}' failed: {exc}")
        raise LookupError("No live travel cost strategy answered.")

    def submit(self, origin: Optional[Coordinate], destination: Optional[Coordinate]) -> Future:
        """Start a live lookup in the background; the future raises when every live strategy failed."""

        if self._executor is None:
            raise RuntimeError("Estimator has no live strategy to submit to.")
        return self._executor.submit(self._estimate_live, origin, destination)

    def estimate(self, origin: Optional[Coordinate], destination: Optional[Coordinate]) -> TravelCost:
        if self._executor is None:
            return self.fallback.estimate(origin, destination)

        future = self.submit(origin, destination)
        try:
            return future.result(timeout=self.timeout)
        except FuturesTimeoutError:
            future.cancel()
            logger.warning(f"Live travel cost lookup timed out after {self.timeout}s; using '{self.fallback.name}'")
        except LookupError:
            logger.warning(f"No live travel cost available; using '{self.fallback.name}'")
        return self.fallback.estimate(origin, destination)

    def close(self) -> None:
        """Release the worker pool without waiting on lookups that never answered."""

        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)


def build_estimator(
    distance_service: DistanceService | None = None,
    *,
    timeout: float | None = None,
    max_workers: int | None = None,
    call_delay: float | None = None,
) -> TravelCostEstimator:
    strategies: list[TravelCostStrategy] = []
    if distance_service is not None:
        strategies.append(ProviderStrategy(distance_service))
    return TravelCostEstimator(strategies, timeout=timeout, max_workers=max_workers, call_delay=call_delay)


def build_distance_matrix(
    coordinates: Sequence[Coordinate],
    estimator: TravelCostEstimator,
    *,
    deadline: float | None = None,
) -> list[list[float]]:
    """Compute the full pairwise distance matrix in km, once, before local search.

    All legs are submitted to the estimator's worker pool together and share
    one ``deadline`` (seconds). Legs that failed, or had not answered by then,
    use the haversine estimate.
    """

    n = len(coordinates)
    matrix: list[list[float]] = [[0.0] * n for _ in range(n)]
    if n < 2:
        return matrix

    fallback = estimator.fallback
    if not estimator.has_live_provider:
        for i in range(n):
            for j in range(n):
                if i != j:
                    matrix[i][j] = fallback.estimate(coordinates[i], coordinates[j]).distance_m / 1000.0
        return matrix

    deadline = settings.matrix_deadline_seconds if deadline is None else deadline
    start_time = time.time()
    futures = {
        (i, j): estimator.submit(coordinates[i], coordinates[j])
        for i in range(n)
        for j in range(n)
        if i != j
    }
    done, pending = wait(futures.values(), timeout=deadline)

    fallen_back = 0
    for (i, j), future in futures.items():
        if future in done and future.exception() is None:
            cost = future.result()
        else:
            future.cancel()
            fallen_back += 1
            cost = fallback.estimate(coordinates[i], coordinates[j])
        matrix[i][j] = cost.distance_m / 1000.0

    elapsed = time.time() - start_time
    if pending:
        logger.warning(f"{len(pending)} distance matrix legs missed the {deadline}s deadline")
    if fallen_back:
        logger.warning(f"{fallen_back} distance matrix legs used the haversine estimate")
    logger.info(f"Distance matrix for {n} stops computed in {elapsed:.2f}s")
    return matrix
