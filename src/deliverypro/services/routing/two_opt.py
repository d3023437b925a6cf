"""2-opt local search over a precomputed distance matrix."""

from __future__ import annotations

from typing import Sequence


def route_distance(order: Sequence[int], distance_matrix: Sequence[Sequence[float]]) -> float:
    return sum(distance_matrix[a][b] for a, b in zip(order, order[1:]))


def two_opt_swap(order: Sequence[int], i: int, j: int) -> list[int]:
    return [*order[:i], *reversed(order[i : j + 1]), *order[j + 1 :]]


def refine_route(order: Sequence[int], distance_matrix: Sequence[Sequence[float]]) -> list[int]:
    """Reverse inner segments while that shortens the route.

    ``order`` holds indices into ``distance_matrix``. The first and last stops
    stay in place. Stops at the first pass that finds no improving reversal,
    which is a local optimum only.
    """

    best = list(order)
    if len(best) < 4:
        return best

    best_distance = route_distance(best, distance_matrix)
    improved = True
    while improved:
        improved = False
        for i in range(1, len(best) - 2):
            for j in range(i + 1, len(best) - 1):
                candidate = two_opt_swap(best, i, j)
                candidate_distance = route_distance(candidate, distance_matrix)
                if candidate_distance < best_distance:
                    best = candidate
                    best_distance = candidate_distance
                    improved = True
    return best
