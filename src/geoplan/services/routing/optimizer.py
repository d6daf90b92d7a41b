"""Nearest-neighbor visit sequencing.

The optimizer is a greedy heuristic, not an exact TSP solver: from the
current position it always drives to the closest remaining stop. The savings
figure compares the greedy order against the order the stops were given in
and may be negative when the input order was already better.
"""

from __future__ import annotations

import logging
from typing import Callable, Hashable, Sequence

from ...models.domain import Coordinate, DistanceMethod, DistanceResult, EdgeCost, RouteLeg, RouteResult, RouteStop
from ..geospatial import geometric_cost

CostFunction = Callable[[Coordinate, Coordinate], EdgeCost]

logger = logging.getLogger(__name__)


def _round_km(value: float) -> float:
    return round(value * 10) / 10


def _memoized(cost_fn: CostFunction) -> CostFunction:
    costs: dict[tuple[Coordinate, Coordinate], EdgeCost] = {}

    def cost(a: Coordinate, b: Coordinate) -> EdgeCost:
        if (a, b) not in costs:
            costs[(a, b)] = cost_fn(a, b)
        return costs[(a, b)]

    return cost


def optimize(
    stops: Sequence[RouteStop],
    start: Coordinate,
    cost_fn: CostFunction = geometric_cost,
) -> RouteResult:
    """Order ``stops`` by repeatedly visiting the nearest remaining one.

    Ties go to the stop that appears first in the remaining list. Each edge
    is costed at most once per call.
    """
    cost_fn = _memoized(cost_fn)
    remaining = list(stops)
    current = start
    order: list[Hashable] = []
    legs: list[RouteLeg] = []
    total_distance = 0.0
    total_duration = 0.0

    while remaining:
        best_index = 0
        best_cost: EdgeCost | None = None
        for index, candidate in enumerate(remaining):
            cost = cost_fn(current, candidate.coordinate)
            if best_cost is None or cost.distance_km < best_cost.distance_km:
                best_index = index
                best_cost = cost
        chosen = remaining.pop(best_index)
        order.append(chosen.id)
        legs.append(
            RouteLeg(
                stop_id=chosen.id,
                distance_km=best_cost.distance_km,
                duration_min=best_cost.duration_min,
                estimated=best_cost.method is DistanceMethod.FALLBACK,
            )
        )
        total_distance += best_cost.distance_km
        total_duration += best_cost.duration_min
        current = chosen.coordinate

    naive_distance = 0.0
    naive_duration = 0.0
    previous = start
    for stop in stops:
        cost = cost_fn(previous, stop.coordinate)
        naive_distance += cost.distance_km
        naive_duration += cost.duration_min
        previous = stop.coordinate

    result = RouteResult(
        order=order,
        total_distance_km=_round_km(total_distance),
        total_duration_min=round(total_duration),
        savings_km=_round_km(naive_distance - total_distance),
        naive_distance_km=_round_km(naive_distance),
        naive_duration_min=round(naive_duration),
        savings_min=round(naive_duration - total_duration),
        legs=legs,
    )
    logger.info(
        f"Optimized {len(order)} stops: {result.total_distance_km} km "
        f"(input order {result.naive_distance_km} km, savings {result.savings_km} km)"
    )
    return result


def optimize_matrix(labels: Sequence[Hashable], matrix: Sequence[Sequence[DistanceResult]]) -> RouteResult:
    """Nearest-neighbor over a precomputed square matrix, starting at ``labels[0]``.

    Used when stops only have addresses: the matrix usually comes from
    ``DistanceMatrixClient.distance_matrix(addresses, addresses)``.
    """
    count = len(labels)
    if len(matrix) != count or any(len(row) != count for row in matrix):
        raise ValueError(f"Expected a {count}x{count} distance matrix.")
    if count == 0:
        return RouteResult(order=[], total_distance_km=0.0, total_duration_min=0, savings_km=0.0)

    visited = {0}
    route = [0]
    current = 0
    while len(route) < count:
        nearest = -1
        best = float("inf")
        for index in range(count):
            if index not in visited and matrix[current][index].distance_km < best:
                best = matrix[current][index].distance_km
                nearest = index
        visited.add(nearest)
        route.append(nearest)
        current = nearest

    legs: list[RouteLeg] = []
    total_distance = 0.0
    total_duration = 0.0
    for previous, index in zip(route, route[1:]):
        cell = matrix[previous][index]
        legs.append(
            RouteLeg(
                stop_id=labels[index],
                distance_km=cell.distance_km,
                duration_min=cell.duration_min,
                estimated=cell.is_estimate,
            )
        )
        total_distance += cell.distance_km
        total_duration += cell.duration_min

    naive_distance = sum(matrix[i][i + 1].distance_km for i in range(count - 1))
    naive_duration = sum(matrix[i][i + 1].duration_min for i in range(count - 1))
    return RouteResult(
        order=[labels[index] for index in route],
        total_distance_km=_round_km(total_distance),
        total_duration_min=round(total_duration),
        savings_km=_round_km(naive_distance - total_distance),
        naive_distance_km=_round_km(naive_distance),
        naive_duration_min=round(naive_duration),
        savings_min=round(naive_duration - total_duration),
        legs=legs,
    )
