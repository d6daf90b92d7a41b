"""Route planning orchestration service."""

from __future__ import annotations

import logging

from ...models.domain import Coordinate, RouteStop
from ...schemas.planning import PlannedStop, PlanningRequest, PlanningResponse, PlanningStop
from ..distance.client import DistanceMatrixClient
from ..geocoding.resolver import GeocodingResolver
from ..geospatial import geometric_cost
from ..regions import RegionClassifier
from ..routing.optimizer import optimize

logger = logging.getLogger(__name__)


def _stop_coordinate(stop: PlanningStop, resolver: GeocodingResolver) -> Coordinate | None:
    if stop.latitude is not None and stop.longitude is not None:
        return Coordinate(lat=stop.latitude, lng=stop.longitude)
    return resolver.resolve(stop.address or "")


def plan_route(
    payload: PlanningRequest,
    resolver: GeocodingResolver | None = None,
    distance_client: DistanceMatrixClient | None = None,
    classifier: RegionClassifier | None = None,
) -> PlanningResponse:
    """Resolve, tag and order the stops of one visit round."""

    resolver = resolver or GeocodingResolver()
    classifier = classifier or RegionClassifier(resolver.gazetteer)

    if payload.start_latitude is not None and payload.start_longitude is not None:
        start = Coordinate(lat=payload.start_latitude, lng=payload.start_longitude)
    else:
        start = resolver.resolve(payload.start_address or "")
        if start is None:
            raise ValueError(f"Start address '{payload.start_address}' could not be geocoded.")

    route_stops: list[RouteStop] = []
    unresolved: list[str] = []
    for stop in payload.stops:
        coordinate = _stop_coordinate(stop, resolver)
        if coordinate is None:
            unresolved.append(stop.id)
            continue
        route_stops.append(RouteStop(id=stop.id, coordinate=coordinate, label=stop.label or stop.address or stop.id))
    if unresolved:
        logger.warning(f"{len(unresolved)} stops have no coordinate and are left out of the route: {unresolved}")

    if payload.use_road_distances:
        try:
            client = distance_client or DistanceMatrixClient()
        except ValueError as e:
            logger.error(f"Distance Matrix client initialization failed: {e}")
            raise ValueError("Road distances requested but the Distance Matrix provider is not configured.") from e
        cost_fn = client.cost_function()
        cost_method = "road"
    else:
        cost_fn = geometric_cost
        cost_method = "straight_line"

    result = optimize(route_stops, start, cost_fn)

    by_id = {stop.id: stop for stop in route_stops}
    planned: list[PlannedStop] = []
    for sequence, leg in enumerate(result.legs, start=1):
        stop = by_id[leg.stop_id]
        planned.append(
            PlannedStop(
                id=str(stop.id),
                label=stop.label,
                sequence=sequence,
                latitude=stop.coordinate.lat,
                longitude=stop.coordinate.lng,
                region=classifier.nearest_region(stop.coordinate),
                distance_from_prev_km=leg.distance_km,
                duration_from_prev_min=leg.duration_min,
                estimated=leg.estimated,
            )
        )

    fallback_edges = sum(1 for leg in result.legs if leg.estimated)
    if fallback_edges:
        logger.warning(f"{fallback_edges} route legs use estimated distances")

    return PlanningResponse(
        stops=planned,
        unresolved_stop_ids=unresolved,
        total_distance_km=result.total_distance_km,
        total_duration_min=result.total_duration_min,
        naive_distance_km=result.naive_distance_km,
        savings_km=result.savings_km,
        savings_min=result.savings_min,
        cost_method=cost_method,
        fallback_edges=fallback_edges,
    )
