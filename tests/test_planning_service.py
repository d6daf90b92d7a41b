import httpx
import pytest
from pydantic import ValidationError

from src.geoplan.config import settings
from src.geoplan.models.domain import Coordinate, DistanceMethod, EdgeCost
from src.geoplan.schemas.planning import PlanningRequest, PlanningStop
from src.geoplan.services.geocoding.resolver import GeocodingResolver
from src.geoplan.services.planning import service as planning_service


class CountingLimiter:
    def __init__(self) -> None:
        self.calls = 0

    def acquire(self) -> None:
        self.calls += 1


def _resolver() -> GeocodingResolver:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    return GeocodingResolver(
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
        rate_limiter=CountingLimiter(),
    )


def test_plan_route_resolves_tags_and_orders_stops():
    request = PlanningRequest(
        start_address="Head office, Port Louis",
        stops=[
            PlanningStop(id="hotel-1", address="Coastal Road, Mahebourg"),
            PlanningStop(id="hotel-2", label="Sugar Beach", latitude=-20.2744, longitude=57.3631),
            PlanningStop(id="hotel-3", address="Somewhere unknown"),
            PlanningStop(id="hotel-4", address="Rue du Moulin, Rose Hill"),
        ],
    )

    response = planning_service.plan_route(request, resolver=_resolver())

    assert response.unresolved_stop_ids == ["hotel-3"]
    assert [stop.id for stop in response.stops] == ["hotel-4", "hotel-2", "hotel-1"]
    assert [stop.sequence for stop in response.stops] == [1, 2, 3]
    assert [stop.region for stop in response.stops] == ["plaines-wilhems", "riviere-noire", "grand-port"]
    assert response.stops[1].label == "Sugar Beach"
    assert response.cost_method == "straight_line"
    assert response.fallback_edges == 0
    assert response.total_distance_km == pytest.approx(
        sum(stop.distance_from_prev_km for stop in response.stops), abs=0.1
    )


def test_plan_route_with_road_distances_reports_estimates():
    class DummyDistanceClient:
        def cost_function(self):
            def cost(a: Coordinate, b: Coordinate) -> EdgeCost:
                if b.lat < -20.4:
                    return EdgeCost(distance_km=25, duration_min=35, method=DistanceMethod.FALLBACK)
                return EdgeCost(distance_km=abs(a.lat - b.lat) * 100, duration_min=10)

            return cost

    request = PlanningRequest(
        start_latitude=-20.1609,
        start_longitude=57.4989,
        use_road_distances=True,
        stops=[
            PlanningStop(id="south", latitude=-20.5167, longitude=57.5167),
            PlanningStop(id="center", latitude=-20.2333, longitude=57.5833),
        ],
    )

    response = planning_service.plan_route(request, resolver=_resolver(), distance_client=DummyDistanceClient())

    assert response.cost_method == "road"
    assert [stop.id for stop in response.stops] == ["center", "south"]
    assert response.fallback_edges == 1
    assert response.stops[1].estimated


def test_road_distances_without_api_key_fail_clearly(monkeypatch):
    monkeypatch.setattr(settings, "google_maps_api_key", None)
    request = PlanningRequest(
        start_latitude=-20.1609,
        start_longitude=57.4989,
        use_road_distances=True,
        stops=[PlanningStop(id="a", latitude=-20.2, longitude=57.5)],
    )

    with pytest.raises(ValueError, match="not configured"):
        planning_service.plan_route(request, resolver=_resolver())


def test_unresolvable_start_address_is_an_error():
    request = PlanningRequest(start_address="Nowhere", stops=[])
    with pytest.raises(ValueError, match="could not be geocoded"):
        planning_service.plan_route(request, resolver=_resolver())


def test_request_validation():
    with pytest.raises(ValidationError):
        PlanningStop(id="x")
    with pytest.raises(ValidationError):
        PlanningRequest(stops=[])
    with pytest.raises(ValidationError):
        PlanningRequest(
            start_latitude=-20.0,
            start_longitude=57.5,
            stops=[PlanningStop(id="a", address="Moka"), PlanningStop(id="a", address="Curepipe")],
        )
