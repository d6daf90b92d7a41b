import httpx
import pytest

from src.geoplan.data.gazetteer import load_gazetteer
from src.geoplan.models.domain import Coordinate
from src.geoplan.services.geocoding.resolver import GeocodingResolver, normalize_address


class CountingLimiter:
    def __init__(self) -> None:
        self.calls = 0

    def acquire(self) -> None:
        self.calls += 1


def _gazetteer_coordinate(name: str) -> Coordinate:
    return next(entry.coordinate for entry in load_gazetteer() if entry.name == name)


def _resolver(handler, limiter: CountingLimiter | None = None) -> GeocodingResolver:
    return GeocodingResolver(
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
        rate_limiter=limiter or CountingLimiter(),
    )


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"Unexpected provider call: {request.url}")


def test_normalize_address():
    assert normalize_address("  Rue Éclair, MAHÉBOURG ") == "rue eclair, mahebourg"


def test_gazetteer_match_makes_no_network_call():
    limiter = CountingLimiter()
    resolver = _resolver(_unreachable, limiter)

    assert resolver.resolve("Royal Road, Curepipe") == _gazetteer_coordinate("curepipe")
    assert resolver.resolve("Rue Éclair, Mahébourg") == _gazetteer_coordinate("mahebourg")
    assert limiter.calls == 0


def test_first_gazetteer_entry_in_list_order_wins():
    resolver = _resolver(_unreachable)
    assert resolver.resolve("Rose Hill road near Port Louis") == _gazetteer_coordinate("port louis")


def test_provider_fallback_uses_bounded_single_result_query():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"lat": "-20.2437", "lon": "57.4850", "display_name": "Ebene"}])

    limiter = CountingLimiter()
    coordinate = _resolver(handler, limiter).resolve("Ebene Cybercity")

    assert coordinate == Coordinate(lat=-20.2437, lng=57.4850)
    assert limiter.calls == 1
    params = seen[0].url.params
    assert params["q"] == "Ebene Cybercity, Mauritius"
    assert params["limit"] == "1"
    assert params["countrycodes"] == "mu"
    assert params["bounded"] == "1"
    assert params["viewbox"] == "57.3051,-19.9802,57.813,-20.5259"
    assert seen[0].headers["User-Agent"]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json=[]),
        httpx.Response(503, text="busy"),
        httpx.Response(200, text="<html>"),
        httpx.Response(200, json=[{"display_name": "no coordinates"}]),
        # Réunion, outside the country box
        httpx.Response(200, json=[{"lat": "-21.1151", "lon": "55.5364"}]),
    ],
)
def test_unresolvable_address_returns_none(response: httpx.Response):
    limiter = CountingLimiter()
    resolver = _resolver(lambda request: response, limiter)

    assert resolver.resolve("Nowhere street") is None
    assert limiter.calls == 1


def test_transport_error_returns_none():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    assert _resolver(handler).resolve("Nowhere street") is None


def test_resolve_batch_reports_progress():
    progress: list[tuple[int, int]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    outcomes = _resolver(handler).resolve_batch(
        ["Quatre Bornes", "Unknown place"],
        on_progress=lambda done, total: progress.append((done, total)),
    )

    assert [outcome.address for outcome in outcomes] == ["Quatre Bornes", "Unknown place"]
    assert outcomes[0].coordinate == _gazetteer_coordinate("quatre bornes")
    assert outcomes[1].coordinate is None
    assert progress == [(1, 2), (2, 2)]


def test_resolve_with_region():
    resolver = _resolver(_unreachable)
    assert resolver.resolve_with_region("Coastal Road, Flic en Flac") == (
        _gazetteer_coordinate("flic en flac"),
        "riviere-noire",
    )
