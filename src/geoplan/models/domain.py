"""Domain models for coordinates, distances and visit routes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Hashable, Optional


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float

    def as_query(self) -> str:
        return f"{self.lat:.6f},{self.lng:.6f}"


@dataclass(frozen=True, slots=True)
class GazetteerEntry:
    """A known settlement with its coordinate and administrative region."""

    name: str
    coordinate: Coordinate
    region: str


class DistanceStatus(str, Enum):
    OK = "OK"
    ZERO_RESULTS = "ZERO_RESULTS"
    ERROR = "ERROR"


class DistanceMethod(str, Enum):
    PROVIDER = "provider"
    FALLBACK = "fallback"


@dataclass(frozen=True, slots=True)
class DistanceResult:
    """Travel distance and time between two locations.

    Results tagged ``method=fallback`` carry a constant estimate rather than a
    measured value; callers should check ``method`` and ``status`` before
    presenting the numbers as authoritative.
    """

    distance_km: float
    duration_min: int
    distance_text: str
    duration_text: str
    status: DistanceStatus
    method: DistanceMethod
    duration_in_traffic_min: Optional[int] = None
    route: Optional[str] = None

    @property
    def is_estimate(self) -> bool:
        return self.method is DistanceMethod.FALLBACK

    def to_dict(self) -> dict[str, Any]:
        return {
            "distance_km": self.distance_km,
            "duration_min": self.duration_min,
            "distance_text": self.distance_text,
            "duration_text": self.duration_text,
            "status": self.status.value,
            "method": self.method.value,
            "duration_in_traffic_min": self.duration_in_traffic_min,
            "route": self.route,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "DistanceResult":
        return cls(
            distance_km=float(payload["distance_km"]),
            duration_min=int(payload["duration_min"]),
            distance_text=str(payload["distance_text"]),
            duration_text=str(payload["duration_text"]),
            status=DistanceStatus(payload["status"]),
            method=DistanceMethod(payload["method"]),
            duration_in_traffic_min=payload.get("duration_in_traffic_min"),
            route=payload.get("route"),
        )


@dataclass(frozen=True, slots=True)
class CacheEntry:
    result: DistanceResult
    stored_at: float

    def to_dict(self) -> dict[str, Any]:
        return {"result": self.result.to_dict(), "stored_at": self.stored_at}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "CacheEntry":
        return cls(result=DistanceResult.from_dict(payload["result"]), stored_at=float(payload["stored_at"]))


@dataclass(frozen=True, slots=True)
class EdgeCost:
    """Cost of travelling one edge of a route."""

    distance_km: float
    duration_min: float
    method: DistanceMethod = DistanceMethod.PROVIDER


@dataclass(frozen=True, slots=True)
class RouteStop:
    id: Hashable
    coordinate: Coordinate
    label: str = ""


@dataclass(slots=True)
class RouteLeg:
    stop_id: Hashable
    distance_km: float
    duration_min: float
    estimated: bool = False


@dataclass(slots=True)
class RouteResult:
    order: list[Hashable]
    total_distance_km: float
    total_duration_min: int
    savings_km: float
    naive_distance_km: float = 0.0
    naive_duration_min: int = 0
    savings_min: int = 0
    legs: list[RouteLeg] = field(default_factory=list)
