"""Route planning request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class PlanningStop(BaseModel):
    id: str
    address: Optional[str] = Field(default=None, description="Free-text address, geocoded when no coordinate is given.")
    label: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def _require_location(self) -> "PlanningStop":
        has_coordinate = self.latitude is not None and self.longitude is not None
        if not has_coordinate and not (self.address and self.address.strip()):
            raise ValueError(f"Stop '{self.id}' needs an address or a latitude/longitude pair.")
        return self


class PlanningRequest(BaseModel):
    stops: List[PlanningStop]
    start_latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    start_longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    start_address: Optional[str] = Field(default=None, description="Used when no start coordinate is given.")
    use_road_distances: bool = Field(
        default=False,
        description="Cost edges with the Distance Matrix provider instead of straight-line distance.",
    )

    @model_validator(mode="after")
    def _require_start(self) -> "PlanningRequest":
        has_coordinate = self.start_latitude is not None and self.start_longitude is not None
        if not has_coordinate and not (self.start_address and self.start_address.strip()):
            raise ValueError("A start coordinate or start address is required.")
        return self

    @model_validator(mode="after")
    def _unique_stop_ids(self) -> "PlanningRequest":
        seen: set[str] = set()
        for stop in self.stops:
            if stop.id in seen:
                raise ValueError(f"Duplicate stop id '{stop.id}'.")
            seen.add(stop.id)
        return self


class PlannedStop(BaseModel):
    id: str
    label: str
    sequence: int
    latitude: float
    longitude: float
    region: str
    distance_from_prev_km: float
    duration_from_prev_min: float
    estimated: bool = False


class PlanningResponse(BaseModel):
    stops: List[PlannedStop]
    unresolved_stop_ids: List[str]
    total_distance_km: float
    total_duration_min: int
    naive_distance_km: float
    savings_km: float
    savings_min: int
    cost_method: str
    fallback_edges: int = Field(default=0, description="Edges costed with an estimate instead of a measured value.")
