"""
Pydantic models for sigtrace simulation configuration.

This module defines the schema for simulation.yaml files that describe:
- Tracing parameters (ray count, bounce limit, foliage permittivity)
- Scene objects (planes, boxes, spheres, point markers) with material tags
- Output settings for the recorded ray paths
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Material tags with special meaning to the bounce state machine
RECEIVER_TAG = "receiver"
GROUND_TAG = "ground"
FOLIAGE_TAG = "foliage"
TRANSMITTER_TAG = "transmitter"


class Position(BaseModel):
    """3D position coordinates in meters."""

    model_config = ConfigDict(extra="forbid")

    x: float = Field(..., description="X coordinate in meters")
    y: float = Field(..., description="Y coordinate in meters")
    z: float = Field(default=0.0, description="Z coordinate in meters")

    def as_tuple(self) -> tuple[float, float, float]:
        """Return position as (x, y, z) tuple."""
        return (self.x, self.y, self.z)


class TracingParams(BaseModel):
    """Parameters of the stochastic ray tracing run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_ray_distance: float = Field(
        default=500.0, description="Maximum length of a single ray segment", gt=0.0
    )
    max_reflections: int = Field(
        default=2, description="Maximum number of reflections per ray", ge=0
    )
    num_rays: int = Field(default=1000, description="Number of rays to cast", ge=1)
    foliage_offset: float = Field(
        default=0.01,
        description="Distance the ray origin is pushed past a foliage boundary",
        gt=0.0,
    )
    foliage_permittivity: float = Field(
        default=4.0, description="Relative permittivity of foliage", gt=0.0
    )
    interaction_tags: frozenset[str] | None = Field(
        default=None,
        description="Material tags rays interact with (None = all tags)",
    )
    seed: int | None = Field(default=None, description="Seed for direction sampling")
    workers: int = Field(default=1, description="Number of tracing threads", ge=1)
    max_refractions: int | None = Field(
        default=None,
        description="Discard rays crossing more foliage boundaries than this",
        ge=0,
    )

    @field_validator("interaction_tags", mode="after")
    @classmethod
    def validate_interaction_tags(cls, v: frozenset[str] | None) -> frozenset[str] | None:
        """Reject an empty filter, which would make every ray miss."""
        if v is not None and not v:
            raise ValueError("interaction_tags must list at least one tag (or be omitted)")
        return v


class _SceneObjectBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tag: str = Field(..., description="Material tag (receiver, ground, foliage, ...)", min_length=1)
    name: str | None = Field(default=None, description="Optional object name")


class PlaneObject(_SceneObjectBase):
    """Infinite plane through a point."""

    type: Literal["plane"] = "plane"
    point: Position
    normal: Position

    @model_validator(mode="after")
    def validate_normal(self) -> "PlaneObject":
        """Ensure the plane normal is not the zero vector."""
        if self.normal.x == 0.0 and self.normal.y == 0.0 and self.normal.z == 0.0:
            raise ValueError("Plane normal must be non-zero")
        return self


class BoxObject(_SceneObjectBase):
    """Axis-aligned box given by two opposite corners."""

    type: Literal["box"] = "box"
    min_corner: Position
    max_corner: Position

    @model_validator(mode="after")
    def validate_extent(self) -> "BoxObject":
        """Ensure min_corner is strictly below max_corner on every axis."""
        for lo, hi, axis in zip(self.min_corner.as_tuple(), self.max_corner.as_tuple(), "xyz"):
            if lo >= hi:
                raise ValueError(
                    f"Box min_corner.{axis} ({lo}) must be less than max_corner.{axis} ({hi})"
                )
        return self

    @property
    def center(self) -> tuple[float, float, float]:
        lo, hi = self.min_corner.as_tuple(), self.max_corner.as_tuple()
        return tuple((a + b) / 2.0 for a, b in zip(lo, hi))


class SphereObject(_SceneObjectBase):
    """Sphere given by center and radius."""

    type: Literal["sphere"] = "sphere"
    center: Position
    radius: float = Field(..., description="Radius in meters", gt=0.0)


class PointObject(_SceneObjectBase):
    """Marker without geometry, e.g. the transmitter location."""

    type: Literal["point"] = "point"
    position: Position


SceneObject = Annotated[
    Union[PlaneObject, BoxObject, SphereObject, PointObject],
    Field(discriminator="type"),
]


class SceneDefinition(BaseModel):
    """Analytic scene: a list of tagged objects."""

    model_config = ConfigDict(extra="forbid")

    objects: list[SceneObject] = Field(
        default_factory=list, description="Scene objects with material tags"
    )


class OutputConfig(BaseModel):
    """Where and how recorded paths are written."""

    model_config = ConfigDict(extra="forbid")

    base_dir: str = Field(default="runs", description="Directory receiving Run_* folders")
    file_name: str = Field(default="ray_data.csv", description="CSV file name per run")
    flush_every: int = Field(
        default=64, description="Recorded rays buffered before writing to disk", ge=1
    )


class SimulationConfig(BaseModel):
    """Root definition for simulation.yaml files."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Simulation name")
    tracing: TracingParams = Field(default_factory=TracingParams)
    scene: SceneDefinition
    output: OutputConfig = Field(default_factory=OutputConfig)
