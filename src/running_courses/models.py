"""Pydantic domain models for generated courses, lookups and recommendations."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

COURSE_COUNT = 12
SECTOR_DEGREES = 30
MIDPOINT_FRACTIONS = (0.25, 0.5, 0.75)
MAX_RECOMMENDATIONS = 3


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


def coordinate_key(lat: float, lon: float) -> str:
    """Canonical ``"lat,lon"`` identity key at full float precision.

    ``repr`` gives the shortest string that round-trips to the same float,
    so two equal floats always produce the same key regardless of how they
    were computed or parsed. Adding 0.0 folds -0.0 into 0.0.
    """
    return f"{float(lat) + 0.0!r},{float(lon) + 0.0!r}"


def coarse_coordinate_key(lat: float, lon: float, decimals: int = 3) -> str:
    """Bucketed key (3 decimals is roughly 100 m)."""
    return f"{lat:.{decimals}f},{lon:.{decimals}f}"


class Midpoint(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    elevation: float = 0.0


class Course(BaseModel):
    id: int = Field(ge=1, le=COURSE_COUNT)
    angle: int = Field(ge=0, lt=360)
    start: Coordinate
    end: Coordinate
    midpoints: list[Midpoint] = Field(min_length=3, max_length=3)

    @field_validator("angle")
    @classmethod
    def angle_must_be_sector_multiple(cls, v: int) -> int:
        if v % SECTOR_DEGREES != 0:
            raise ValueError(f"angle must be a multiple of {SECTOR_DEGREES}, got {v}")
        return v


class CourseSet(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    base: Coordinate
    radius_km: float = Field(gt=0)
    radius_m: float = Field(gt=0)
    courses: list[Course]

    @model_validator(mode="after")
    def check_twelve_sectors(self) -> "CourseSet":
        if len(self.courses) != COURSE_COUNT:
            raise ValueError(f"expected {COURSE_COUNT} courses, got {len(self.courses)}")
        angles = [c.angle for c in self.courses]
        if len(set(angles)) != len(angles):
            raise ValueError(f"course angles must be unique, got {angles}")
        for course in self.courses:
            if course.start != self.base:
                raise ValueError(f"course {course.id} does not start at the base coordinate")
        return self

    def course(self, course_id: int) -> Optional[Course]:
        for c in self.courses:
            if c.id == course_id:
                return c
        return None


class ElevationPoint(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    elevation: float


class RoadAddress(BaseModel):
    address_name: str
    region_1depth_name: str = ""
    region_2depth_name: str = ""
    region_3depth_name: str = ""
    road_name: str = ""
    building_name: str = ""


class AddressInfo(BaseModel):
    address_name: str
    region_1depth_name: str = ""
    region_2depth_name: str = ""
    region_3depth_name: str = ""
    road_address: Optional[RoadAddress] = None


class CoordinateWithAddress(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    address: Optional[AddressInfo] = None


class AddressedPoint(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    address_name: Optional[str] = None


class EnrichedCourse(BaseModel):
    id: int
    angle: int
    start: AddressedPoint
    end: AddressedPoint
    midpoints: list[Midpoint]


class Position(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    accuracy: Optional[float] = None


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ElevationAnalysis(_CamelModel):
    average_change: float
    total_ascent: float
    total_descent: float


class Scores(_CamelModel):
    elevation: float = Field(ge=0, le=10)
    overall: float = Field(ge=0, le=10)


class Recommendation(_CamelModel):
    course_id: int
    rank: int = Field(ge=1, le=MAX_RECOMMENDATIONS)
    summary: str
    reason: str
    elevation_analysis: ElevationAnalysis
    scores: Scores


class RecommendationSet(_CamelModel):
    recommendations: list[Recommendation] = Field(max_length=MAX_RECOMMENDATIONS)

    @field_validator("recommendations")
    @classmethod
    def ranks_must_be_unique(cls, v: list[Recommendation]) -> list[Recommendation]:
        ranks = [r.rank for r in v]
        if len(set(ranks)) != len(ranks):
            raise ValueError(f"recommendation ranks must be unique, got {ranks}")
        return v


class CourseGenerationRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    distance_km: float = Field(gt=0)


class Waypoint(BaseModel):
    latitude: float
    longitude: float


class CourseCard(_CamelModel):
    course_id: int
    rank: int
    name: str
    distance: str
    estimated_time: str
    summary: str
    reason: str
    elevation_analysis: ElevationAnalysis
    scores: Scores
    waypoints: list[Waypoint] = Field(default_factory=list)


class GenerationMetadata(_CamelModel):
    total_courses: int
    radius_km: float
    generated_at: str
    elapsed_ms: int


class CourseGenerationResponse(_CamelModel):
    success: bool = True
    courses: list[CourseCard]
    base_position: Waypoint
    metadata: GenerationMetadata


class ErrorResponse(_CamelModel):
    success: bool = False
    message: str
    kind: str
    status_code: int
    elapsed_ms: Optional[int] = None
