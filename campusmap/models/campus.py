from pydantic import BaseModel, ConfigDict, computed_field


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    shortName: str
    longName: str
    x: float
    y: float


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class PathSegment(BaseModel):
    start: Point
    end: Point
    cost: float

    @computed_field  # type: ignore[prop-decorator]
    @property
    def location(self) -> Point:
        """The waypoint this segment arrives at."""
        return self.end


class CampusPath(BaseModel):
    start: Point
    path: list[PathSegment] = []
    cost: float = 0.0

    @property
    def end(self) -> Point:
        return self.path[-1].end if self.path else self.start
