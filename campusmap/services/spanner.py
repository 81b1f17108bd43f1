"""Cloud Spanner Graph backed campus query service.

The campus graph is stored in three tables:

  - ``CampusBuilding``: named locations (short name, long name, coordinates)
    each pinned to a graph point.
  - ``CampusPoint``: graph nodes keyed by their formatted coordinates.
  - ``CampusSegment``: walkway edges between points, stored in both
    directions with their length in ``distance``.

Shortest paths are computed by Spanner itself with a GQL ``ANY SHORTEST``
path search over the ``CampusGraph`` property graph; this module only turns
result rows into models.
"""

import asyncio
import logging
from pathlib import Path

from google.cloud import spanner
from google.oauth2 import service_account

from campusmap.config import settings
from campusmap.models.campus import CampusPath, Location, PathSegment, Point

logger = logging.getLogger(__name__)

_client: spanner.Client | None = None
_database = None

MAX_QUANTIFIER_BOUND = 100  # Largest upper bound Spanner accepts on a path quantifier


def _get_database():
    """Lazy-init the Spanner client -> instance -> database handle."""
    global _client, _database
    if _database is None:
        kwargs: dict = {"project": settings.GCP_PROJECT_ID}
        sa_path = Path(settings.SERVICE_ACCOUNT_KEY_PATH)
        if sa_path.exists():
            credentials = service_account.Credentials.from_service_account_file(
                str(sa_path),
                scopes=["https://www.googleapis.com/auth/spanner.data"],
            )
            kwargs["credentials"] = credentials
            logger.info("Using service account key for Spanner: %s", sa_path)
        _client = spanner.Client(**kwargs)
        instance = _client.instance(settings.SPANNER_INSTANCE_ID)
        _database = instance.database(settings.SPANNER_DATABASE_ID)
    return _database


async def _read(sql: str, params: dict | None = None, param_types: dict | None = None) -> list:
    database = _get_database()

    def _execute():
        with database.snapshot() as snapshot:
            results = snapshot.execute_sql(sql, params=params, param_types=param_types)
            return list(results)

    return await asyncio.to_thread(_execute)


# ---------------------------------------------------------------------------
# Row conversion
# ---------------------------------------------------------------------------

def _location_from_row(row) -> Location:
    return Location(shortName=row[0], longName=row[1], x=row[2], y=row[3])


def _segments_from_rows(edges_data) -> list[PathSegment]:
    """Convert ``(x1, y1, x2, y2, distance)`` structs into path segments."""
    segments = []
    for edge in edges_data:
        segments.append(PathSegment(
            start=Point(x=edge[0], y=edge[1]),
            end=Point(x=edge[2], y=edge[3]),
            cost=edge[4],
        ))
    return segments


def _build_path(start: Point, segments: list[PathSegment]) -> CampusPath:
    return CampusPath(
        start=start,
        path=segments,
        cost=sum(seg.cost for seg in segments),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

class PathSearchLimitError(RuntimeError):
    """The path search stopped at its hop bound before exhausting the graph."""

    def __init__(self, src: str, dest: str, max_hops: int):
        self.src = src
        self.dest = dest
        self.max_hops = max_hops
        super().__init__(f"Path search from {src} to {dest} exceeded {max_hops} hops")


class SpannerQueryService:
    """Query service reading the campus graph from Cloud Spanner.

    Paths come from GQL ``ANY SHORTEST``, which minimizes the number of
    segments, not the summed distance. The reported ``cost`` is the total
    distance of the returned route, which may be longer than the
    distance-optimal route between the same two buildings.
    """

    def __init__(self, max_hops: int | None = None):
        self.max_hops = settings.MAX_PATH_HOPS if max_hops is None else max_hops
        if not 1 <= self.max_hops <= MAX_QUANTIFIER_BOUND:
            raise ValueError(
                f"max_hops must be between 1 and {MAX_QUANTIFIER_BOUND}, got {self.max_hops}"
            )

    async def all_locations(self) -> list[Location]:
        rows = await _read(
            "SELECT short_name, long_name, x, y FROM CampusBuilding ORDER BY short_name"
        )
        return [_location_from_row(row) for row in rows]

    async def exists(self, short_name: str) -> bool:
        rows = await _read(
            "SELECT 1 FROM CampusBuilding WHERE short_name = @short_name LIMIT 1",
            params={"short_name": short_name},
            param_types={"short_name": spanner.param_types.STRING},
        )
        return bool(rows)

    async def _lookup_points(self, names: list[str]) -> dict[str, tuple[str, Point]]:
        """Map building short names to ``(point_id, Point)``."""
        rows = await _read(
            """
            SELECT short_name, point_id, x, y
            FROM CampusBuilding
            WHERE short_name IN UNNEST(@names)
            """,
            params={"names": names},
            param_types={"names": spanner.param_types.Array(spanner.param_types.STRING)},
        )
        return {row[0]: (row[1], Point(x=row[2], y=row[3])) for row in rows}

    async def _search_segments(self, start_id: str, end_id: str) -> list[PathSegment] | None:
        gql = f"""
        GRAPH CampusGraph
        MATCH p = ANY SHORTEST
          (src:CampusPoint WHERE src.point_id = @start_id)
          -[e:CampusSegment]->{{1,{int(self.max_hops)}}}
          (dst:CampusPoint WHERE dst.point_id = @end_id)
        RETURN
          ARRAY(SELECT AS STRUCT seg.x1, seg.y1, seg.x2, seg.y2, seg.distance
                FROM UNNEST(EDGES(p)) AS seg WITH OFFSET AS i
                ORDER BY i) AS segments
        """
        rows = await _read(
            gql,
            params={"start_id": start_id, "end_id": end_id},
            param_types={
                "start_id": spanner.param_types.STRING,
                "end_id": spanner.param_types.STRING,
            },
        )
        if not rows:
            return None
        return _segments_from_rows(rows[0][0])

    async def _search_was_truncated(self, start_id: str) -> bool:
        """Whether some point sits exactly ``max_hops`` segments from the start.

        If none does, every point reachable from the start lies within the
        bound and an empty bounded search means the target is unreachable.
        """
        gql = f"""
        GRAPH CampusGraph
        MATCH p = ANY SHORTEST
          (src:CampusPoint WHERE src.point_id = @start_id)
          -[e:CampusSegment]->{{1,{int(self.max_hops)}}}
          (far:CampusPoint)
        WHERE PATH_LENGTH(p) = {int(self.max_hops)}
        RETURN far.point_id
        LIMIT 1
        """
        rows = await _read(
            gql,
            params={"start_id": start_id},
            param_types={"start_id": spanner.param_types.STRING},
        )
        return bool(rows)

    async def shortest_path(self, src: str, dest: str) -> CampusPath | None:
        points = await self._lookup_points([src, dest])
        if src not in points or dest not in points:
            return None

        start_id, start = points[src]
        end_id, _ = points[dest]
        if start_id == end_id:
            return _build_path(start, [])

        segments = await self._search_segments(start_id, end_id)
        if segments is None:
            if await self._search_was_truncated(start_id):
                raise PathSearchLimitError(src, dest, self.max_hops)
            logger.info("No path between %s and %s", src, dest)
            return None

        logger.info("Found %d-segment path: %s -> %s", len(segments), src, dest)
        return _build_path(start, segments)
