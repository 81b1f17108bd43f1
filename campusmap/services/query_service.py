"""Interface to the campus graph engine.

The router only ever talks to a ``QueryService``; the engine behind it owns
the location catalog and the shortest-path computation.
"""

from typing import Protocol

from fastapi import Request

from campusmap.models.campus import CampusPath, Location


class QueryService(Protocol):
    async def all_locations(self) -> list[Location]:
        """Every known campus location."""
        ...

    async def exists(self, short_name: str) -> bool:
        """Whether *short_name* names a known location."""
        ...

    async def shortest_path(self, src: str, dest: str) -> CampusPath | None:
        """Shortest path between two known locations, ``None`` if unreachable."""
        ...


def get_query_service(request: Request) -> QueryService:
    return request.app.state.query_service
