import logging

from fastapi import APIRouter, Depends

from campusmap.errors import NoPathFoundError, UnknownDestinationError, UnknownSourceError
from campusmap.models.campus import CampusPath, Location
from campusmap.services.query_service import QueryService, get_query_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["campus"])


@router.get("/getLocations", response_model=list[Location])
async def get_locations(
    service: QueryService = Depends(get_query_service),
) -> list[Location]:
    return list(await service.all_locations())


@router.get("/findPath", response_model=CampusPath)
async def find_path(
    src: str | None = None,
    dest: str | None = None,
    service: QueryService = Depends(get_query_service),
) -> CampusPath:
    # Unknown source wins over unknown destination; only validated names
    # reach the path search.
    if src is None or not await service.exists(src):
        logger.info("Unknown source location: %r", src)
        raise UnknownSourceError()

    if dest is None or not await service.exists(dest):
        logger.info("Unknown destination location: %r", dest)
        raise UnknownDestinationError()

    path = await service.shortest_path(src, dest)
    if path is None:
        logger.info("No path between %s and %s", src, dest)
        raise NoPathFoundError()

    return path
