"""HTTP errors raised by the path-finding routes.

Each error aborts the request immediately with one of the non-standard
4xx codes the campus map front end understands.
"""

from fastapi import HTTPException


class PathLookupError(HTTPException):
    status_code: int = 400
    reason: str = "Path lookup failed"

    def __init__(self, detail: str | None = None):
        # Starlette can't derive a phrase for 455-457, so always pass one.
        super().__init__(status_code=self.status_code, detail=detail or self.reason)


class UnknownSourceError(PathLookupError):
    status_code = 455
    reason = "Source location does not exist"


class UnknownDestinationError(PathLookupError):
    status_code = 456
    reason = "Destination location does not exist"


class NoPathFoundError(PathLookupError):
    status_code = 457
    reason = "No path exists between the two locations"
