import pytest
from fastapi.testclient import TestClient

from campusmap.main import app
from campusmap.models.campus import CampusPath, Location, PathSegment, Point
from campusmap.services.query_service import get_query_service

FRONTEND_ORIGIN = "http://localhost:3000"


def _base_locations() -> list[Location]:
    return [
        Location(shortName="CSE", longName="Paul G. Allen Center for Computer Science & Engineering", x=2259.7, y=1715.5),
        Location(shortName="MGH", longName="Mary Gates Hall", x=1914.5, y=1727.9),
        Location(shortName="ISLAND", longName="Unreachable Island", x=10.0, y=10.0),
    ]


def _cse_to_mgh() -> CampusPath:
    cse = Point(x=2259.7, y=1715.5)
    mid = Point(x=2100.0, y=1720.0)
    mgh = Point(x=1914.5, y=1727.9)
    return CampusPath(
        start=cse,
        path=[
            PathSegment(start=cse, end=mid, cost=159.8),
            PathSegment(start=mid, end=mgh, cost=185.7),
        ],
        cost=345.5,
    )


class _StubQueryService:
    def __init__(self):
        self.locations = _base_locations()
        self.paths = {("CSE", "MGH"): _cse_to_mgh()}
        self.calls: list[tuple] = []

    async def all_locations(self) -> list[Location]:
        self.calls.append(("all_locations",))
        return self.locations

    async def exists(self, short_name: str) -> bool:
        self.calls.append(("exists", short_name))
        return any(loc.shortName == short_name for loc in self.locations)

    async def shortest_path(self, src: str, dest: str) -> CampusPath | None:
        self.calls.append(("shortest_path", src, dest))
        return self.paths.get((src, dest))


@pytest.fixture
def stub():
    service = _StubQueryService()
    app.dependency_overrides[get_query_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


@pytest.fixture
def client(stub):
    return TestClient(app)


def test_get_locations_lists_every_location(client):
    resp = client.get("/getLocations")

    assert resp.status_code == 200
    body = resp.json()
    assert [loc["shortName"] for loc in body] == ["CSE", "MGH", "ISLAND"]
    for loc in body:
        assert set(loc) == {"shortName", "longName", "x", "y"}
        assert isinstance(loc["x"], float) and isinstance(loc["y"], float)


def test_unknown_source_is_455(client, stub):
    resp = client.get("/findPath", params={"src": "XXXX", "dest": "MGH"})

    assert resp.status_code == 455
    assert stub.calls == [("exists", "XXXX")]


def test_unknown_source_wins_over_unknown_destination(client, stub):
    resp = client.get("/findPath", params={"src": "XXXX", "dest": "YYYY"})

    assert resp.status_code == 455
    assert ("exists", "YYYY") not in stub.calls


def test_missing_source_is_455(client, stub):
    resp = client.get("/findPath", params={"dest": "MGH"})

    assert resp.status_code == 455
    assert stub.calls == []


def test_unknown_destination_is_456(client, stub):
    resp = client.get("/findPath", params={"src": "CSE", "dest": "YYYY"})

    assert resp.status_code == 456
    assert stub.calls == [("exists", "CSE"), ("exists", "YYYY")]


def test_missing_destination_is_456(client):
    resp = client.get("/findPath", params={"src": "CSE"})

    assert resp.status_code == 456


def test_unreachable_destination_is_457(client, stub):
    resp = client.get("/findPath", params={"src": "CSE", "dest": "ISLAND"})

    assert resp.status_code == 457
    assert stub.calls[-1] == ("shortest_path", "CSE", "ISLAND")


def test_error_body_carries_detail(client):
    resp = client.get("/findPath", params={"src": "CSE", "dest": "ISLAND"})

    assert resp.headers["content-type"].startswith("application/json")
    assert resp.json() == {"detail": "No path exists between the two locations"}


def test_find_path_returns_path_from_src_to_dest(client, stub):
    resp = client.get("/findPath", params={"src": "CSE", "dest": "MGH"})

    assert resp.status_code == 200
    body = resp.json()
    cse, mgh = stub.locations[0], stub.locations[1]
    assert body["start"] == {"x": cse.x, "y": cse.y}
    assert body["path"][-1]["end"] == {"x": mgh.x, "y": mgh.y}
    assert body["path"][-1]["location"] == body["path"][-1]["end"]
    assert body["cost"] == pytest.approx(sum(seg["cost"] for seg in body["path"]))


def test_cors_headers_on_success_and_error(client):
    ok = client.get("/getLocations", headers={"Origin": FRONTEND_ORIGIN})
    halted = client.get(
        "/findPath",
        params={"src": "XXXX", "dest": "MGH"},
        headers={"Origin": FRONTEND_ORIGIN},
    )

    assert ok.headers["access-control-allow-origin"] == FRONTEND_ORIGIN
    assert halted.headers["access-control-allow-origin"] == FRONTEND_ORIGIN


def test_cors_preflight_allows_get(client):
    resp = client.options(
        "/findPath",
        headers={
            "Origin": FRONTEND_ORIGIN,
            "Access-Control-Request-Method": "GET",
        },
    )

    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == FRONTEND_ORIGIN


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_collaborator_fault_is_not_translated(stub):
    async def _fail(src, dest):
        raise RuntimeError("path search exceeded its hop bound")

    stub.shortest_path = _fail
    resp = TestClient(app, raise_server_exceptions=False).get(
        "/findPath", params={"src": "CSE", "dest": "MGH"}
    )

    assert resp.status_code == 500
