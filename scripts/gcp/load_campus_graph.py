#!/usr/bin/env python3
"""Load campus buildings and walkway segments from CSV into Cloud Spanner.

Usage:
    python scripts/gcp/load_campus_graph.py \
      --buildings data/campus_buildings.csv \
      --paths data/campus_paths.csv \
      --create-schema

CSV formats:
    buildings: shortName,longName,x,y
    paths:     x1,y1,x2,y2,distance

Requires:
    - google-cloud-spanner
    - Authenticated gcloud credentials (or GOOGLE_APPLICATION_CREDENTIALS)
"""

from __future__ import annotations

import argparse
import csv
import sys
import time
from pathlib import Path

from google.cloud import spanner
from google.oauth2 import service_account

from campusmap.config import settings

BATCH_SIZE = 500  # Spanner mutation limit per commit

SCHEMA_DDL = [
    """
    CREATE TABLE CampusPoint (
      point_id STRING(64) NOT NULL,
      x FLOAT64 NOT NULL,
      y FLOAT64 NOT NULL,
    ) PRIMARY KEY (point_id)
    """,
    """
    CREATE TABLE CampusBuilding (
      short_name STRING(64) NOT NULL,
      long_name STRING(MAX) NOT NULL,
      x FLOAT64 NOT NULL,
      y FLOAT64 NOT NULL,
      point_id STRING(64) NOT NULL,
      FOREIGN KEY (point_id) REFERENCES CampusPoint (point_id),
    ) PRIMARY KEY (short_name)
    """,
    """
    CREATE TABLE CampusSegment (
      point_id1 STRING(64) NOT NULL,
      point_id2 STRING(64) NOT NULL,
      x1 FLOAT64 NOT NULL,
      y1 FLOAT64 NOT NULL,
      x2 FLOAT64 NOT NULL,
      y2 FLOAT64 NOT NULL,
      distance FLOAT64 NOT NULL,
      FOREIGN KEY (point_id1) REFERENCES CampusPoint (point_id),
      FOREIGN KEY (point_id2) REFERENCES CampusPoint (point_id),
    ) PRIMARY KEY (point_id1, point_id2)
    """,
    """
    CREATE PROPERTY GRAPH CampusGraph
      NODE TABLES (CampusPoint)
      EDGE TABLES (
        CampusSegment
          SOURCE KEY (point_id1) REFERENCES CampusPoint (point_id)
          DESTINATION KEY (point_id2) REFERENCES CampusPoint (point_id)
      )
    """,
]


def point_id(x: float, y: float) -> str:
    return f"{x:.4f},{y:.4f}"


def read_buildings(path: Path) -> list[tuple]:
    with path.open(newline="", encoding="utf-8") as fh:
        rows = []
        for row in csv.DictReader(fh):
            x, y = float(row["x"]), float(row["y"])
            rows.append((row["shortName"], row["longName"], x, y, point_id(x, y)))
    print(f"  Read {len(rows)} buildings from {path}")
    return rows


def read_segments(path: Path) -> list[tuple]:
    """Read walkway segments, emitting both directions of each."""
    segments: dict[tuple[str, str], tuple] = {}
    with path.open(newline="", encoding="utf-8") as fh:
        for row in csv.DictReader(fh):
            x1, y1 = float(row["x1"]), float(row["y1"])
            x2, y2 = float(row["x2"]), float(row["y2"])
            distance = float(row["distance"])
            a, b = point_id(x1, y1), point_id(x2, y2)
            segments[(a, b)] = (a, b, x1, y1, x2, y2, distance)
            segments.setdefault((b, a), (b, a, x2, y2, x1, y1, distance))
    print(f"  Read {len(segments)} directed segments from {path}")
    return list(segments.values())


def collect_points(buildings: list[tuple], segments: list[tuple]) -> list[tuple]:
    points: dict[str, tuple] = {}
    for _, _, x, y, pid in buildings:
        points.setdefault(pid, (pid, x, y))
    for a, b, x1, y1, x2, y2, _ in segments:
        points.setdefault(a, (a, x1, y1))
        points.setdefault(b, (b, x2, y2))
    return list(points.values())


def batch_insert(database, table: str, columns: list[str], rows: list[tuple]):
    """Insert rows into Spanner in batches."""
    total = len(rows)
    inserted = 0

    for i in range(0, total, BATCH_SIZE):
        chunk = rows[i : i + BATCH_SIZE]
        with database.batch() as batch:
            batch.insert_or_update(table=table, columns=columns, values=chunk)
        inserted += len(chunk)
        if inserted % 5000 == 0 or inserted == total:
            print(f"  {table}: {inserted}/{total} rows written")


SPANNER_DATA_SCOPE = "https://www.googleapis.com/auth/spanner.data"
SPANNER_ADMIN_SCOPE = "https://www.googleapis.com/auth/spanner.admin"


def _get_credentials(create_schema: bool = False):
    """Load service account credentials if key file exists.

    Schema changes go through the Database Admin API and need the admin scope.
    """
    scopes = [SPANNER_DATA_SCOPE]
    if create_schema:
        scopes.append(SPANNER_ADMIN_SCOPE)
    sa_path = Path(settings.SERVICE_ACCOUNT_KEY_PATH)
    if sa_path.exists():
        print(f"Using service account key: {sa_path}")
        return service_account.Credentials.from_service_account_file(
            str(sa_path),
            scopes=scopes,
        )
    print("No service account key found, using Application Default Credentials.")
    return None


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Load the campus graph into Spanner")
    parser.add_argument("--buildings", type=Path, required=True)
    parser.add_argument("--paths", type=Path, required=True)
    parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Create the tables and property graph before loading",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()

    creds = _get_credentials(create_schema=args.create_schema)
    kwargs: dict = {"project": settings.GCP_PROJECT_ID}
    if creds:
        kwargs["credentials"] = creds
    client = spanner.Client(**kwargs)
    database = client.instance(settings.SPANNER_INSTANCE_ID).database(settings.SPANNER_DATABASE_ID)

    if args.create_schema:
        print("Creating campus graph schema...")
        database.update_ddl(SCHEMA_DDL).result()

    print("Reading CSV input...")
    buildings = read_buildings(args.buildings)
    segments = read_segments(args.paths)
    points = collect_points(buildings, segments)

    # Points first: buildings and segments reference them.
    t0 = time.time()
    batch_insert(database, "CampusPoint", ["point_id", "x", "y"], points)
    batch_insert(
        database,
        "CampusBuilding",
        ["short_name", "long_name", "x", "y", "point_id"],
        buildings,
    )
    batch_insert(
        database,
        "CampusSegment",
        ["point_id1", "point_id2", "x1", "y1", "x2", "y2", "distance"],
        segments,
    )
    print(f"\nLoad complete in {time.time() - t0:.1f}s.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
