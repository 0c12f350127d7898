"""Shared pytest fixtures for the geojson_shp test suite."""

from pathlib import Path

import pytest

from tests.builders import document, feature, point

# ---------------------------------------------------------------------------
# Path fixtures
# ---------------------------------------------------------------------------

TESTS_DIR = Path(__file__).parent
DATA_DIR = TESTS_DIR / "data"


@pytest.fixture()
def data_dir() -> Path:
    """Return the path to the test data directory."""
    return DATA_DIR


@pytest.fixture()
def two_points_geojson(data_dir: Path) -> Path:
    """Path to a two-Point collection with ``name``/``pop`` attributes."""
    return data_dir / "two_points.geojson"


@pytest.fixture()
def roads_geojson(data_dir: Path) -> Path:
    """Path to a three-LineString collection of road segments."""
    return data_dir / "roads.geojson"


@pytest.fixture()
def output_base(tmp_path: Path) -> Path:
    """Output base (no extension) inside a per-test temp directory."""
    return tmp_path / "out" / "result"


# ---------------------------------------------------------------------------
# Sample documents
# ---------------------------------------------------------------------------


@pytest.fixture()
def two_points_document() -> str:
    """The canonical two-Point example: ``A``/10 at (1, 2), ``B``/20 at (3, 4)."""
    return document(
        feature(point(1, 2), {"name": "A", "pop": 10}),
        feature(point(3, 4), {"name": "B", "pop": 20}),
    )
