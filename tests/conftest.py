from pathlib import Path

import pytest
import yaml

from taxrange.earth import Pixelation
from taxrange.ranges import Collection
from taxrange.system.path_resolver import PathResolver

# Specimen records of the sample collection, as (name, age, [(lat, lon), ...])
SAMPLE_POINTS = [
    ("Brontostoma discus", 0, [(4.27, -72.54), (8.67, -83.56)]),
    (
        "Rhododendron ericoides",
        0,
        [(4.08, 118.52), (3.86, 115.55), (6.08, 116.55), (6.15, 116.65)],
    ),
    ("Megazostrodon rudnerae", 201_600_000, [(-44.1, -1.4)]),
]

# Unscaled density field of Eoraptor lunensis
EORAPTOR_FIELD = {
    34661: 0.0833333,
    34662: 0.2083333,
    34663: 0.4166667,
    34664: 0.2083333,
    34665: 0.0833333,
}
EORAPTOR_AGE = 230_000_000

# Expected range maps of the sample collection
EXPECTED_POINTS = {
    "Brontostoma discus": (0, {17319: 1.0, 19117: 1.0}),
    "Rhododendron ericoides": (0, {18588: 1.0, 19305: 1.0, 19308: 1.0}),
    "Megazostrodon rudnerae": (201_600_000, {34957: 1.0}),
}
EXPECTED_EORAPTOR = {34661: 0.2, 34662: 0.5, 34663: 1.0, 34664: 0.5, 34665: 0.2}


@pytest.fixture
def pixelation() -> Pixelation:
    """Provide the one degree pixelation used by the sample data."""
    return Pixelation(360)


@pytest.fixture
def collection(pixelation: Pixelation) -> Collection:
    """Provide a collection with three points ranges and one continuous range."""
    coll = Collection(pixelation)
    for name, age, points in SAMPLE_POINTS:
        for lat, lon in points:
            coll.add(name, age, lat, lon)
    coll.set("Eoraptor lunensis", EORAPTOR_AGE, EORAPTOR_FIELD)
    return coll


@pytest.fixture
def path_resolver(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> PathResolver:
    """Provide a PathResolver whose data directory is a temporary directory."""
    monkeypatch.delenv("TAXRANGE_CONFIG", raising=False)
    monkeypatch.setenv("TAXRANGE_DATA", str(tmp_path / "data"))
    return PathResolver()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Provide a configuration file that keeps logging quiet during tests."""
    path = tmp_path / "config" / "taxrange.yaml"
    path.parent.mkdir(parents=True)
    path.write_text(yaml.dump({"config_version": "1.0.0", "logging": {"level": "WARNING"}}))
    return path


@pytest.fixture
def eoraptor_field() -> dict[int, float]:
    """Provide the unscaled density field of Eoraptor lunensis."""
    return dict(EORAPTOR_FIELD)


@pytest.fixture
def expected_ranges() -> dict[str, tuple[str, int, dict[int, float]]]:
    """Provide the expected (type, age, range) of each taxon of the sample collection."""
    expected = {name: ("points", age, rng) for name, (age, rng) in EXPECTED_POINTS.items()}
    expected["Eoraptor lunensis"] = ("range", EORAPTOR_AGE, EXPECTED_EORAPTOR)
    return expected
