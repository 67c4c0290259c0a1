"""
Test Locator Service, Config and CLI
====================================

Exactly-once construction under concurrent first access, cached startup
failures, YAML configuration and the tzloc command line.

Usage:
    pytest test_service.py
    python test_service.py
"""

import io
import json
import tempfile
import threading
import time
import traceback
from concurrent.futures import ThreadPoolExecutor
from contextlib import redirect_stdout
from pathlib import Path

import pytest
import yaml

from tzloc_cli.cli import main as cli_main
from tzloc_dataset import DatasetError, encode_entries
from tzloc_locator import (
    BoundaryMode,
    LocatorConfig,
    LocatorService,
    PointLocationEngine,
    PolygonStore,
    RegionPolygon,
)


def _adjacent_entries():
    return [
        RegionPolygon("A", [(-10, -10), (0, -10), (0, 10), (-10, 10)]),
        RegionPolygon("B", [(0, -10), (10, -10), (10, 10), (0, 10)]),
    ]


def test_builds_once_under_concurrent_access():
    """Concurrent first access runs the factory exactly once."""
    print("\n" + "=" * 60)
    print("TEST: Exactly-once Construction")
    print("=" * 60)

    calls = []
    calls_lock = threading.Lock()

    def factory():
        with calls_lock:
            calls.append(threading.get_ident())
        time.sleep(0.05)
        return PointLocationEngine.from_store(PolygonStore(_adjacent_entries()))

    service = LocatorService(factory)
    assert not service.is_ready

    with ThreadPoolExecutor(max_workers=16) as pool:
        engines = list(pool.map(lambda _: service.engine, range(64)))

    assert len(calls) == 1
    assert all(engine is engines[0] for engine in engines)
    assert service.is_ready
    assert service.initialize() is engines[0]
    print(f"✓ 64 concurrent accesses, factory called {len(calls)} time")


def test_failure_is_cached():
    """A failed build is re-raised on every access and never retried."""
    calls = []

    def factory():
        calls.append(1)
        raise DatasetError("polygon count 2 does not match region id count 1")

    service = LocatorService(factory)

    with pytest.raises(DatasetError):
        service.initialize()
    with pytest.raises(DatasetError):
        service.query(0, 0)

    assert len(calls) == 1
    assert not service.is_ready
    print("✓ Startup failure surfaced once, then re-raised without retry")

    depths = []
    for _ in range(5):
        with pytest.raises(DatasetError) as excinfo:
            service.initialize()
        depths.append(len(traceback.extract_tb(excinfo.value.__traceback__)))
    assert len(set(depths)) == 1
    print("✓ Cached failure traceback does not grow across accesses")


def test_default_boundary_mode():
    service = LocatorService(
        lambda: PointLocationEngine.from_store(PolygonStore(_adjacent_entries())),
        default_mode="exclusive",
    )

    assert service.query(0, 0) == []
    assert service.query(0, 0, BoundaryMode.INCLUSIVE) == ["A", "B"]
    assert service.query_lon_lat(-5, 0) == ["A"]
    print("✓ Service default mode applies when a query passes none")


def _write_dataset(directory: Path) -> Path:
    dataset = directory / "zones.tzlc"
    dataset.write_bytes(encode_entries(_adjacent_entries()))
    return dataset


def test_config_from_yaml():
    """Relative dataset paths resolve against the YAML file."""
    print("\n" + "=" * 60)
    print("TEST: LocatorConfig")
    print("=" * 60)

    with tempfile.TemporaryDirectory() as tmp:
        directory = Path(tmp)
        _write_dataset(directory)
        config_path = directory / "locator.yaml"
        config_path.write_text(yaml.safe_dump({
            'dataset_path': 'zones.tzlc',
            'boundary_mode': 'EXCLUSIVE',
            'node_capacity': 4,
            'log_level': 'warning',
        }))

        config = LocatorConfig.from_yaml(config_path)
        assert config.dataset_path == directory / "zones.tzlc"
        assert config.boundary_mode is BoundaryMode.EXCLUSIVE
        assert config.node_capacity == 4
        assert config.log_level == "WARNING"
        print("✓ YAML parsed and normalized")

        service = LocatorService.from_config(config)
        assert service.query(0, 0) == []
        assert service.query(0, 0, BoundaryMode.INCLUSIVE) == ["A", "B"]
        assert service.engine.index.node_capacity == 4
        print("✓ Service built from config answers queries")


def test_config_validation():
    with tempfile.TemporaryDirectory() as tmp:
        directory = Path(tmp)
        dataset = _write_dataset(directory)

        with pytest.raises(FileNotFoundError):
            LocatorConfig(dataset_path=directory / "missing.tzlc")
        with pytest.raises(ValueError):
            LocatorConfig(dataset_path=directory)
        with pytest.raises(ValueError):
            LocatorConfig(dataset_path=dataset, node_capacity=1)
        with pytest.raises(ValueError):
            LocatorConfig(dataset_path=dataset, boundary_mode="sideways")
        with pytest.raises(ValueError):
            LocatorConfig(dataset_path=dataset, log_level="LOUD")

        with pytest.raises(ValueError, match="integer"):
            LocatorConfig(dataset_path=dataset, node_capacity="16")
        with pytest.raises(ValueError, match="integer"):
            LocatorConfig(dataset_path=dataset, node_capacity=True)

        config_path = directory / "empty.yaml"
        config_path.write_text("")
        with pytest.raises(ValueError):
            LocatorConfig.from_yaml(config_path)

        quoted = directory / "quoted.yaml"
        quoted.write_text(yaml.safe_dump({
            'dataset_path': dataset.name,
            'node_capacity': '16',
        }))
        with pytest.raises(ValueError, match="integer"):
            LocatorConfig.from_yaml(quoted)
    print("✓ Invalid configuration rejected at construction")


def test_service_from_corrupt_dataset():
    with tempfile.TemporaryDirectory() as tmp:
        dataset = Path(tmp) / "corrupt.tzlc"
        dataset.write_bytes(b"TZLC\x01\x00")

        service = LocatorService.from_config(LocatorConfig(dataset_path=dataset))
        with pytest.raises(DatasetError):
            service.initialize()
        with pytest.raises(DatasetError):
            service.query(0, 0)


def _run_cli(*argv) -> tuple:
    output = io.StringIO()
    with redirect_stdout(output):
        code = cli_main(list(argv))
    return code, output.getvalue()


def test_cli_pack_query_info():
    """tzloc pack -> query -> info round trip on disk."""
    print("\n" + "=" * 60)
    print("TEST: tzloc CLI")
    print("=" * 60)

    collection = {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"tzid": "Test/Zone"},
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [[[-10, -10], [10, -10], [10, 10], [-10, 10], [-10, -10]]],
                },
            },
        ],
    }

    with tempfile.TemporaryDirectory() as tmp:
        source = Path(tmp) / "zones.json"
        dataset = Path(tmp) / "zones.tzlc"
        source.write_text(json.dumps(collection))

        code, output = _run_cli("pack", str(source), str(dataset))
        assert code == 0
        assert "Packed 1 polygons" in output
        print("✓ tzloc pack")

        code, output = _run_cli("query", "--dataset", str(dataset), "--lat", "0", "--lon", "0")
        assert code == 0
        assert json.loads(output) == ["Test/Zone"]

        code, output = _run_cli(
            "query", "--dataset", str(dataset), "--lat", "10", "--lon", "0", "--exclusive"
        )
        assert code == 0
        assert json.loads(output) == []
        print("✓ tzloc query")

        code, output = _run_cli("info", "--dataset", str(dataset))
        assert code == 0
        info = json.loads(output)
        assert info["entry_count"] == 1
        assert info["region_count"] == 1
        assert info["bounds"] == [-10.0, -10.0, 10.0, 10.0]
        print("✓ tzloc info")

        code, _ = _run_cli("query", "--lat", "0", "--lon", "0")
        assert code == 1
        code, _ = _run_cli("info", "--dataset", str(source))
        assert code == 1

        not_an_object = Path(tmp) / "list.json"
        not_an_object.write_text("[1, 2]")
        code, _ = _run_cli("pack", str(not_an_object), str(Path(tmp) / "list.tzlc"))
        assert code == 1
        print("✓ Missing dataset option, corrupt dataset and non-object GeoJSON exit with 1")


def main():
    """Run all tests."""
    print("\n🛰️  tzloc_locator.service - Service Tests")
    test_builds_once_under_concurrent_access()
    test_failure_is_cached()
    test_default_boundary_mode()
    test_config_from_yaml()
    test_config_validation()
    test_service_from_corrupt_dataset()
    test_cli_pack_query_info()
    print("\n" + "=" * 60)
    print("✅ ALL SERVICE TESTS PASSED")
    print("=" * 60)


if __name__ == "__main__":
    main()
