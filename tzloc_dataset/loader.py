"""
Dataset Loader - packed bytes to PolygonStore.

Decoding is strict: any structural problem is fatal and surfaces once, at
startup, as a DatasetError. There is no partial load.

Validation:
- Magic tag and schema version
- Truncation before any declared structure
- Trailing bytes after the region list
- Polygon count == region id count
- Ring shape (>= 3 distinct vertices, finite coordinates)

Geometry correction (closure + orientation) happens in RegionPolygon.
"""

from importlib import resources
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from tzloc_locator.geometry import RegionPolygon
from tzloc_locator.store import PolygonStore
from tzloc_logging import LogEvent, StructuredLogger, create_logger

from .format import (
    COORDINATE_DTYPE,
    COUNT,
    HEADER,
    MAGIC,
    SCHEMA_VERSION,
    STRING_LENGTH,
    VERTEX_SIZE,
    DatasetError,
    SchemaVersionError,
    TruncatedDatasetError,
)


RawPolygon = Tuple[np.ndarray, List[np.ndarray]]


class _BufferReader:
    """Sequential reader over an immutable byte buffer."""

    def __init__(self, data: bytes):
        self._data = memoryview(data)
        self.offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self.offset

    def _require(self, size: int, what: str) -> None:
        if size > self.remaining:
            raise TruncatedDatasetError(
                f"truncated dataset: {what} needs {size} bytes at offset "
                f"{self.offset}, {self.remaining} left"
            )

    def unpack(self, layout, what: str) -> tuple:
        self._require(layout.size, what)
        values = layout.unpack_from(self._data, self.offset)
        self.offset += layout.size
        return values

    def count(self, what: str) -> int:
        return self.unpack(COUNT, what)[0]

    def ring(self, what: str) -> np.ndarray:
        vertex_count = self.count(f"{what} vertex count")
        self._require(vertex_count * VERTEX_SIZE, f"{what} coordinates")
        coordinates = np.frombuffer(
            self._data,
            dtype=COORDINATE_DTYPE,
            count=vertex_count * 2,
            offset=self.offset,
        ).reshape(vertex_count, 2)
        self.offset += vertex_count * VERTEX_SIZE
        return coordinates

    def string(self, what: str) -> str:
        length = self.unpack(STRING_LENGTH, f"{what} length")[0]
        self._require(length, what)
        raw = bytes(self._data[self.offset:self.offset + length])
        self.offset += length
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DatasetError(f"{what} is not valid UTF-8") from e


class DatasetLoader:
    """
    Decodes the packed dataset format into a validated PolygonStore.

    Usage:
        loader = DatasetLoader()
        store = loader.from_path(Path("./data/timezones.tzlc"))

        # Blob shipped inside a package
        store = loader.from_resource("my_app.data", "timezones.tzlc")
    """

    def __init__(self, logger: Optional[StructuredLogger] = None):
        self.logger = logger or create_logger("loader")

    def load(self, data: bytes) -> PolygonStore:
        """
        Decode a packed dataset.

        Raises:
            DatasetError: On any structural or geometric problem (fatal)
        """
        try:
            store = self._decode(data)
        except DatasetError as e:
            self.logger.error(
                event=LogEvent.DATASET_REJECTED,
                message="Packed dataset rejected",
                metadata={'size_bytes': len(data)},
                exc_info=e,
            )
            raise

        self.logger.info(
            event=LogEvent.DATASET_LOADED,
            message=f"Loaded {len(store)} polygons",
            metadata={
                'entry_count': len(store),
                'region_count': len(store.region_ids()),
                'size_bytes': len(data),
            },
        )
        return store

    def from_path(self, path: Path) -> PolygonStore:
        """Read and decode a packed dataset file."""
        return self.load(Path(path).read_bytes())

    def from_resource(self, package: str, resource: str) -> PolygonStore:
        """Read and decode a packed dataset shipped as package data."""
        return self.load(resources.files(package).joinpath(resource).read_bytes())

    def _decode(self, data: bytes) -> PolygonStore:
        reader = _BufferReader(data)

        magic, version, _reserved = reader.unpack(HEADER, "header")
        if magic != MAGIC:
            raise SchemaVersionError(f"bad magic {magic!r}, expected {MAGIC!r}")
        if version != SCHEMA_VERSION:
            raise SchemaVersionError(
                f"unsupported schema version {version}, expected {SCHEMA_VERSION}"
            )

        polygons = self._read_polygons(reader)
        region_ids = [
            reader.string(f"region id {position}")
            for position in range(reader.count("region count"))
        ]

        if reader.remaining:
            raise DatasetError(f"{reader.remaining} trailing bytes after region list")

        if len(polygons) != len(region_ids):
            raise DatasetError(
                f"polygon count {len(polygons)} does not match "
                f"region id count {len(region_ids)}"
            )

        entries = []
        for position, ((exterior, holes), region_id) in enumerate(zip(polygons, region_ids)):
            try:
                entries.append(RegionPolygon(region_id, exterior, tuple(holes)))
            except ValueError as e:
                raise DatasetError(f"polygon {position} ({region_id!r}): {e}") from e
        return PolygonStore(entries)

    @staticmethod
    def _read_polygons(reader: _BufferReader) -> List[RawPolygon]:
        polygons = []
        for position in range(reader.count("polygon count")):
            exterior = reader.ring(f"polygon {position} exterior")
            holes = [
                reader.ring(f"polygon {position} hole {hole}")
                for hole in range(reader.count(f"polygon {position} hole count"))
            ]
            polygons.append((exterior, holes))
        return polygons
