"""
tzloc_dataset - Packed dataset format

This package owns the binary format the locator is built from: the
versioned schema, the strict loader used at startup and the offline packer
that turns a GeoJSON FeatureCollection into a packed blob.

Architecture:
- format: schema constants, error types, encoder
- DatasetLoader: bytes -> PolygonStore (fatal on any defect)
- packer: FeatureCollection -> entries -> bytes
"""

from tzloc_dataset.format import (
    MAGIC,
    SCHEMA_VERSION,
    DatasetError,
    SchemaVersionError,
    TruncatedDatasetError,
    encode_entries,
)
from tzloc_dataset.loader import DatasetLoader
from tzloc_dataset.packer import (
    PackingError,
    entries_from_feature_collection,
    extract_region_id,
    pack_geojson,
)

__all__ = [
    "MAGIC",
    "SCHEMA_VERSION",
    "DatasetError",
    "SchemaVersionError",
    "TruncatedDatasetError",
    "encode_entries",
    "DatasetLoader",
    "PackingError",
    "entries_from_feature_collection",
    "extract_region_id",
    "pack_geojson",
]
