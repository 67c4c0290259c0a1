"""
Packed Dataset Format
=====================

Bounded Context: Binary schema shared by the packer and the loader

Layout (little-endian):

    header   : magic b"TZLC" | uint16 schema version | uint16 reserved (0)
    polygons : uint64 count, then per polygon:
                 uint64 n, n x (float64 lon, float64 lat)        exterior
                 uint64 holes, per hole: uint64 n, n x (lon, lat)
    regions  : uint64 count, then per id: uint32 length + UTF-8 bytes

Region ids are positionally parallel to polygons. Nothing may follow the
region list.
"""

import struct
from typing import Iterable, List

import numpy as np

from tzloc_locator.geometry import RegionPolygon


MAGIC = b"TZLC"
SCHEMA_VERSION = 1

HEADER = struct.Struct("<4sHH")
COUNT = struct.Struct("<Q")
STRING_LENGTH = struct.Struct("<I")
COORDINATE_DTYPE = np.dtype("<f8")
VERTEX_SIZE = 2 * COORDINATE_DTYPE.itemsize


class DatasetError(ValueError):
    """Packed dataset cannot be decoded into a valid PolygonStore."""
    pass


class TruncatedDatasetError(DatasetError):
    """Buffer ended before the structure it declares."""
    pass


class SchemaVersionError(DatasetError):
    """Magic tag or schema version does not match this reader."""
    pass


def _encode_ring(ring: np.ndarray) -> bytes:
    coordinates = np.ascontiguousarray(ring, dtype=COORDINATE_DTYPE)
    return COUNT.pack(len(coordinates)) + coordinates.tobytes()


def encode_entries(entries: Iterable[RegionPolygon]) -> bytes:
    """
    Serialize entries into the packed format.

    Rings are written as stored (closed and oriented by RegionPolygon).

    Returns:
        Packed dataset bytes, readable by DatasetLoader.load()
    """
    entries = list(entries)
    chunks: List[bytes] = [HEADER.pack(MAGIC, SCHEMA_VERSION, 0)]

    chunks.append(COUNT.pack(len(entries)))
    for entry in entries:
        chunks.append(_encode_ring(entry.exterior))
        chunks.append(COUNT.pack(len(entry.holes)))
        chunks.extend(_encode_ring(hole) for hole in entry.holes)

    chunks.append(COUNT.pack(len(entries)))
    for entry in entries:
        encoded = entry.region_id.encode("utf-8")
        chunks.append(STRING_LENGTH.pack(len(encoded)))
        chunks.append(encoded)

    return b"".join(chunks)
