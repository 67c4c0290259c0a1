"""
Dataset Packer - GeoJSON FeatureCollection to packed bytes.

Data preparation that runs offline, before deployment. Each feature
carries a region id property and a Polygon or MultiPolygon geometry;
MultiPolygon parts become separate entries sharing the region id.

Any malformed feature aborts packing with PackingError.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from tzloc_locator.geometry import RegionPolygon
from tzloc_logging import LogEvent, StructuredLogger, create_logger

from .format import encode_entries


REGION_ID_PROPERTIES = ("tzid", "TZID", "name")


class PackingError(ValueError):
    """Feature collection cannot be packed."""
    pass


def extract_region_id(properties: Optional[Dict[str, Any]]) -> Optional[str]:
    """First non-empty region id among the accepted property aliases."""
    if not isinstance(properties, dict):
        return None
    for key in REGION_ID_PROPERTIES:
        value = properties.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _polygon_entry(region_id: str, rings: Any, where: str) -> RegionPolygon:
    if not isinstance(rings, list) or not rings:
        raise PackingError(f"{where}: polygon has no rings")
    try:
        return RegionPolygon(
            region_id=region_id,
            exterior=rings[0],
            holes=tuple(rings[1:]),
        )
    except ValueError as e:
        raise PackingError(f"{where}: {e}") from e


def entries_from_feature_collection(
    collection: Dict[str, Any],
    logger: Optional[StructuredLogger] = None
) -> List[RegionPolygon]:
    """
    Expand a FeatureCollection into dataset entries.

    Raises:
        PackingError: Not a FeatureCollection, feature without region id,
            unsupported geometry type or malformed rings
    """
    if not isinstance(collection, dict):
        raise PackingError("input is not a GeoJSON object")
    if collection.get("type") != "FeatureCollection" or not isinstance(
        collection.get("features"), list
    ):
        raise PackingError("input is not a GeoJSON FeatureCollection")

    entries: List[RegionPolygon] = []
    for number, feature in enumerate(collection["features"]):
        if not isinstance(feature, dict):
            raise PackingError(f"feature {number}: not a GeoJSON object")
        region_id = extract_region_id(feature.get("properties"))
        if region_id is None:
            raise PackingError(
                f"feature {number}: no region id in properties {REGION_ID_PROPERTIES}"
            )

        where = f"feature {number} ({region_id})"
        geometry = feature.get("geometry")
        if not isinstance(geometry, dict):
            raise PackingError(f"{where}: geometry is not a GeoJSON object")
        geometry_type = geometry.get("type")
        coordinates = geometry.get("coordinates")

        if geometry_type == "Polygon":
            entries.append(_polygon_entry(region_id, coordinates, where))
        elif geometry_type == "MultiPolygon":
            if not isinstance(coordinates, list):
                raise PackingError(f"{where}: MultiPolygon coordinates must be a list")
            if not coordinates and logger:
                logger.warning(
                    event=LogEvent.DATASET_FEATURE_SKIPPED,
                    message=f"Empty MultiPolygon for {region_id}",
                    metadata={'feature': number, 'region_id': region_id},
                )
            for part, rings in enumerate(coordinates):
                entries.append(_polygon_entry(region_id, rings, f"{where} part {part}"))
        else:
            raise PackingError(f"{where}: unsupported geometry type {geometry_type!r}")

    return entries


def pack_geojson(
    source: Path,
    destination: Path,
    logger: Optional[StructuredLogger] = None
) -> int:
    """
    Pack a GeoJSON file into a dataset file.

    Returns:
        Number of polygon entries written

    Raises:
        PackingError: Unreadable source or malformed features
    """
    logger = logger or create_logger("packer")
    source, destination = Path(source), Path(destination)

    try:
        with open(source, encoding="utf-8") as f:
            collection = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise PackingError(f"cannot read {source}: {e}") from e

    entries = entries_from_feature_collection(collection, logger=logger)
    data = encode_entries(entries)
    destination.write_bytes(data)

    logger.info(
        event=LogEvent.DATASET_PACKED,
        message=f"Packed {len(entries)} polygons to {destination}",
        metadata={
            'entry_count': len(entries),
            'region_count': len({entry.region_id for entry in entries}),
            'size_bytes': len(data),
        },
    )
    return len(entries)
