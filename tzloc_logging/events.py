"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

Typed event names for the structured logger.

Event Naming Convention:
    <component>.<action>[.<detail>]

    component: dataset, index, locator
    action: loaded, rejected, built, ready, ...

Example Log Query (CloudWatch Insights):
    fields @timestamp, event, message, metadata.entry_count
    | filter event = "dataset.loaded"
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - dataset.*: Packed dataset loading and packing
    - index.*: Bounding-box index construction
    - locator.*: Locator service lifecycle
    """

    # ========== Dataset Events ==========
    DATASET_LOADED = "dataset.loaded"
    """Packed dataset decoded into a PolygonStore."""

    DATASET_REJECTED = "dataset.rejected"
    """Packed dataset failed validation (fatal)."""

    DATASET_PACKED = "dataset.packed"
    """Feature collection written to the packed format."""

    DATASET_FEATURE_SKIPPED = "dataset.feature_skipped"
    """Feature carried no polygon parts and produced no entries."""

    # ========== Index Events ==========
    INDEX_BUILT = "index.built"
    """Bulk-loaded R-tree constructed."""

    # ========== Locator Events ==========
    LOCATOR_READY = "locator.ready"
    """Engine constructed and ready to answer queries."""

    LOCATOR_INIT_FAILED = "locator.init_failed"
    """Engine construction failed; the service cannot answer queries."""


DATASET_EVENTS = {
    LogEvent.DATASET_LOADED,
    LogEvent.DATASET_REJECTED,
    LogEvent.DATASET_PACKED,
    LogEvent.DATASET_FEATURE_SKIPPED,
}

LOCATOR_EVENTS = {
    LogEvent.INDEX_BUILT,
    LogEvent.LOCATOR_READY,
    LogEvent.LOCATOR_INIT_FAILED,
}

ERROR_EVENTS = {
    LogEvent.DATASET_REJECTED,
    LogEvent.LOCATOR_INIT_FAILED,
}
