"""
Configuration schema for the locator service.

Defines where the packed dataset lives, the default boundary mode used by
callers that do not pass one, the R-tree fan-out and the log level.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
import yaml

from tzloc_locator.geometry import BoundaryMode
from tzloc_locator.index import DEFAULT_NODE_CAPACITY


@dataclass(frozen=True)
class LocatorConfig:
    """
    Main configuration for LocatorService.

    Loaded from YAML and validated at startup.
    Immutable after construction (frozen dataclass).
    """

    dataset_path: Path
    boundary_mode: BoundaryMode = BoundaryMode.INCLUSIVE
    node_capacity: int = DEFAULT_NODE_CAPACITY
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate locator configuration."""
        object.__setattr__(self, 'dataset_path', Path(self.dataset_path))
        object.__setattr__(self, 'boundary_mode', BoundaryMode.parse(self.boundary_mode))
        object.__setattr__(self, 'log_level', str(self.log_level).upper())

        if not self.dataset_path.exists():
            raise FileNotFoundError(
                f"Dataset not found: {self.dataset_path}\n"
                f"Pack one with 'tzloc pack' or update 'dataset_path' in config"
            )

        if not self.dataset_path.is_file():
            raise ValueError(
                f"dataset_path must be a file, got directory: {self.dataset_path}"
            )

        if not isinstance(self.node_capacity, int) or isinstance(self.node_capacity, bool):
            raise ValueError(
                f"node_capacity must be an integer, got {self.node_capacity!r}"
            )

        if not 2 <= self.node_capacity <= 256:
            raise ValueError(
                f"node_capacity must be in [2, 256], got {self.node_capacity}"
            )

        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if self.log_level not in valid_levels:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. "
                f"Must be one of {valid_levels}"
            )

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "LocatorConfig":
        """
        Load configuration from YAML file.

        Relative dataset paths resolve against the YAML file's directory.

        Example YAML:
            dataset_path: "./data/timezones.tzlc"
            boundary_mode: "inclusive"   # or "exclusive"
            node_capacity: 16
            log_level: "INFO"
        """
        yaml_path = Path(yaml_path)
        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        if "dataset_path" not in data:
            raise ValueError(f"dataset_path missing from {yaml_path}")

        dataset_path = Path(data["dataset_path"])
        if not dataset_path.is_absolute():
            dataset_path = yaml_path.parent / dataset_path

        return cls(
            dataset_path=dataset_path,
            boundary_mode=data.get("boundary_mode", BoundaryMode.INCLUSIVE.value),
            node_capacity=data.get("node_capacity", DEFAULT_NODE_CAPACITY),
            log_level=data.get("log_level", "INFO"),
        )
