"""
Locator Service - exactly-once construction of the point location engine.

The engine is an explicit dependency: build one LocatorService at startup
and pass it to every caller. Construction runs at most once per service,
either through initialize() or on first access to .engine.

Thread Safety:
- Double-checked locking around the single construction
- Concurrent first access blocks until the one build finishes
- A failed build is remembered and re-raised; it is never retried
- After construction, queries run lock-free on immutable data
"""

import threading
from typing import Callable, List, Optional

from tzloc_locator.config import LocatorConfig
from tzloc_locator.engine import PointLocationEngine
from tzloc_locator.geometry import BoundaryMode
from tzloc_logging import LogEvent, StructuredLogger, create_logger


EngineFactory = Callable[[], PointLocationEngine]


class LocatorService:
    """
    Shared handle to a lazily built PointLocationEngine.

    Usage:
        config = LocatorConfig.from_yaml(Path("config/locator.yaml"))
        service = LocatorService.from_config(config)
        service.initialize()            # optional, fail fast at startup

        service.query(52.52, 13.40)     # ['Europe/Berlin']
    """

    def __init__(
        self,
        factory: EngineFactory,
        default_mode: BoundaryMode = BoundaryMode.INCLUSIVE,
        logger: Optional[StructuredLogger] = None
    ):
        """
        Args:
            factory: Zero-argument callable building the engine
            default_mode: Boundary mode used when a query passes none
            logger: Structured logger (default: tzloc.service)
        """
        self._factory = factory
        self.default_mode = BoundaryMode.parse(default_mode)
        self.logger = logger or create_logger("service")
        self._lock = threading.Lock()
        self._engine: Optional[PointLocationEngine] = None
        self._failure: Optional[BaseException] = None

    @classmethod
    def from_config(cls, config: LocatorConfig) -> "LocatorService":
        """Service reading the packed dataset named by the config."""
        from tzloc_dataset.loader import DatasetLoader

        logger = create_logger("service", level=config.logging_level)
        loader = DatasetLoader(logger=create_logger("loader", level=config.logging_level))

        def build() -> PointLocationEngine:
            store = loader.from_path(config.dataset_path)
            return PointLocationEngine.from_store(store, node_capacity=config.node_capacity)

        return cls(build, default_mode=config.boundary_mode, logger=logger)

    @property
    def is_ready(self) -> bool:
        return self._engine is not None

    def initialize(self) -> PointLocationEngine:
        """
        Build the engine if not built yet.

        Raises:
            Whatever the factory raised, on this and every later call
        """
        engine = self._engine
        if engine is not None:
            return engine

        with self._lock:
            if self._engine is not None:
                return self._engine
            if self._failure is not None:
                raise self._failure.with_traceback(None)

            try:
                engine = self._factory()
            except Exception as e:
                self._failure = e
                self.logger.error(
                    event=LogEvent.LOCATOR_INIT_FAILED,
                    message="Locator construction failed",
                    exc_info=e,
                )
                raise

            self.logger.info(
                event=LogEvent.INDEX_BUILT,
                message="Bounding-box index built",
                metadata={
                    'entry_count': len(engine.index),
                    'height': engine.index.height,
                    'node_capacity': engine.index.node_capacity,
                },
            )
            self.logger.info(
                event=LogEvent.LOCATOR_READY,
                message="Locator ready",
                metadata={
                    'entry_count': len(engine),
                    'region_count': len(engine.region_ids()),
                },
            )
            self._engine = engine
            return engine

    @property
    def engine(self) -> PointLocationEngine:
        return self.initialize()

    def query(
        self,
        latitude: float,
        longitude: float,
        boundary_mode: Optional[BoundaryMode] = None
    ) -> List[str]:
        """Engine query using the service default mode when none is given."""
        return self.engine.query(latitude, longitude, boundary_mode or self.default_mode)

    def query_lon_lat(
        self,
        longitude: float,
        latitude: float,
        boundary_mode: Optional[BoundaryMode] = None
    ) -> List[str]:
        return self.query(latitude, longitude, boundary_mode)
