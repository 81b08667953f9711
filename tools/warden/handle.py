"""Exactly-once construction of the shared ``Store``."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .config import WardenConfig
from .store import Store

logger = logging.getLogger(__name__)


def _open_store(config: WardenConfig) -> Store:
    return Store(db_path=config.db_path, timeout=config.store_timeout)


class StoreHandle:
    """Lazily builds one ``Store`` and hands out the same instance afterwards.

    The fast path reads the built store without locking; the first callers
    race on ``_lock`` and re-check before constructing, so concurrent first
    access still constructs exactly once. A factory that raises leaves the
    handle uninitialized and the next call tries again.

    Args:
        factory: Builds a store from a config. Defaults to a SQLite store at
                 ``config.db_path``.
    """

    def __init__(self, factory: Callable[[WardenConfig], Store] = _open_store) -> None:
        self._factory = factory
        self._lock = threading.Lock()
        self._store: Optional[Store] = None
        self._config: Optional[WardenConfig] = None

    @property
    def is_initialized(self) -> bool:
        return self._store is not None

    def get_store(self, config: Optional[WardenConfig] = None) -> Store:
        """Return the shared store, building it on first use."""
        store = self._store
        if store is not None:
            self._warn_if_reconfigured(config)
            return store

        with self._lock:
            if self._store is None:
                cfg = config or WardenConfig()
                logger.info(f"Initializing store: {cfg.db_path}")
                self._store = self._factory(cfg)
                self._config = cfg
                return self._store

        self._warn_if_reconfigured(config)
        return self._store

    def _warn_if_reconfigured(self, config: Optional[WardenConfig]) -> None:
        if config is not None and self._config is not None and config.db_path != self._config.db_path:
            logger.warning(
                f"Store already open at {self._config.db_path}; ignoring request for {config.db_path}"
            )

    def close(self) -> None:
        """Close the store if it was built. Used at teardown."""
        with self._lock:
            if self._store is not None:
                self._store.close()
                self._store = None
                self._config = None


_process_handle = StoreHandle()


def process_handle() -> StoreHandle:
    """The handle shared by every context created in this process."""
    return _process_handle
