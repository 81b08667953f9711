"""
Process-scoped context.

Holds the shared store, the worker lane and the flows built on them, so that
entry points (the CLI, an embedding application, tests) pass one object
around instead of reaching for module globals.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Optional

from .auth import AuthenticationFlow
from .config import WardenConfig, load_config
from .events import EventLog
from .handle import StoreHandle, process_handle
from .runner import AsyncQueryRunner
from .seed import SeedInitializer
from .store import Store
from .tokens import TicketIssuer

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """
    Shared dependencies for one process.

    The store comes from a ``StoreHandle`` and is never closed here; its
    lifetime is the handle's. The runner is owned by the context.
    """
    config: WardenConfig
    store: Store
    runner: AsyncQueryRunner
    events: EventLog
    auth: AuthenticationFlow
    seeder: SeedInitializer
    _seed_future: Optional[Future] = field(default=None, repr=False)
    _startup_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def create(
        cls,
        config: Optional[WardenConfig] = None,
        handle: Optional[StoreHandle] = None,
    ) -> "AppContext":
        """
        Build a context with all dependencies.

        Args:
            config: Optional config (loads the default config file if not provided)
            handle: Optional store handle (the process-wide handle by default)
        """
        cfg = config or load_config()
        store = (handle or process_handle()).get_store(cfg)
        runner = AsyncQueryRunner()
        events = EventLog(cfg.events_path)

        tickets = None
        if cfg.token_secret:
            tickets = TicketIssuer(cfg.token_secret, cfg.token_expiry_hours)
        else:
            logger.debug("auth.token_secret not configured; accepted logins carry no ticket")

        return cls(
            config=cfg,
            store=store,
            runner=runner,
            events=events,
            auth=AuthenticationFlow(store, runner, tickets=tickets, events=events),
            seeder=SeedInitializer(store, runner, record=cfg.seed.to_record(), events=events),
        )

    def startup(self) -> "Future[bool]":
        """Trigger the seed once; later calls return the same future."""
        with self._startup_lock:
            if self._seed_future is None:
                if self.config.seed.enabled:
                    self._seed_future = self.seeder.submit()
                else:
                    logger.info("Seeding disabled by config")
                    self._seed_future = Future()
                    self._seed_future.set_result(False)
            return self._seed_future

    def close(self) -> None:
        """Let queued work finish, then stop the worker lane."""
        self.runner.shutdown(wait=True, cancel_pending=False)
