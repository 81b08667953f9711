"""First-run creation of the well-known default record."""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Future
from typing import Optional

from .errors import DuplicateKey
from .events import EventLog
from .runner import AsyncQueryRunner
from .schema import UserRecord
from .store import Store

logger = logging.getLogger(__name__)

DEFAULT_SEED_RECORD = UserRecord(
    login_id="admin",
    secret="admin",
    full_name="Admin User",
    contact="admin@example.com",
)


class SeedInitializer:
    """Ensures the default record exists, through the worker lane.

    Safe to run any number of times: an existing record is left untouched and
    a ``DuplicateKey`` from a concurrent seed counts as already seeded.
    """

    def __init__(
        self,
        store: Store,
        runner: AsyncQueryRunner,
        record: UserRecord = DEFAULT_SEED_RECORD,
        events: Optional[EventLog] = None,
    ) -> None:
        self.store = store
        self.runner = runner
        self.record = record
        self.events = events or EventLog(None)

    def seed_now(self) -> bool:
        """Create the record if missing. Returns True if it was created.

        Blocks on the store; ``submit`` and ``run`` execute this on the lane.
        """
        login_id = self.record.login_id
        if self.store.get_by_login_id(login_id) is not None:
            logger.debug(f"Seed record '{login_id}' already present")
            return False
        try:
            self.store.insert(self.record)
        except DuplicateKey:
            logger.debug(f"Seed record '{login_id}' inserted concurrently")
            return False
        logger.info(f"Seeded default record '{login_id}'")
        self.events.log_event("seed_created", login_id=login_id)
        return True

    def submit(self) -> "Future[bool]":
        return self.runner.submit(self.seed_now)

    async def run(self) -> bool:
        return await self.runner.run(self.seed_now)
