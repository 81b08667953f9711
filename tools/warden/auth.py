"""Credential check: resolve a record by login ID, compare the secret.

The lookup runs on the ``AsyncQueryRunner`` lane; the comparison happens when
the lookup completes. Unknown login IDs and wrong secrets produce the same
``AuthResult`` so callers cannot tell them apart. A storage failure during the
lookup is reported as a rejection flagged ``internal_error`` ("try again"),
never as an unknown user.
"""

from __future__ import annotations

import asyncio
import hmac
import logging
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .errors import RunnerShutDown, StorageFailure, ValidationError
from .events import EventLog
from .runner import AsyncQueryRunner
from .schema import UserRecord
from .store import Store
from .tokens import TicketIssuer

logger = logging.getLogger(__name__)


class AuthStatus(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class AuthResult:
    """Terminal outcome of one authentication attempt.

    Attributes:
        status: Accepted or rejected.
        internal_error: The decision could not be made because the store
                        failed; the caller should offer a retry.
        token: Signed login ticket, present only when accepted and a ticket
               issuer is configured.
    """

    status: AuthStatus
    internal_error: bool = False
    token: Optional[str] = field(default=None, repr=False)

    @property
    def accepted(self) -> bool:
        return self.status is AuthStatus.ACCEPTED

    @property
    def retryable(self) -> bool:
        return self.internal_error

    @classmethod
    def rejected(cls, internal_error: bool = False) -> "AuthResult":
        return cls(status=AuthStatus.REJECTED, internal_error=internal_error)


def normalize_credentials(login_id: Optional[str], secret: Optional[str]) -> tuple[str, str]:
    """Trim both credentials; raise ``ValidationError`` if either is empty."""
    login = (login_id or "").strip()
    password = (secret or "").strip()
    if not login or not password:
        raise ValidationError("Please enter login credentials")
    return login, password


def secrets_match(supplied: str, stored: str) -> bool:
    return hmac.compare_digest(supplied.encode("utf-8"), stored.encode("utf-8"))


class AuthenticationFlow:
    """Orchestrates lookup and comparison for one credential pair at a time.

    Args:
        store: Record store to resolve login IDs against.
        runner: Worker lane that executes the lookup.
        tickets: Optional issuer; accepted results then carry a ticket.
        events: Optional audit log for accept/reject decisions.
    """

    def __init__(
        self,
        store: Store,
        runner: AsyncQueryRunner,
        tickets: Optional[TicketIssuer] = None,
        events: Optional[EventLog] = None,
    ) -> None:
        self.store = store
        self.runner = runner
        self.tickets = tickets
        self.events = events or EventLog(None)

    def submit(self, login_id: str, secret: str) -> "Future[AuthResult]":
        """Start an attempt and return a future for its result.

        Empty credentials are rejected here, before anything is queued. If the
        runner is shut down the returned future already holds a rejection
        flagged ``internal_error``.

        Raises:
            ValidationError: Login ID or secret is empty after trimming.
        """
        login, password = normalize_credentials(login_id, secret)
        outcome: "Future[AuthResult]" = Future()

        def _complete(lookup: "Future[Optional[UserRecord]]") -> None:
            if lookup.cancelled():
                outcome.cancel()
                return
            if not outcome.set_running_or_notify_cancel():
                return
            try:
                outcome.set_result(self._decide(login, password, lookup))
            except Exception as e:
                outcome.set_exception(e)

        try:
            lookup = self.runner.submit_with_callback(self.store.get_by_login_id, _complete, login)
        except RunnerShutDown as e:
            logger.error(f"Lookup for '{login}' not queued: {e}")
            self.events.log_event("login_rejected", login_id=login, reason="storage")
            outcome.set_result(AuthResult.rejected(internal_error=True))
            return outcome
        outcome.add_done_callback(lambda done: done.cancelled() and lookup.cancel())
        return outcome

    async def authenticate(self, login_id: str, secret: str) -> AuthResult:
        """Authenticate and resume on the caller's event loop with the result."""
        try:
            future = self.submit(login_id, secret)
        except ValidationError:
            logger.info("Rejected attempt with empty credentials")
            self.events.log_event("login_rejected", login_id=(login_id or "").strip(), reason="validation")
            return AuthResult.rejected()
        return await asyncio.wrap_future(future)

    def _decide(
        self, login: str, password: str, lookup: "Future[Optional[UserRecord]]"
    ) -> AuthResult:
        try:
            record = lookup.result()
        except StorageFailure as e:
            logger.error(f"Lookup for '{login}' failed: {e}")
            self.events.log_event("login_rejected", login_id=login, reason="storage")
            return AuthResult.rejected(internal_error=True)

        if record is None or not secrets_match(password, record.secret):
            logger.info(f"Rejected login for '{login}'")
            self.events.log_event("login_rejected", login_id=login, reason="credentials")
            return AuthResult.rejected()

        token = self.tickets.issue(login) if self.tickets else None
        logger.info(f"Accepted login for '{login}'")
        self.events.log_event("login_accepted", login_id=login)
        return AuthResult(status=AuthStatus.ACCEPTED, token=token)
