"""
Warden: local credential store and login check

Persists user credential profiles in a single SQLite table and answers one
question: does this login ID / secret pair match a stored record?

Architecture:
    caller → AuthenticationFlow → AsyncQueryRunner (one worker lane) → Store

Components:
    - Store: SQLite-backed CRUD over UserRecord, keyed by login ID
    - StoreHandle: builds exactly one Store per process, thread-safely
    - AsyncQueryRunner: FIFO single-thread lane for all store access
    - AuthenticationFlow: lookup + secret comparison → Accepted / Rejected
    - SeedInitializer: idempotent creation of the default "admin" record
    - AppContext: wires the above together and runs the seed at startup

Usage:
    from warden.context import AppContext

    ctx = AppContext.create()
    ctx.startup().result()
    result = await ctx.auth.authenticate("admin", "admin")
    result.accepted  # True
"""

__version__ = "0.1.0"

from .auth import AuthenticationFlow, AuthResult, AuthStatus
from .context import AppContext
from .errors import (
    ConfigError,
    DuplicateKey,
    NotFound,
    StorageFailure,
    ValidationError,
    WardenError,
)
from .handle import StoreHandle, process_handle
from .runner import AsyncQueryRunner
from .schema import SCHEMA_VERSION, UserRecord
from .seed import SeedInitializer
from .store import Store

__all__ = [
    "AppContext",
    "AsyncQueryRunner",
    "AuthenticationFlow",
    "AuthResult",
    "AuthStatus",
    "ConfigError",
    "DuplicateKey",
    "NotFound",
    "SCHEMA_VERSION",
    "SeedInitializer",
    "StorageFailure",
    "Store",
    "StoreHandle",
    "UserRecord",
    "ValidationError",
    "WardenError",
    "process_handle",
]
