"""Typed failures raised by the record store and its collaborators."""


class WardenError(Exception):
    """Base class for every failure raised by the warden package."""


class ValidationError(WardenError, ValueError):
    """Input rejected before any store access (e.g. empty credentials)."""


class NotFound(WardenError, LookupError):
    """Update or delete targeted a login ID that is not stored."""

    def __init__(self, login_id: str):
        super().__init__(f"No record for login ID '{login_id}'")
        self.login_id = login_id


class DuplicateKey(WardenError):
    """Insert collided with an existing login ID."""

    def __init__(self, login_id: str):
        super().__init__(f"Login ID '{login_id}' already exists")
        self.login_id = login_id


class StorageFailure(WardenError):
    """The SQLite backing file could not be read or written."""


class ConfigError(WardenError):
    """Configuration file is unreadable or fails schema validation."""


class RunnerShutDown(WardenError, RuntimeError):
    """Work was submitted to a worker lane that has been shut down."""
