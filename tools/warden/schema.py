"""Fixed identity and shape of the single user table.

The field set is versioned through ``SCHEMA_VERSION``, which is stamped into
the database file with ``PRAGMA user_version``. Changing the columns requires
bumping the version and adding a migration step; the store refuses to open a
file stamped with any other version.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .errors import ValidationError

DB_NAME = "user_db"
USER_TABLE = "user_table"
SCHEMA_VERSION = 1

COLUMNS = ("login_id", "password", "full_name", "contact")

USER_TABLE_DDL = f"""
CREATE TABLE IF NOT EXISTS {USER_TABLE} (
    login_id TEXT PRIMARY KEY NOT NULL,
    password TEXT NOT NULL,
    full_name TEXT,
    contact TEXT
);
"""


@dataclass(frozen=True)
class UserRecord:
    """A stored credential profile.

    ``secret`` is kept in clear text and left out of ``repr`` so records can
    be logged safely.
    """

    login_id: str
    secret: str = field(repr=False)
    full_name: Optional[str] = None
    contact: Optional[str] = None

    def as_row(self) -> tuple:
        return (self.login_id, self.secret, self.full_name, self.contact)

    @classmethod
    def from_row(cls, row) -> "UserRecord":
        return cls(
            login_id=row["login_id"],
            secret=row["password"],
            full_name=row["full_name"],
            contact=row["contact"],
        )


def validate_record(record: UserRecord) -> None:
    """Raise ``ValidationError`` if the record cannot be stored."""
    if not isinstance(record.login_id, str) or not record.login_id.strip():
        raise ValidationError("login_id must be a non-empty string")
    if record.login_id != record.login_id.strip():
        raise ValidationError("login_id must not have leading or trailing whitespace")
    if not isinstance(record.secret, str):
        raise ValidationError("secret must be a string")
