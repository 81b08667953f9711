"""Login tickets handed to the caller after a successful authentication.

Uses PyJWT with the HS256 algorithm. A ticket carries the login ID and an
expiry timestamp; nothing is stored server-side.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt

ALGORITHM = "HS256"


class TicketIssuer:
    """Signs and verifies login tickets with one shared secret.

    Args:
        secret: Key used for HS256 signing and verification.
        expiry_hours: Ticket validity duration in hours (default 24).
    """

    def __init__(self, secret: str, expiry_hours: int = 24) -> None:
        if not secret:
            raise ValueError("TicketIssuer requires a non-empty secret")
        self._secret = secret
        self._expiry_hours = expiry_hours

    def issue(self, login_id: str) -> str:
        """Create a signed ticket for ``login_id``."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": login_id,
            "iat": now,
            "exp": now + timedelta(hours=self._expiry_hours),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, ticket: str) -> str | None:
        """Return the login ID in a valid ticket.

        Returns ``None`` if the ticket is expired, malformed, or has an
        invalid signature.
        """
        try:
            payload = jwt.decode(ticket, self._secret, algorithms=[ALGORITHM])
            return payload["sub"]
        except (jwt.ExpiredSignatureError, jwt.InvalidTokenError, KeyError):
            return None
