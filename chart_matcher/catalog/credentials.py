"""
Immutable access credentials for catalog searches.

An AccessCredential is a value, not a session: it is created once, passed
explicitly to the catalog, and replaced (never modified) when the token is
refreshed. Anything holding a credential can therefore share it across
threads without locking.
"""

import time
from dataclasses import dataclass


# Tokens are treated as expired this many seconds before their real expiry
DEFAULT_EXPIRY_MARGIN = 60


@dataclass(frozen=True)
class AccessCredential:
    """
    Bearer token for the catalog API.

    Attributes:
        access_token: The token string.
        expires_at: Unix timestamp at which the token expires, or None if
                    the expiry is unknown.
        token_type: Authorization scheme. Default: "Bearer".
    """

    access_token: str
    expires_at: float | None = None
    token_type: str = "Bearer"

    def is_expired(self, now: float | None = None, margin: float = DEFAULT_EXPIRY_MARGIN) -> bool:
        """
        Check whether the token is (about to be) expired.

        Args:
            now: Current Unix time. Defaults to time.time().
            margin: Seconds before expires_at at which the token already
                    counts as expired.

        Returns:
            True if the token is empty or expires within margin seconds.
            False if the expiry is unknown.
        """
        if not self.access_token:
            return True
        if self.expires_at is None:
            return False
        if now is None:
            now = time.time()
        return now >= self.expires_at - margin

    def refreshed(
        self,
        access_token: str,
        expires_in: float | None = None,
        now: float | None = None
    ) -> "AccessCredential":
        """Return a new credential carrying a fresh token. self is unchanged."""
        if now is None:
            now = time.time()
        expires_at = now + expires_in if expires_in is not None else None
        return AccessCredential(
            access_token=access_token,
            expires_at=expires_at,
            token_type=self.token_type,
        )

    def authorization_header(self) -> dict[str, str]:
        """HTTP Authorization header for this credential."""
        return {"Authorization": f"{self.token_type} {self.access_token}"}

    def __repr__(self) -> str:
        # Never print the token itself
        return f"AccessCredential(token_type={self.token_type!r}, expires_at={self.expires_at!r})"
