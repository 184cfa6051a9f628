"""
Catalog search capability for chart-matcher.

The matcher depends only on the CatalogSearch interface: "search(query,
limit) -> list of Candidate". SpotifyCatalog implements it on top of the
spotipy library.

Authentication:
    SpotifyCatalog does not manage a token lifecycle. It holds an immutable
    AccessCredential given at construction time. When the token expires the
    caller obtains a new credential and calls with_credential(), which
    returns a NEW catalog; the old one is never modified.

    SpotifyCatalog.from_client_credentials() is a convenience that runs the
    client credentials flow once through spotipy and wraps the token.

Usage:
    from chart_matcher.catalog.client import SpotifyCatalog

    catalog = SpotifyCatalog.from_client_credentials(
        client_id=config.spotify.client_id,
        client_secret=config.spotify.client_secret
    )
    candidates = catalog.search('track:"SONG" artist:"BAND"', limit=5)
"""

from abc import ABC, abstractmethod

import requests
import spotipy
from spotipy.oauth2 import SpotifyClientCredentials, SpotifyOauthError

from chart_matcher.catalog.credentials import AccessCredential
from chart_matcher.catalog.models import Candidate
from chart_matcher.core.exceptions import CatalogError
from chart_matcher.core.logger import get_logger


logger = get_logger(__name__)


# Spotify search accepts between 1 and 50 results per request
MIN_SEARCH_LIMIT = 1
MAX_SEARCH_LIMIT = 50

# Seconds to wait for a single HTTP response
DEFAULT_REQUEST_TIMEOUT = 10


class CatalogSearch(ABC):
    """
    Abstract search capability over a music catalog.

    Implementations must raise CatalogError for transport, auth and rate
    limit failures. Any other exception escaping search() is still caught
    per entry by the matcher, but loses the auth/rate-limit flags.
    """

    @abstractmethod
    def search(self, query: str, limit: int) -> list[Candidate]:
        """
        Search the catalog for tracks.

        Args:
            query: Search query string (structured or plain).
            limit: Maximum number of results to return.

        Returns:
            Candidates in the catalog's relevance order. Empty if nothing matched.

        Raises:
            CatalogError: If the search could not be performed.
        """

    def ensure_ready(self) -> None:
        """
        Check that the capability can serve searches at all.

        Called once before a batch starts. Raise CatalogError (typically with
        is_auth_error=True) to abort the batch. Default: no check.
        """


class SpotifyCatalog(CatalogSearch):
    """
    CatalogSearch backed by the Spotify Web API via spotipy.

    Attributes:
        credential: The AccessCredential used for every request.
        request_timeout: HTTP timeout in seconds.

    Rate Limiting:
        spotipy's own retries are disabled; a 429 response is raised as
        CatalogError(is_rate_limit=True) and the matcher applies its
        backoff policy.
    """

    def __init__(
        self,
        credential: AccessCredential,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    ) -> None:
        self.credential = credential
        self.request_timeout = request_timeout
        self._spotify = spotipy.Spotify(
            auth=credential.access_token,
            requests_timeout=request_timeout,
            retries=0,
            status_retries=0,
        )

    @classmethod
    def from_client_credentials(
        cls,
        client_id: str,
        client_secret: str,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    ) -> "SpotifyCatalog":
        """
        Obtain an app token with the client credentials flow.

        Args:
            client_id: Spotify application client ID from the Developer Dashboard.
            client_secret: Spotify application client secret.
            request_timeout: HTTP timeout in seconds.

        Returns:
            SpotifyCatalog holding the freshly issued credential.

        Raises:
            CatalogError: With is_auth_error=True if the credentials are rejected
                          or the token endpoint cannot be reached.
        """
        try:
            auth_manager = SpotifyClientCredentials(
                client_id=client_id,
                client_secret=client_secret,
                requests_timeout=request_timeout
            )
            token_info = auth_manager.get_access_token(as_dict=True)
        except SpotifyOauthError as e:
            raise CatalogError(
                f"Spotify authentication failed: {e}",
                details={"original_error": str(e)},
                is_auth_error=True
            ) from e
        except requests.exceptions.RequestException as e:
            raise CatalogError(
                f"Could not reach the Spotify token endpoint: {e}",
                details={"original_error": str(e)},
                is_auth_error=True
            ) from e

        if isinstance(token_info, str):
            credential = AccessCredential(access_token=token_info)
        else:
            credential = AccessCredential(
                access_token=token_info["access_token"],
                expires_at=token_info.get("expires_at"),
                token_type=token_info.get("token_type", "Bearer")
            )

        logger.debug("Obtained Spotify client credentials token")
        return cls(credential, request_timeout=request_timeout)

    def with_credential(self, credential: AccessCredential) -> "SpotifyCatalog":
        """Return a new catalog using credential. self is unchanged."""
        return SpotifyCatalog(credential, request_timeout=self.request_timeout)

    def ensure_ready(self) -> None:
        """
        Reject a missing or expired credential before any search is made.

        Raises:
            CatalogError: With is_auth_error=True.
        """
        if not self.credential.access_token:
            raise CatalogError(
                "No Spotify access token configured",
                is_auth_error=True
            )
        if self.credential.is_expired():
            raise CatalogError(
                "Spotify access token has expired",
                details={"expires_at": self.credential.expires_at},
                is_auth_error=True
            )

    def search(self, query: str, limit: int) -> list[Candidate]:
        """
        Search Spotify for tracks.

        The limit is clamped to the API's 1-50 range.

        Raises:
            CatalogError: is_rate_limit=True for HTTP 429, is_auth_error=True
                          for HTTP 401/403, plain for other API or network errors.
        """
        limit = max(MIN_SEARCH_LIMIT, min(MAX_SEARCH_LIMIT, limit))

        try:
            response = self._spotify.search(q=query, type="track", limit=limit)
        except spotipy.SpotifyException as e:
            if e.http_status == 429:
                raise CatalogError(
                    f"Rate limited while searching: {query}",
                    details={"query": query, "http_status": 429},
                    is_rate_limit=True
                ) from e
            if e.http_status in (401, 403):
                raise CatalogError(
                    f"Spotify rejected the access token: {e.msg}",
                    details={"query": query, "http_status": e.http_status},
                    is_auth_error=True
                ) from e
            raise CatalogError(
                f"Search failed: {e.msg}",
                details={"query": query, "http_status": e.http_status, "original_error": str(e)}
            ) from e
        except requests.exceptions.RequestException as e:
            raise CatalogError(
                f"Network error while searching: {e}",
                details={"query": query, "original_error": str(e)}
            ) from e

        items = ((response or {}).get("tracks") or {}).get("items") or []
        candidates = [Candidate.from_spotify_api(item) for item in items if item]
        logger.debug(f"Search '{query}' returned {len(candidates)} candidate(s)")
        return candidates
