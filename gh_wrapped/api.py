"""Shared HTTP plumbing for the GitHub API clients.

This module provides:
- build_session(): A requests.Session with GitHub headers and auth
- raise_for_github_status(): Map an HTTP response to the GitHubError tree
- GitHubAPIClient: Base class holding the session and common settings
"""

import logging
from typing import Optional

import requests

from .constants import REQUEST_TIMEOUT, USER_AGENT
from .errors import (
    GitHubError,
    InvalidTokenError,
    RateLimitError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


def build_session(token: Optional[str] = None) -> requests.Session:
    """Create a session carrying the headers every GitHub request needs.

    Args:
        token: Personal access token (None for anonymous access)

    Returns:
        Configured requests.Session
    """
    session = requests.Session()
    session.headers.update(
        {
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
    )
    if token:
        session.headers["Authorization"] = f"Bearer {token}"
    return session


def is_rate_limited(response: requests.Response) -> bool:
    """Check whether a 403/429 response is a rate-limit rejection."""
    if response.status_code == 429:
        return True
    if response.status_code != 403:
        return False
    if response.headers.get("X-RateLimit-Remaining") == "0":
        return True
    return "rate limit" in response.text.lower()


def raise_for_github_status(
    response: requests.Response,
    what: str,
    username: str,
    authenticated: bool = False,
) -> None:
    """Raise the matching GitHubError for a failed response.

    Args:
        response: Response to check
        what: Description of the resource for the generic message
        username: Login being fetched (for not-found messages)
        authenticated: Whether the request carried a token

    Raises:
        UserNotFoundError: On 404
        InvalidTokenError: On 401
        RateLimitError: On 429, or 403 with an exhausted rate limit
        GitHubError: On any other non-2xx status
    """
    if response.ok:
        return
    status = response.status_code
    if status == 404:
        raise UserNotFoundError(username)
    if status == 401:
        raise InvalidTokenError()
    if is_rate_limited(response):
        raise RateLimitError(authenticated=authenticated)
    raise GitHubError(f"Failed to fetch {what}: HTTP {status} {response.reason}")


class GitHubAPIClient:
    """Base class for the REST and GraphQL clients.

    Attributes:
        username: Login being analysed
        token: Token used for requests (None for anonymous)
        timeout: Per-request timeout in seconds
        session: Underlying requests.Session
    """

    def __init__(
        self,
        username: str,
        token: Optional[str] = None,
        timeout: int = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.username = username
        self.token = token
        self.timeout = timeout
        self.session = session or build_session(token)

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    def _send(self, method: str, url: str, what: str, **kwargs) -> requests.Response:
        """Send a request, turning transport failures into GitHubError."""
        logger.debug("%s %s", method, url)
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise GitHubError(f"Failed to fetch {what}: {e}") from e

    def close(self) -> None:
        self.session.close()
