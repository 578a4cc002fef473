"""Exceptions raised by GitHub Wrapped.

Every fetch failure is a GitHubError. The base class derives from ValueError
so callers that already treat bad input as ValueError keep working.
"""

from .constants import (
    RATE_LIMIT_ANONYMOUS,
    RATE_LIMIT_AUTHENTICATED,
    TOKEN_NEW_URL,
    TOKEN_URL,
)


class GitHubError(ValueError):
    """Base class for errors talking to the GitHub API."""


class UserNotFoundError(GitHubError):
    """The requested user does not exist."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(
            f'GitHub user "{username}" not found. '
            "Please check the username and try again."
        )


class InvalidTokenError(GitHubError):
    """The supplied token was rejected (HTTP 401 / Bad credentials)."""

    def __init__(self):
        super().__init__(
            "Invalid GitHub token. Please check your token and try again.\n\n"
            f"Get a new token at: {TOKEN_URL}\n"
            "Required scope: read:user"
        )


class AuthenticationRequiredError(GitHubError):
    """Contribution data is only available with a token."""

    def __init__(self):
        super().__init__(
            "Authentication required: GitHub's API only returns contribution "
            "data to authenticated requests.\n\n"
            f"Create a token with the read:user scope at:\n  {TOKEN_NEW_URL}"
        )


class RateLimitError(GitHubError):
    """The API refused the request because the rate limit is exhausted."""

    def __init__(self, authenticated: bool = False):
        self.authenticated = authenticated
        if authenticated:
            message = "GitHub API rate limit exceeded. Please try again later."
        else:
            message = (
                "GitHub API rate limit exceeded. "
                f"Without a token you get {RATE_LIMIT_ANONYMOUS} requests/hour, "
                f"with one {RATE_LIMIT_AUTHENTICATED:,}."
            )
        super().__init__(message)


class NoActivityError(GitHubError):
    """The user has no repositories or commits in the requested window."""


class ExportError(Exception):
    """Rendering or writing an export file failed."""
