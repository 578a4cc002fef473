"""Fetch orchestration for GitHub Wrapped.

This module provides:
- create_client(): Pick the REST or GraphQL client for a backend name
- fetch_activity(): Run the contract calls (in parallel) into ActivityData
- fetch_with_token_retry(): Ask for a token and retry when rate limited
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Union

from .constants import MAX_FETCH_WORKERS
from .errors import (
    AuthenticationRequiredError,
    GitHubError,
    InvalidTokenError,
    RateLimitError,
)
from .graphql import GraphQLClient
from .models import ActivityData
from .rest import RestClient

logger = logging.getLogger(__name__)

Client = Union[RestClient, GraphQLClient]
ProgressCallback = Callable[[str], None]


def create_client(
    username: str,
    token: Optional[str] = None,
    backend: str = "auto",
    year: Optional[int] = None,
    **kwargs,
) -> Client:
    """Create the API client for a backend.

    Args:
        username: Login to analyse
        token: Personal access token (None for anonymous access)
        backend: "auto", "rest" or "graphql"; auto picks GraphQL with a token
        year: Year the GraphQL client queries for profile and languages
        **kwargs: Passed through to the client (timeout, session, page caps)

    Returns:
        RestClient or GraphQLClient

    Raises:
        ValueError: If the backend name is unknown
    """
    if backend == "auto":
        backend = "graphql" if token else "rest"

    if backend == "graphql":
        logger.debug("Using GraphQL backend for %s", username)
        kwargs.pop("max_pages", None)
        kwargs.pop("max_commit_repos", None)
        return GraphQLClient(username, token=token, year=year, **kwargs)
    if backend == "rest":
        logger.debug("Using REST backend for %s", username)
        return RestClient(username, token=token, **kwargs)
    raise ValueError(f"Unknown backend '{backend}'")


def fetch_activity(
    client: Client,
    year: int,
    progress: Optional[ProgressCallback] = None,
) -> ActivityData:
    """Fetch everything the analytics need for one year.

    The profile and repository list are fetched first, since both clients
    cache them and the remaining calls depend on them. The independent calls
    then run on a small thread pool. The contribution calendar comes last
    because the REST client derives it from the cached commits.

    Args:
        client: REST or GraphQL client
        year: Calendar year to fetch
        progress: Optional callback receiving a short message per step

    Returns:
        ActivityData for the year

    Raises:
        GitHubError: Any failure from the underlying client
    """

    def step(message: str) -> None:
        logger.debug(message)
        if progress:
            progress(message)

    step(f"Fetching profile for {client.username}...")
    user = client.get_user()
    step("Fetching repositories...")
    repositories = client.get_repositories()

    step(f"Fetching {year} activity...")
    with ThreadPoolExecutor(max_workers=MAX_FETCH_WORKERS) as pool:
        languages = pool.submit(client.get_languages)
        commits = pool.submit(client.get_commits_for_year, year)
        prs = pool.submit(client.get_pull_requests, year)
        issues = pool.submit(client.get_issues, year)
        lines = pool.submit(client.get_lines_changed, year)
        total_commits = pool.submit(client.get_total_commit_count, year)
        reviews = pool.submit(client.get_code_review_count, year)

        activity = ActivityData(
            user=user,
            year=year,
            repositories=repositories,
            language_bytes=languages.result(),
            commits=commits.result(),
            total_prs=prs.result(),
            total_issues=issues.result(),
            lines_changed=lines.result(),
            total_commits=total_commits.result(),
            total_reviews=reviews.result(),
        )

    step("Building contribution calendar...")
    activity.contributions = client.get_contribution_calendar(year)
    return activity


def fetch_with_token_retry(
    username: str,
    year: int,
    backend: str = "auto",
    token: Optional[str] = None,
    prompt_token: Optional[Callable[[GitHubError], str]] = None,
    on_error: Optional[Callable[[GitHubError], None]] = None,
    progress: Optional[ProgressCallback] = None,
    client_factory: Callable[..., Client] = create_client,
    **client_kwargs,
) -> ActivityData:
    """Fetch activity, asking for a token whenever one would help.

    On a rate limit, or when the GraphQL API demands authentication, the
    caller is asked for a token and the fetch is retried with it. An empty
    answer gives up and re-raises the error that triggered the prompt.
    Rejected tokens and repeated rate limiting are passed to ``on_error``
    and the prompt repeats.

    Args:
        username: Login to analyse
        year: Calendar year to fetch
        backend: Backend name for create_client()
        token: Initial token (may be None)
        prompt_token: Called with the triggering error; returns a token or ""
        on_error: Called with errors raised by a retried fetch
        progress: Forwarded to fetch_activity()
        client_factory: Client constructor (create_client by default)
        **client_kwargs: Extra arguments for the client

    Returns:
        ActivityData for the year

    Raises:
        GitHubError: If the fetch fails for a reason a token cannot fix, or
            the user declines to enter a token
    """

    def attempt(current_token: Optional[str]) -> ActivityData:
        client = client_factory(
            username, token=current_token, backend=backend, year=year, **client_kwargs
        )
        try:
            return fetch_activity(client, year, progress=progress)
        finally:
            client.close()

    try:
        return attempt(token)
    except (RateLimitError, AuthenticationRequiredError) as e:
        if prompt_token is None:
            raise
        original = e

    while True:
        new_token = (prompt_token(original) or "").strip()
        if not new_token:
            raise original
        try:
            return attempt(new_token)
        except (InvalidTokenError, RateLimitError, AuthenticationRequiredError) as e:
            logger.debug("Retry with new token failed: %s", e)
            if on_error:
                on_error(e)
