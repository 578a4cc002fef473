"""GraphQL API client for GitHub Wrapped.

A single query returns the profile, the contribution collection for the
year window and the top repositories. The response is memoized per year so
every contract method after the first is free.

GitHub only serves the GraphQL API to authenticated requests.
"""

import logging
import threading
from collections import Counter
from datetime import datetime, time, timezone
from typing import Any, Dict, List, Optional

from .api import GitHubAPIClient, raise_for_github_status
from .constants import GITHUB_GRAPHQL_URL
from .errors import (
    AuthenticationRequiredError,
    GitHubError,
    InvalidTokenError,
    NoActivityError,
    RateLimitError,
    UserNotFoundError,
)
from .models import Commit, ContributionDay, GitHubUser, LinesChanged, Repository, parse_timestamp
from .utils import year_window

logger = logging.getLogger(__name__)

WRAPPED_QUERY = """
query($username: String!, $from: DateTime!, $to: DateTime!) {
  user(login: $username) {
    login
    name
    avatarUrl
    bio
    company
    location
    createdAt
    repositories(privacy: PUBLIC) { totalCount }
    followers { totalCount }
    following { totalCount }
    contributionsCollection(from: $from, to: $to) {
      totalCommitContributions
      totalIssueContributions
      totalPullRequestContributions
      totalPullRequestReviewContributions
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays { contributionCount date weekday }
        }
      }
      commitContributionsByRepository(maxRepositories: 100) {
        repository {
          name
          nameWithOwner
          stargazerCount
          forkCount
          primaryLanguage { name color }
        }
        contributions(first: 100) {
          totalCount
          nodes { occurredAt }
        }
      }
      pullRequestContributions(first: 100) {
        totalCount
        nodes {
          pullRequest {
            title
            createdAt
            additions
            deletions
            changedFiles
            repository { name }
          }
        }
      }
    }
    repositories_data: repositories(
      first: 100
      orderBy: {field: STARGAZERS, direction: DESC}
      privacy: PUBLIC
    ) {
      totalCount
      nodes {
        name
        stargazerCount
        forkCount
        description
        url
        createdAt
        updatedAt
        primaryLanguage { name color }
      }
    }
  }
}
"""


class GraphQLClient(GitHubAPIClient):
    """Fetch a user's activity with one GraphQL query per year.

    Example:
        >>> client = GraphQLClient("octocat", token="ghp_...")
        >>> calendar = client.get_contribution_calendar(2025)
    """

    def __init__(
        self,
        username: str,
        token: Optional[str] = None,
        year: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(username, token, **kwargs)
        self.year = year or datetime.now().year
        self._cache: Dict[int, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def _get_complete_stats(self, year: int) -> Dict[str, Any]:
        """Run the wrapped query for a year, or return the memoized result.

        Returns:
            The ``user`` node of the response

        Raises:
            AuthenticationRequiredError: Without a token, or when the
                contribution collection is withheld
            UserNotFoundError: If the login does not resolve
            InvalidTokenError: If the token is rejected
            RateLimitError: If the rate limit is exhausted
        """
        with self._lock:
            if year in self._cache:
                return self._cache[year]

            if not self.token:
                raise AuthenticationRequiredError()

            start, end = year_window(year)
            variables = {
                "username": self.username,
                "from": datetime.combine(start, time.min, tzinfo=timezone.utc).isoformat(),
                "to": datetime.combine(end, time.max, tzinfo=timezone.utc).isoformat(),
            }
            user = self._execute(variables)
            self._cache[year] = user
            return user

    def _execute(self, variables: dict) -> Dict[str, Any]:
        response = self._send(
            "POST",
            GITHUB_GRAPHQL_URL,
            "contribution data",
            json={"query": WRAPPED_QUERY, "variables": variables},
        )
        raise_for_github_status(response, "contribution data", self.username, True)

        payload = response.json()
        errors = payload.get("errors") or []
        if errors:
            self._raise_for_graphql_errors(errors)

        user = (payload.get("data") or {}).get("user")
        if not user:
            raise UserNotFoundError(self.username)
        if not user.get("contributionsCollection"):
            raise AuthenticationRequiredError()
        return user

    def _raise_for_graphql_errors(self, errors: List[dict]) -> None:
        """Map GraphQL error entries onto the GitHubError tree."""
        for error in errors:
            kind = error.get("type", "")
            message = error.get("message", "")
            if kind == "NOT_FOUND" or "Could not resolve to a User" in message:
                raise UserNotFoundError(self.username)
            if kind == "RATE_LIMITED" or "rate limit" in message.lower():
                raise RateLimitError(authenticated=True)
            if "Bad credentials" in message:
                raise InvalidTokenError()
        messages = "; ".join(e.get("message", "unknown error") for e in errors)
        raise GitHubError(f"Failed to fetch data: {messages}")

    def _contributions(self, year: int) -> Dict[str, Any]:
        return self._get_complete_stats(year).get("contributionsCollection") or {}

    def get_user(self) -> GitHubUser:
        return GitHubUser.from_graphql(self._get_complete_stats(self.year))

    def get_repositories(self) -> List[Repository]:
        user = self._get_complete_stats(self.year)
        nodes = (user.get("repositories_data") or {}).get("nodes") or []
        login = user.get("login", self.username)
        return [Repository.from_graphql(node, login) for node in nodes if node]

    def get_commits_for_year(self, year: int) -> List[Commit]:
        """Expand per-repository commit contributions into timestamped commits.

        Raises:
            NoActivityError: If there are no commit contributions in the year
        """
        commits: List[Commit] = []
        for entry in self._contributions(year).get("commitContributionsByRepository") or []:
            repository = (entry or {}).get("repository") or {}
            nodes = ((entry or {}).get("contributions") or {}).get("nodes") or []
            if not repository:
                continue
            for node in nodes:
                timestamp = parse_timestamp((node or {}).get("occurredAt"))
                if timestamp is None:
                    continue
                commits.append(Commit(timestamp=timestamp, repository=repository["name"]))

        if not commits:
            raise NoActivityError(
                f"No commits found for {self.username} in {year}. "
                "Try a different year or username."
            )
        return commits

    def get_pull_requests(self, year: int) -> int:
        return self._contributions(year).get("totalPullRequestContributions") or 0

    def get_issues(self, year: int) -> int:
        return self._contributions(year).get("totalIssueContributions") or 0

    def get_languages(self) -> Dict[str, int]:
        """Weight each repository's primary language by its commit count."""
        weights: Counter = Counter()
        contributions = self._contributions(self.year)
        for entry in contributions.get("commitContributionsByRepository") or []:
            language = ((entry or {}).get("repository") or {}).get("primaryLanguage")
            if not language:
                continue
            count = ((entry or {}).get("contributions") or {}).get("totalCount", 0)
            weights[language["name"]] += count
        return dict(weights)

    def get_contribution_calendar(self, year: int) -> List[ContributionDay]:
        calendar = self._contributions(year).get("contributionCalendar") or {}
        days: List[ContributionDay] = []
        for week in calendar.get("weeks") or []:
            for raw_day in (week or {}).get("contributionDays") or []:
                day = ContributionDay.from_graphql(raw_day or {})
                if day is not None:
                    days.append(day)
        return days

    def get_lines_changed(self, year: int) -> LinesChanged:
        """Sum additions and deletions over the year's pull requests."""
        lines = LinesChanged()
        pr_contributions = self._contributions(year).get("pullRequestContributions") or {}
        for node in pr_contributions.get("nodes") or []:
            pull_request = (node or {}).get("pullRequest")
            if not pull_request:
                continue
            lines.additions += pull_request.get("additions") or 0
            lines.deletions += pull_request.get("deletions") or 0
        return lines

    def get_total_commit_count(self, year: int) -> Optional[int]:
        return self._contributions(year).get("totalCommitContributions") or 0

    def get_code_review_count(self, year: int) -> int:
        return self._contributions(year).get("totalPullRequestReviewContributions") or 0
