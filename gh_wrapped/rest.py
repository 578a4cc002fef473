"""REST API client for GitHub Wrapped.

Works without a token (at 60 requests/hour), so it is the fallback strategy.
The REST API has no contribution calendar or PR line counts: the calendar is
synthesized from commits, and lines changed are left to the analytics
fallback.
"""

import logging
from collections import Counter
from datetime import datetime, time, timedelta, timezone
from typing import Dict, List, Optional

from .api import GitHubAPIClient, raise_for_github_status
from .constants import GITHUB_API_URL, MAX_COMMIT_REPOS, MAX_REPO_PAGES, PER_PAGE
from .errors import GitHubError, NoActivityError, RateLimitError
from .models import Commit, ContributionDay, GitHubUser, LinesChanged, Repository
from .utils import year_window

logger = logging.getLogger(__name__)


class RestClient(GitHubAPIClient):
    """Fetch a user's activity through the GitHub REST API.

    Example:
        >>> client = RestClient("octocat")
        >>> user = client.get_user()
        >>> print(user.public_repos)
    """

    def __init__(
        self,
        username: str,
        token: Optional[str] = None,
        max_pages: int = MAX_REPO_PAGES,
        max_commit_repos: int = MAX_COMMIT_REPOS,
        **kwargs,
    ):
        super().__init__(username, token, **kwargs)
        self.max_pages = max_pages
        self.max_commit_repos = max_commit_repos
        self._repositories: Optional[List[Repository]] = None
        self._commits: Dict[int, List[Commit]] = {}

    def _get(self, path: str, what: str, params: Optional[dict] = None):
        response = self._send("GET", f"{GITHUB_API_URL}{path}", what, params=params)
        raise_for_github_status(response, what, self.username, self.authenticated)
        return response.json()

    def get_user(self) -> GitHubUser:
        """Fetch the user's profile.

        Raises:
            UserNotFoundError: If the login does not exist
        """
        data = self._get(f"/users/{self.username}", "user")
        return GitHubUser.from_rest(data)

    def get_repositories(self) -> List[Repository]:
        """List public repositories, most recently updated first.

        Pages through 100 repositories at a time until an empty page or the
        page cap. The result is cached on the client.

        Raises:
            NoActivityError: If the user has no public repositories
        """
        if self._repositories is not None:
            return self._repositories

        repos: List[Repository] = []
        for page in range(1, self.max_pages + 1):
            data = self._get(
                f"/users/{self.username}/repos",
                "repositories",
                params={"per_page": PER_PAGE, "page": page, "sort": "updated"},
            )
            if not data:
                break
            repos.extend(Repository.from_rest(item) for item in data)

        if not repos:
            raise NoActivityError("No public repositories found for this user.")

        self._repositories = repos
        return repos

    def get_commits_for_year(self, year: int) -> List[Commit]:
        """Fetch the user's commits in the most recently updated repositories.

        Repositories that cannot be read (private, deleted, empty) are skipped.

        Raises:
            NoActivityError: If no commits are found in the window
            RateLimitError: If the rate limit runs out mid-way
        """
        if year in self._commits:
            return self._commits[year]

        start, end = year_window(year)
        since = datetime.combine(start, time.min, tzinfo=timezone.utc)
        until = datetime.combine(end, time.max, tzinfo=timezone.utc)

        commits: List[Commit] = []
        for repo in self.get_repositories()[: self.max_commit_repos]:
            try:
                data = self._get(
                    f"/repos/{self.username}/{repo.name}/commits",
                    f"commits for {repo.name}",
                    params={
                        "author": self.username,
                        "since": since.isoformat(),
                        "until": until.isoformat(),
                        "per_page": PER_PAGE,
                    },
                )
            except RateLimitError:
                raise
            except GitHubError as e:
                logger.debug("Skipping %s: %s", repo.name, e)
                continue
            for item in data:
                commit = Commit.from_rest(item, repo.name)
                if commit is not None:
                    commits.append(commit)

        if not commits:
            raise NoActivityError(
                f"No commits found for {self.username} in {year}. "
                "Try a different year or username."
            )

        self._commits[year] = commits
        return commits

    def _search_count(self, kind: str, year: int) -> int:
        start, end = year_window(year)
        query = f"author:{self.username} type:{kind} created:{start}..{end}"
        try:
            data = self._get(
                "/search/issues", f"{kind} count", params={"q": query, "per_page": 1}
            )
        except RateLimitError:
            raise
        except GitHubError as e:
            logger.debug("Search for %s failed: %s", kind, e)
            return 0
        return data.get("total_count", 0)

    def get_pull_requests(self, year: int) -> int:
        """Count pull requests opened in the year (0 if the search fails)."""
        return self._search_count("pr", year)

    def get_issues(self, year: int) -> int:
        """Count issues opened in the year (0 if the search fails)."""
        return self._search_count("issue", year)

    def get_languages(self) -> Dict[str, int]:
        """Sum language bytes across all of the user's repositories."""
        totals: Counter = Counter()
        for repo in self.get_repositories():
            try:
                data = self._get(
                    f"/repos/{self.username}/{repo.name}/languages",
                    f"languages for {repo.name}",
                )
            except RateLimitError:
                raise
            except GitHubError as e:
                logger.debug("Skipping languages for %s: %s", repo.name, e)
                continue
            totals.update(data)
        return dict(totals)

    def get_contribution_calendar(self, year: int) -> List[ContributionDay]:
        """Build a daily calendar from commit dates.

        Returns:
            One ContributionDay per day of the year window, zero-filled
        """
        start, end = year_window(year)
        per_day = Counter(c.timestamp.date() for c in self.get_commits_for_year(year))

        calendar = []
        day = start
        while day <= end:
            calendar.append(ContributionDay(date=day, count=per_day.get(day, 0)))
            day += timedelta(days=1)
        return calendar

    def get_lines_changed(self, year: int) -> Optional[LinesChanged]:
        """Not available through REST without one request per PR."""
        return None

    def get_total_commit_count(self, year: int) -> Optional[int]:
        return None

    def get_code_review_count(self, year: int) -> int:
        return 0
