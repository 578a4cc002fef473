"""Test configuration and fixtures for gh-wrapped."""

from datetime import date, datetime, timedelta
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from gh_wrapped.analytics import generate_wrapped_stats
from gh_wrapped.models import (
    ActivityData,
    Commit,
    ContributionDay,
    GitHubUser,
    Repository,
)


def make_response(
    status: int = 200,
    json_data=None,
    headers: Optional[dict] = None,
    text: str = "",
    reason: str = "OK",
):
    """Build a stand-in for requests.Response."""
    response = MagicMock()
    response.status_code = status
    response.ok = status < 400
    response.json.return_value = json_data
    response.headers = headers or {}
    response.text = text
    response.reason = reason
    return response


def make_calendar(year: int, active: Dict[date, int]) -> List[ContributionDay]:
    """Zero-filled calendar for a whole year with the given active days."""
    days = []
    day = date(year, 1, 1)
    while day.year == year:
        days.append(ContributionDay(date=day, count=active.get(day, 0)))
        day += timedelta(days=1)
    return days


def sample_user() -> GitHubUser:
    return GitHubUser(
        login="octocat",
        name="The Octocat",
        avatar_url="https://avatars.example.com/u/583231",
        public_repos=8,
        followers=100,
        following=9,
    )


def sample_repositories() -> List[Repository]:
    return [
        Repository(name="spoon-knife", full_name="octocat/spoon-knife",
                   stargazers_count=40, language="JavaScript", size=300),
        Repository(name="hello-world", full_name="octocat/hello-world",
                   stargazers_count=80, language="Python", size=1200),
        Repository(name="linguist", full_name="octocat/linguist",
                   stargazers_count=5, language=None, size=50),
    ]


def sample_commits() -> List[Commit]:
    """Eight afternoon commits in hello-world, four morning ones in spoon-knife.

    Timestamps are naive so the local-time peak hour does not depend on the
    machine's timezone.
    """
    commits = [
        Commit(timestamp=datetime(2024, 3, day, 14, 5), repository="hello-world")
        for day in range(1, 9)
    ]
    commits += [
        Commit(timestamp=datetime(2024, 3, day, 9, 30), repository="spoon-knife")
        for day in range(1, 5)
    ]
    return commits


def sample_calendar() -> List[ContributionDay]:
    """A 10-day run in March and a 3-day run ending on December 31."""
    active = {date(2024, 3, d): 2 for d in range(1, 11)}
    active.update({date(2024, 12, d): 1 for d in (29, 30, 31)})
    return make_calendar(2024, active)


def sample_activity() -> ActivityData:
    return ActivityData(
        user=sample_user(),
        year=2024,
        repositories=sample_repositories(),
        language_bytes={"Python": 7000, "JavaScript": 2000, "Shell": 1000},
        commits=sample_commits(),
        total_prs=25,
        total_issues=4,
        contributions=sample_calendar(),
    )


@pytest.fixture
def activity():
    """ActivityData for octocat in 2024."""
    return sample_activity()


@pytest.fixture
def stats():
    """WrappedStats computed from the sample activity."""
    return generate_wrapped_stats(sample_activity())
