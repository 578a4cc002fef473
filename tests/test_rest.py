"""Tests for the REST API client and shared HTTP plumbing."""

from datetime import date
from unittest.mock import MagicMock

import pytest
import requests

from conftest import make_response
from gh_wrapped.api import build_session, is_rate_limited, raise_for_github_status
from gh_wrapped.errors import (
    GitHubError,
    InvalidTokenError,
    NoActivityError,
    RateLimitError,
    UserNotFoundError,
)
from gh_wrapped.rest import RestClient

API = "https://api.github.com"


def fake_session(routes):
    """Session whose request() answers from a {url: response} map.

    A route value may be a list, in which case successive calls pop from it.
    Unknown URLs get a 404.
    """
    session = MagicMock()

    def request(method, url, timeout=None, params=None, **kwargs):
        route = routes.get(url)
        if isinstance(route, list):
            return route.pop(0)
        if route is None:
            return make_response(404, reason="Not Found")
        return route

    session.request.side_effect = request
    return session


def repo_payload(name, stars=0, size=0):
    return {"name": name, "full_name": f"octocat/{name}", "stargazers_count": stars, "size": size}


def commit_payload(sha, when):
    return {"sha": sha, "commit": {"author": {"date": when}, "message": f"commit {sha}"}}


# =============================================================================
# Session and status mapping
# =============================================================================

class TestSession:
    """Tests for build_session()."""

    def test_anonymous(self):
        """Anonymous sessions carry no Authorization header."""
        session = build_session()
        assert "Authorization" not in session.headers
        assert session.headers["Accept"] == "application/vnd.github+json"

    def test_token(self):
        """Tokens are sent as bearer auth."""
        session = build_session("secret")
        assert session.headers["Authorization"] == "Bearer secret"


class TestStatusMapping:
    """Tests for raise_for_github_status()."""

    def test_ok(self):
        """Successful responses pass."""
        raise_for_github_status(make_response(200), "user", "octocat")

    def test_not_found(self):
        """404 means the user does not exist."""
        with pytest.raises(UserNotFoundError, match='"ghost" not found'):
            raise_for_github_status(make_response(404), "user", "ghost")

    def test_bad_credentials(self):
        """401 means the token is invalid."""
        with pytest.raises(InvalidTokenError):
            raise_for_github_status(make_response(401), "user", "octocat")

    def test_rate_limit_header(self):
        """403 with no remaining requests is a rate limit."""
        response = make_response(403, headers={"X-RateLimit-Remaining": "0"})
        with pytest.raises(RateLimitError) as exc_info:
            raise_for_github_status(response, "user", "octocat", authenticated=True)
        assert exc_info.value.authenticated is True

    def test_rate_limit_message(self):
        """403 mentioning the rate limit is a rate limit too."""
        response = make_response(403, text="API rate limit exceeded for 1.2.3.4")
        assert is_rate_limited(response)

    def test_429(self):
        """429 is always a rate limit."""
        assert is_rate_limited(make_response(429))

    def test_other_forbidden(self):
        """Other 403s are generic errors."""
        response = make_response(403, text="Resource not accessible", reason="Forbidden")
        with pytest.raises(GitHubError, match="HTTP 403 Forbidden") as exc_info:
            raise_for_github_status(response, "repositories", "octocat")
        assert not isinstance(exc_info.value, RateLimitError)

    def test_transport_error(self):
        """Network failures surface as GitHubError."""
        session = MagicMock()
        session.request.side_effect = requests.ConnectionError("offline")
        client = RestClient("octocat", session=session)

        with pytest.raises(GitHubError, match="offline"):
            client.get_user()


# =============================================================================
# RestClient
# =============================================================================

class TestRestClient:
    """Tests for RestClient."""

    def test_get_user(self):
        """Profiles are parsed from /users/{login}."""
        session = fake_session({
            f"{API}/users/octocat": make_response(200, {"login": "octocat", "public_repos": 8}),
        })
        user = RestClient("octocat", session=session).get_user()

        assert user.login == "octocat"
        assert user.public_repos == 8

    def test_unknown_user(self):
        """Unknown users raise UserNotFoundError."""
        client = RestClient("ghost", session=fake_session({}))
        with pytest.raises(UserNotFoundError):
            client.get_user()

    def test_repositories_paginate_until_empty(self):
        """Pages are requested until an empty page comes back."""
        session = fake_session({
            f"{API}/users/octocat/repos": [
                make_response(200, [repo_payload("a"), repo_payload("b")]),
                make_response(200, [repo_payload("c")]),
                make_response(200, []),
            ],
        })
        client = RestClient("octocat", session=session)

        repos = client.get_repositories()

        assert [r.name for r in repos] == ["a", "b", "c"]
        assert session.request.call_count == 3
        pages = [c.kwargs["params"]["page"] for c in session.request.call_args_list]
        assert pages == [1, 2, 3]

    def test_repositories_page_cap(self):
        """No more than max_pages pages are requested."""
        session = MagicMock()
        session.request.return_value = make_response(200, [repo_payload("a")])
        client = RestClient("octocat", session=session, max_pages=2)

        assert len(client.get_repositories()) == 2
        assert session.request.call_count == 2

    def test_repositories_cached(self):
        """A second call does not hit the API."""
        session = fake_session({
            f"{API}/users/octocat/repos": [
                make_response(200, [repo_payload("a")]),
                make_response(200, []),
            ],
        })
        client = RestClient("octocat", session=session)
        client.get_repositories()
        client.get_repositories()

        assert session.request.call_count == 2

    def test_no_repositories(self):
        """Users without repositories have no activity."""
        session = fake_session({f"{API}/users/octocat/repos": make_response(200, [])})
        with pytest.raises(NoActivityError, match="No public repositories"):
            RestClient("octocat", session=session).get_repositories()

    def _client_with_commits(self, **kwargs):
        session = fake_session({
            f"{API}/users/octocat/repos": [
                make_response(200, [repo_payload("a", size=10), repo_payload("b", size=5)]),
                make_response(200, []),
            ],
            f"{API}/repos/octocat/a/commits": make_response(200, [
                commit_payload("1", "2024-03-01T10:00:00Z"),
                commit_payload("2", "2024-03-01T11:00:00Z"),
                commit_payload("3", "2024-03-02T11:00:00Z"),
            ]),
            f"{API}/repos/octocat/b/commits": make_response(
                409, {"message": "Git Repository is empty."}, reason="Conflict"
            ),
        })
        return RestClient("octocat", session=session, **kwargs), session

    def test_commits_skip_unreadable_repos(self):
        """Repos that error are skipped; the rest are tagged with their name."""
        client, _ = self._client_with_commits()

        commits = client.get_commits_for_year(2024)

        assert [c.sha for c in commits] == ["1", "2", "3"]
        assert {c.repository for c in commits} == {"a"}

    def test_commits_query_window(self):
        """Commits are filtered by author and the year window."""
        client, session = self._client_with_commits()
        client.get_commits_for_year(2024)

        commit_call = next(
            c for c in session.request.call_args_list if c.args[1].endswith("/a/commits")
        )
        params = commit_call.kwargs["params"]
        assert params["author"] == "octocat"
        assert params["since"].startswith("2024-01-01T00:00:00")
        assert params["until"].startswith("2024-12-31T23:59:59")

    def test_commits_limited_to_recent_repos(self):
        """Only the first max_commit_repos repositories are read."""
        client, session = self._client_with_commits(max_commit_repos=1)
        client.get_commits_for_year(2024)

        urls = [c.args[1] for c in session.request.call_args_list]
        assert f"{API}/repos/octocat/b/commits" not in urls

    def test_no_commits(self):
        """An empty year raises NoActivityError."""
        session = fake_session({
            f"{API}/users/octocat/repos": [
                make_response(200, [repo_payload("a")]),
                make_response(200, []),
            ],
            f"{API}/repos/octocat/a/commits": make_response(200, []),
        })
        with pytest.raises(NoActivityError, match="No commits found for octocat in 2024"):
            RestClient("octocat", session=session).get_commits_for_year(2024)

    def test_rate_limit_propagates_from_commits(self):
        """A rate limit mid-way aborts the fetch."""
        session = fake_session({
            f"{API}/users/octocat/repos": [
                make_response(200, [repo_payload("a")]),
                make_response(200, []),
            ],
            f"{API}/repos/octocat/a/commits": make_response(
                403, headers={"X-RateLimit-Remaining": "0"}
            ),
        })
        with pytest.raises(RateLimitError):
            RestClient("octocat", session=session).get_commits_for_year(2024)

    def test_calendar_from_commits(self):
        """The calendar is zero-filled and counts commits per day."""
        client, _ = self._client_with_commits()

        calendar = client.get_contribution_calendar(2024)

        assert len(calendar) == 366
        counts = {day.date: day.count for day in calendar}
        assert counts[date(2024, 3, 1)] == 2
        assert counts[date(2024, 3, 2)] == 1
        assert counts[date(2024, 3, 3)] == 0

    def test_search_counts(self):
        """PR and issue totals come from the search API."""
        session = fake_session({
            f"{API}/search/issues": [
                make_response(200, {"total_count": 17}),
                make_response(200, {"total_count": 3}),
            ],
        })
        client = RestClient("octocat", session=session)

        assert client.get_pull_requests(2024) == 17
        assert client.get_issues(2024) == 3
        queries = [c.kwargs["params"]["q"] for c in session.request.call_args_list]
        assert queries[0] == "author:octocat type:pr created:2024-01-01..2024-12-31"
        assert "type:issue" in queries[1]

    def test_search_failure_counts_zero(self):
        """A failing search counts as zero."""
        session = fake_session({f"{API}/search/issues": make_response(422, reason="Unprocessable")})
        assert RestClient("octocat", session=session).get_pull_requests(2024) == 0

    def test_languages_summed(self):
        """Language bytes are summed across repositories."""
        session = fake_session({
            f"{API}/users/octocat/repos": [
                make_response(200, [repo_payload("a"), repo_payload("b"), repo_payload("c")]),
                make_response(200, []),
            ],
            f"{API}/repos/octocat/a/languages": make_response(200, {"Python": 100, "Shell": 5}),
            f"{API}/repos/octocat/b/languages": make_response(200, {"Python": 50}),
        })
        languages = RestClient("octocat", session=session).get_languages()

        assert languages == {"Python": 150, "Shell": 5}

    def test_unsupported_metrics(self):
        """REST leaves lines changed, exact commits and reviews to fallbacks."""
        client = RestClient("octocat", session=MagicMock())

        assert client.get_lines_changed(2024) is None
        assert client.get_total_commit_count(2024) is None
        assert client.get_code_review_count(2024) == 0
