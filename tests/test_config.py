"""Tests for settings resolution and username detection."""

import subprocess
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from gh_wrapped.config import detect_github_username, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's real environment and .env out of the tests."""
    for name in ("GITHUB_TOKEN", "GH_TOKEN", "GITHUB_USER", "GH_WRAPPED_BACKEND"):
        monkeypatch.delenv(name, raising=False)
    with patch("gh_wrapped.config.load_dotenv"):
        yield


class TestLoadSettings:
    """Tests for load_settings()."""

    def test_defaults(self):
        """Nothing configured means anonymous auto mode for this year."""
        settings = load_settings()

        assert settings.token is None
        assert settings.username is None
        assert settings.year == date.today().year
        assert settings.backend == "auto"
        assert settings.output_dir == Path.cwd()

    def test_environment(self, monkeypatch):
        """Environment variables fill in missing values."""
        monkeypatch.setenv("GH_TOKEN", "gh-token")
        monkeypatch.setenv("GITHUB_USER", "octocat")
        monkeypatch.setenv("GH_WRAPPED_BACKEND", "REST")

        settings = load_settings()

        assert settings.token == "gh-token"
        assert settings.username == "octocat"
        assert settings.backend == "rest"

    def test_github_token_wins_over_gh_token(self, monkeypatch):
        """GITHUB_TOKEN is checked before GH_TOKEN."""
        monkeypatch.setenv("GITHUB_TOKEN", "primary")
        monkeypatch.setenv("GH_TOKEN", "secondary")
        assert load_settings().token == "primary"

    def test_explicit_values_win(self, monkeypatch):
        """Command-line values override the environment."""
        monkeypatch.setenv("GITHUB_TOKEN", "env-token")
        settings = load_settings(token="flag-token", year=2023, backend="graphql", output_dir="out")

        assert settings.token == "flag-token"
        assert settings.year == 2023
        assert settings.backend == "graphql"
        assert settings.output_dir == Path("out")

    def test_unknown_backend(self):
        """Unknown backends are rejected."""
        with pytest.raises(ValueError, match="Unknown backend"):
            load_settings(backend="soap")

    def test_loads_dotenv(self):
        """The .env file is read on every load."""
        with patch("gh_wrapped.config.load_dotenv") as mock_load:
            load_settings()
        mock_load.assert_called_once()


class TestDetectGitHubUsername:
    """Tests for detect_github_username()."""

    def test_github_user_setting(self):
        """github.user is used when set."""
        with patch("gh_wrapped.config._git_config", side_effect=["octocat"]):
            assert detect_github_username() == "octocat"

    @pytest.mark.parametrize("email", [
        "octocat@users.noreply.github.com",
        "583231+octocat@users.noreply.github.com",
    ])
    def test_noreply_email(self, email):
        """The login is extracted from GitHub noreply addresses."""
        with patch("gh_wrapped.config._git_config", side_effect=[None, email]):
            assert detect_github_username() == "octocat"

    def test_regular_email(self):
        """Ordinary addresses do not reveal a login."""
        with patch("gh_wrapped.config._git_config", side_effect=[None, "me@example.com"]):
            assert detect_github_username() is None

    def test_git_missing(self):
        """A missing git binary is not an error."""
        with patch("gh_wrapped.config.subprocess.run", side_effect=FileNotFoundError):
            assert detect_github_username() is None

    def test_git_config_reads_stdout(self):
        """Output of git config is stripped."""
        result = MagicMock(stdout="octocat\n")
        with patch("gh_wrapped.config.subprocess.run", return_value=result) as mock_run:
            assert detect_github_username() == "octocat"
        assert mock_run.call_args[0][0] == ["git", "config", "--global", "github.user"]

    def test_git_timeout(self):
        """A hanging git is treated as unset."""
        error = subprocess.TimeoutExpired(cmd="git", timeout=5)
        with patch("gh_wrapped.config.subprocess.run", side_effect=error):
            assert detect_github_username() is None
