"""Configuration for GitHub Wrapped.

Settings are resolved from, in order of precedence: explicit values passed by
the CLI, environment variables, a ``.env`` file in the working directory, and
the defaults in constants.py.

Environment variables:
    GITHUB_TOKEN / GH_TOKEN: Personal access token
    GITHUB_USER: Username to analyse when none is given
    GH_WRAPPED_BACKEND: auto, rest or graphql
"""

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .constants import MAX_COMMIT_REPOS, MAX_REPO_PAGES, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

BACKENDS = ("auto", "rest", "graphql")

_NOREPLY_EMAIL = re.compile(r"^(?:\d+\+)?([^@]+)@users\.noreply\.github\.com$")


@dataclass
class Settings:
    """Resolved runtime settings.

    Attributes:
        token: GitHub token (None for anonymous access)
        username: GitHub login to analyse (None until resolved)
        year: Calendar year to analyse
        backend: auto, rest or graphql
        output_dir: Directory exports are written to
        request_timeout: Per-request timeout in seconds
        max_pages: Page cap for repository listing
        max_commit_repos: How many recently updated repos to read commits from
    """

    token: Optional[str] = None
    username: Optional[str] = None
    year: int = 0
    backend: str = "auto"
    output_dir: Path = Path(".")
    request_timeout: int = REQUEST_TIMEOUT
    max_pages: int = MAX_REPO_PAGES
    max_commit_repos: int = MAX_COMMIT_REPOS


def load_settings(
    token: Optional[str] = None,
    username: Optional[str] = None,
    year: Optional[int] = None,
    backend: Optional[str] = None,
    output_dir: Optional[str] = None,
) -> Settings:
    """Build Settings from explicit values, the environment and ``.env``.

    Args:
        token: Token passed on the command line
        username: Username passed on the command line
        year: Year passed on the command line (default: current year)
        backend: Backend passed on the command line
        output_dir: Export directory (default: current directory)

    Returns:
        Settings with every field resolved

    Raises:
        ValueError: If the backend name is unknown
    """
    load_dotenv()

    resolved_backend = (backend or os.environ.get("GH_WRAPPED_BACKEND") or "auto").lower()
    if resolved_backend not in BACKENDS:
        raise ValueError(
            f"Unknown backend '{resolved_backend}'. Choose one of: {', '.join(BACKENDS)}"
        )

    return Settings(
        token=token or os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN") or None,
        username=username or os.environ.get("GITHUB_USER") or None,
        year=year or date.today().year,
        backend=resolved_backend,
        output_dir=Path(output_dir) if output_dir else Path.cwd(),
    )


def _git_config(key: str) -> Optional[str]:
    try:
        result = subprocess.run(
            ["git", "config", "--global", key],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("git config %s failed: %s", key, e)
        return None
    value = result.stdout.strip()
    return value or None


def detect_github_username() -> Optional[str]:
    """Guess the user's GitHub login from their git configuration.

    Checks ``github.user`` first, then a ``users.noreply.github.com`` email
    in ``user.email``.

    Returns:
        Detected login, or None
    """
    github_user = _git_config("github.user")
    if github_user:
        return github_user

    email = _git_config("user.email")
    if email:
        match = _NOREPLY_EMAIL.match(email)
        if match:
            return match.group(1)
    return None
