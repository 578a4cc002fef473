"""Export and share functions for GitHub Wrapped.

This module provides:
- Exporter: JSON, SVG and PNG cards plus share text and share URLs
- fetch_avatar_data_uri(): Inline an avatar image as a base64 data URI
- render_card_html(): Fill the HTML card template
- open_path(): Open a file or URL with the default application

PNG rendering needs a headless browser. It runs in a separate Python process
(``python -m gh_wrapped.export_worker``) that reads its job from a JSON file
and writes its result to another, so a browser crash or a missing browser
never takes down the interactive session.
"""

import base64
import html
import json
import logging
import shutil
import subprocess
import sys
import tempfile
from importlib import resources
from pathlib import Path
from string import Template
from typing import Callable, List, Optional
from urllib.parse import quote

import click
import requests
import svgwrite

from .constants import (
    AVATAR_TIMEOUT,
    CARD_HEIGHT,
    CARD_WIDTH,
    DEFAULT_JSON_NAME,
    DEFAULT_PNG_NAME,
    DEFAULT_SHARE_LINKS_NAME,
    DEFAULT_SVG_NAME,
    PNG_SCALE,
    PROJECT_URL,
    RARITY_COLORS,
    RARITY_ORDER,
    USER_AGENT,
)
from .errors import ExportError
from .models import Achievement, WrappedStats
from .tiers import tier_name, tier_theme
from .utils import format_number

logger = logging.getLogger(__name__)

WORKER_MODULE = "gh_wrapped.export_worker"
WORKER_TIMEOUT = 180  # seconds; the first run may download fonts
INSTALL_TIMEOUT = 300  # seconds
INSTALL_COMMAND = [sys.executable, "-m", "playwright", "install", "chromium"]

# Set once Chromium is known to be present in this process
_browser_ready = False

TWITTER_INTENT_URL = "https://twitter.com/intent/tweet"
LINKEDIN_SHARE_URL = "https://www.linkedin.com/sharing/share-offsite/"


def fetch_avatar_data_uri(url: str, timeout: int = AVATAR_TIMEOUT) -> str:
    """Download an avatar and return it as a data URI.

    Args:
        url: Avatar image URL
        timeout: Request timeout in seconds

    Returns:
        "data:image/...;base64,..." or "" if the download fails
    """
    if not url:
        return ""
    try:
        response = requests.get(url, timeout=timeout, headers={"User-Agent": USER_AGENT})
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning("Could not fetch avatar, exporting without it: %s", e)
        return ""
    content_type = response.headers.get("Content-Type", "image/png").split(";")[0]
    encoded = base64.b64encode(response.content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def top_achievements(achievements: List[Achievement], limit: int = 3) -> List[Achievement]:
    """Rarest achievements first, catalog order within a rarity."""

    def priority(achievement: Achievement) -> int:
        if achievement.rarity in RARITY_ORDER:
            return RARITY_ORDER.index(achievement.rarity)
        return len(RARITY_ORDER)

    return sorted(achievements, key=priority)[:limit]


def load_card_template() -> Template:
    source = resources.files("gh_wrapped").joinpath("templates/card.html")
    return Template(source.read_text(encoding="utf-8"))


def render_card_html(stats: WrappedStats, avatar_data_uri: str = "") -> str:
    """Interpolate stats into the HTML card template.

    All user-provided values are HTML-escaped.

    Args:
        stats: Stats to render
        avatar_data_uri: Inline avatar image ("" leaves the avatar out)

    Returns:
        Complete HTML document
    """
    theme = tier_theme(stats.tier)
    archetype = stats.archetype
    top_language = stats.top_languages[0].name if stats.top_languages else "N/A"

    badges = "".join(
        f'<span class="badge" style="color: {RARITY_COLORS.get(a.rarity, "#CCCCCC")}; '
        f'border-color: {RARITY_COLORS.get(a.rarity, "#CCCCCC")}">'
        f"{html.escape(a.emoji)} {html.escape(a.name.upper())}</span>"
        for a in top_achievements(stats.achievements)
    )
    avatar = (
        f'<img class="avatar" src="{avatar_data_uri}" alt="avatar">' if avatar_data_uri else ""
    )

    return load_card_template().substitute(
        width=CARD_WIDTH,
        height=CARD_HEIGHT,
        accent=theme["accent"],
        secondary=theme["secondary"],
        year=stats.year,
        username=html.escape(stats.user.login),
        date_range=html.escape(stats.date_range),
        avatar=avatar,
        commits=format_number(stats.total_commits),
        prs=format_number(stats.total_prs),
        repos=stats.total_repos,
        streak=stats.longest_streak,
        top_language=html.escape(top_language),
        archetype=html.escape(f"{archetype.emoji} {archetype.name}") if archetype else "",
        badges=badges,
        tier=tier_name(stats.tier),
    )


def open_path(target) -> bool:
    """Open a file or URL with the platform's default application.

    Returns:
        True if the launcher reported success
    """
    try:
        return click.launch(str(target)) == 0
    except OSError as e:
        logger.warning("Could not open %s: %s", target, e)
        return False


class Exporter:
    """Write a user's wrapped stats to shareable files.

    Attributes:
        stats: Stats to export
        output_dir: Directory default file names are resolved against

    Example:
        >>> exporter = Exporter(stats)
        >>> exporter.export_svg()
        PosixPath('/home/me/gh-wrapped.svg')
        >>> print(exporter.twitter_share_url())
    """

    def __init__(self, stats: WrappedStats, output_dir: Optional[Path] = None):
        self.stats = stats
        self.output_dir = Path(output_dir) if output_dir else Path.cwd()

    def _resolve(self, path: Optional[Path], default_name: str) -> Path:
        return Path(path) if path else self.output_dir / default_name

    def share_text(self) -> str:
        stats = self.stats
        archetype = stats.archetype
        archetype_line = f"{archetype.emoji} {archetype.name}" if archetype else ""
        top_language = stats.top_languages[0].name if stats.top_languages else "various languages"
        return (
            f"🚀 My GitHub Wrapped {stats.year}!\n"
            "\n"
            f"📊 {stats.total_commits} commits\n"
            f"⭐ {stats.total_stars} stars earned\n"
            f"🔥 {stats.longest_streak}-day streak\n"
            f"{archetype_line}\n"
            f"🏆 {len(stats.achievements)} achievements unlocked\n"
            "\n"
            f"Top language: {top_language}\n"
            "\n"
            "Check out your own stats with GitHub Wrapped CLI!\n"
            "#GitHubWrapped #DevLife"
        )

    def twitter_share_url(self) -> str:
        text = quote(self.share_text(), safe="")
        url = quote(PROJECT_URL, safe="")
        return f"{TWITTER_INTENT_URL}?text={text}&url={url}"

    def linkedin_share_url(self) -> str:
        return f"{LINKEDIN_SHARE_URL}?url={quote(PROJECT_URL, safe='')}"

    def save_share_links(self, path: Optional[Path] = None) -> Path:
        """Write the share text and both share URLs to a text file.

        LinkedIn's share dialog cannot be prefilled, so the file holds the
        text to paste alongside the link.
        """
        output = self._resolve(path, DEFAULT_SHARE_LINKS_NAME)
        title = f"GitHub Wrapped {self.stats.year} - Share Links"
        content = "\n".join(
            [
                title,
                "=" * len(title),
                "",
                "YOUR STATS:",
                self.share_text(),
                "",
                "SHARE ON TWITTER:",
                self.twitter_share_url(),
                "",
                "SHARE ON LINKEDIN:",
                self.linkedin_share_url(),
                "",
                "Copy the text above and paste it when sharing on LinkedIn!",
                "",
                "TIP: Export your stats card first (PNG/SVG) and attach it to your post!",
                "",
            ]
        )
        output.write_text(content, encoding="utf-8")
        return output

    def save_json(self, path: Optional[Path] = None) -> Path:
        output = self._resolve(path, DEFAULT_JSON_NAME)
        with open(output, "w", encoding="utf-8") as f:
            json.dump(self.stats.to_dict(), f, indent=2, ensure_ascii=False)
        return output

    def export_svg(self, path: Optional[Path] = None) -> Path:
        """Draw the stats card as an SVG.

        Raises:
            ExportError: If the file cannot be written
        """
        output = self._resolve(path, DEFAULT_SVG_NAME)
        stats = self.stats
        theme = tier_theme(stats.tier)
        accent, secondary = theme["accent"], theme["secondary"]
        center = CARD_WIDTH / 2

        dwg = svgwrite.Drawing(
            str(output),
            size=(f"{CARD_WIDTH}px", f"{CARD_HEIGHT}px"),
            profile="full",
            debug=False,
        )

        bg = dwg.linearGradient(start=(0, 0), end=("100%", "100%"), id="bg")
        bg.add_stop_color(offset=0, color="#0d0d0d")
        bg.add_stop_color(offset=0.5, color="#1a1a2e")
        bg.add_stop_color(offset=1, color="#16213e")
        dwg.defs.add(bg)

        dwg.add(dwg.rect(insert=(0, 0), size=("100%", "100%"), fill="url(#bg)"))
        dwg.add(
            dwg.rect(
                insert=(2, 2),
                size=(CARD_WIDTH - 4, CARD_HEIGHT - 4),
                fill="none",
                stroke=accent,
                stroke_width=4,
            )
        )

        def text(value, y, size, color="#ffffff", weight="normal", x=center, anchor="middle"):
            dwg.add(
                dwg.text(
                    str(value),
                    insert=(x, y),
                    fill=color,
                    font_family="Courier New, monospace",
                    font_size=size,
                    font_weight=weight,
                    text_anchor=anchor,
                )
            )

        text("GITHUB WRAPPED", 90, 22, accent)
        text(stats.year, 140, 40, "#f093fb", "bold")
        text(f"@{stats.user.login}", 200, 26)
        text(stats.date_range, 230, 14, "#8b949e")

        rows = [
            ("COMMITS", format_number(stats.total_commits)),
            ("PULL REQUESTS", format_number(stats.total_prs)),
            ("REPOSITORIES", stats.total_repos),
            ("LONGEST STREAK", f"{stats.longest_streak} days"),
            ("TOP LANGUAGE", stats.top_languages[0].name if stats.top_languages else "N/A"),
        ]
        top = 270
        for i, (label, value) in enumerate(rows):
            y = top + i * 86
            dwg.add(
                dwg.rect(
                    insert=(48, y),
                    size=(CARD_WIDTH - 96, 68),
                    rx=12,
                    ry=12,
                    fill="#ffffff",
                    fill_opacity=0.04,
                    stroke=secondary,
                    stroke_width=2,
                )
            )
            text(label, y + 42, 14, "#aaaaaa", x=76, anchor="start")
            text(value, y + 44, 22, accent, "bold", x=CARD_WIDTH - 76, anchor="end")

        if stats.archetype:
            text(f"{stats.archetype.emoji} {stats.archetype.name}", 740, 22)

        for i, achievement in enumerate(top_achievements(stats.achievements)):
            color = RARITY_COLORS.get(achievement.rarity, "#CCCCCC")
            text(
                f"{achievement.emoji} {achievement.name.upper()}",
                800 + i * 40,
                14,
                color,
                "bold",
            )

        text(tier_name(stats.tier), CARD_HEIGHT - 50, 14, accent, "bold")

        try:
            dwg.save()
        except OSError as e:
            raise ExportError(f"Could not write {output}: {e}") from e
        return output

    def export_png(
        self,
        path: Optional[Path] = None,
        progress: Optional[Callable[[str], None]] = None,
    ) -> Path:
        """Render the HTML card to PNG in a separate worker process.

        Chromium is installed first if this is the first PNG export.

        Args:
            path: Output file (default: gh-wrapped.png in the output directory)
            progress: Called with short status messages

        Raises:
            ExportError: If installing the browser or rendering fails
        """
        ensure_browser(progress)
        if progress:
            progress("Rendering PNG card...")
        output = self._resolve(path, DEFAULT_PNG_NAME).resolve()
        avatar = fetch_avatar_data_uri(self.stats.user.avatar_url)
        job = {
            "html": render_card_html(self.stats, avatar),
            "path": str(output),
            "width": CARD_WIDTH,
            "height": CARD_HEIGHT,
            "scale": PNG_SCALE,
        }
        return run_export_worker(job)


def browser_installed(timeout: int = WORKER_TIMEOUT) -> bool:
    """Ask the worker whether Playwright's Chromium is on disk."""
    try:
        proc = subprocess.run(
            [sys.executable, "-m", WORKER_MODULE, "--check"],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("Browser check failed: %s", e)
        return False
    return proc.returncode == 0


def ensure_browser(
    progress: Optional[Callable[[str], None]] = None,
    timeout: int = INSTALL_TIMEOUT,
) -> bool:
    """Install Chromium for Playwright unless it is already present.

    The check runs once per process; later calls return immediately.

    Args:
        progress: Called with short status messages
        timeout: Seconds to allow for the download

    Returns:
        True if Chromium was installed by this call

    Raises:
        ExportError: If the installation fails, with manual instructions
    """
    global _browser_ready
    if _browser_ready:
        return False

    if progress:
        progress("Checking Chromium installation...")
    if browser_installed():
        _browser_ready = True
        return False

    logger.info("Chromium not found, running: %s", " ".join(INSTALL_COMMAND))
    if progress:
        progress("Installing Chromium (one-time download, ~150MB). This may take 1-2 minutes...")
    try:
        subprocess.run(
            INSTALL_COMMAND,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or "").strip().splitlines()
        reason = detail[-1] if detail else f"exit status {e.returncode}"
        raise ExportError(_install_failed(reason)) from e
    except subprocess.TimeoutExpired as e:
        raise ExportError(_install_failed(f"timed out after {timeout} seconds")) from e
    except OSError as e:
        raise ExportError(_install_failed(str(e))) from e

    _browser_ready = True
    return True


def _install_failed(reason: str) -> str:
    return (
        "Chromium installation failed.\n\n"
        "Please install manually:\n"
        "  playwright install chromium\n\n"
        f"Error: {reason}"
    )


def run_export_worker(job: dict, timeout: int = WORKER_TIMEOUT) -> Path:
    """Hand a render job to the export worker process and wait for it.

    The job goes to the worker as an input JSON file; the worker answers
    with ``{"success": true, "path": ...}`` or ``{"success": false,
    "error": ...}`` in an output JSON file. Both files live in a temporary
    directory that is removed afterwards.

    Raises:
        ExportError: If the worker reports a failure or produces no result
    """
    workdir = Path(tempfile.mkdtemp(prefix="gh-wrapped-"))
    input_file = workdir / "input.json"
    output_file = workdir / "output.json"
    try:
        input_file.write_text(json.dumps(job), encoding="utf-8")
        logger.debug("Starting export worker in %s", workdir)
        try:
            proc = subprocess.run(
                [sys.executable, "-m", WORKER_MODULE, str(input_file), str(output_file)],
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ExportError(f"Export timed out after {timeout} seconds") from e

        if not output_file.exists():
            detail = (proc.stderr or "").strip().splitlines()
            raise ExportError(
                "Export worker did not produce a result"
                + (f": {detail[-1]}" if detail else "")
            )

        result = json.loads(output_file.read_text(encoding="utf-8"))
        if not result.get("success"):
            raise ExportError(result.get("error") or "Export failed")
        return Path(result["path"])
    finally:
        shutil.rmtree(workdir, ignore_errors=True)
