"""CLI interface for GitHub Wrapped.

This module provides the command-line interface. It uses Click for argument
parsing and Rich for terminal formatting.

Commands:
    show: Interactive slideshow of your year (the default)
    stats: Print a non-interactive summary
    export: Write the stats card as PNG, SVG or JSON
    share: Print a share URL and copy it to the clipboard
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .analytics import (
    generate_comparison_stats,
    generate_wrapped_stats,
    generate_year_comparison,
)
from .config import BACKENDS, Settings, detect_github_username, load_settings
from .constants import RATE_LIMIT_ANONYMOUS, RATE_LIMIT_AUTHENTICATED, TOKEN_URL
from .errors import (
    AuthenticationRequiredError,
    ExportError,
    GitHubError,
    InvalidTokenError,
    NoActivityError,
    RateLimitError,
)
from .export import Exporter, open_path
from .fetch import fetch_with_token_retry
from .models import ComparisonStats, WrappedStats
from .slides import (
    EXPORT_JSON,
    EXPORT_PNG,
    EXPORT_SVG,
    SHARE_LINKEDIN,
    SHARE_TWITTER,
)
from .terminal import run_slideshow
from .utils import format_hour, safe_sparkline

__all__ = ["main"]

logger = logging.getLogger(__name__)

console = Console()


def _setup_logging(verbose: bool) -> None:
    """Route log records through Rich; WARNING by default, DEBUG with -v."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
        ],
        force=True,
    )
    # urllib3 is noisy at debug level
    logging.getLogger("urllib3").setLevel(logging.INFO if verbose else logging.WARNING)


def _sanitize_output_path(output: str) -> Path:
    """Sanitize output file path to prevent directory traversal attacks.

    Validates that relative paths don't escape the current working directory
    using parent directory references (e.g., ../../../etc/passwd).

    Args:
        output: The user-provided output file path

    Returns:
        Sanitized Path object

    Raises:
        click.ClickException: If relative path contains directory traversal
    """
    path = Path(output)

    # For relative paths, check for parent directory traversal
    if not path.is_absolute():
        try:
            # Resolve to catch traversal attempts like foo/../../../etc/passwd
            cwd = Path.cwd().resolve()
            resolved = (cwd / path).resolve()
            # Compare whole components so "proj-evil" does not pass as "proj"
            if resolved.parts[: len(cwd.parts)] != cwd.parts:
                raise click.ClickException(
                    f"Path escapes current directory: {output}\n"
                    "Use a path within the current directory."
                )
        except (OSError, ValueError) as e:
            raise click.ClickException(f"Invalid output path: {output} ({e})")

    return path


def _copy_to_clipboard(text: str) -> None:
    try:
        import pyperclip
        pyperclip.copy(text)
        console.print("[green]📋 Copied to clipboard![/green]")
    except (ImportError, OSError, RuntimeError):
        # OSError/RuntimeError: clipboard access failed (headless, permissions, etc.)
        console.print("[yellow]⚠️  Could not copy to clipboard[/yellow]")


# Example text for each command
EXAMPLES = {
    "show": """
Examples:
  gh-wrapped                                  # Detect your username and start the slideshow
  gh-wrapped show octocat                     # Slideshow for 'octocat'
  gh-wrapped show octocat --year 2024         # A past year
  gh-wrapped show octocat --compare           # Add a year-over-year comparison slide
  gh-wrapped show octocat --backend rest      # Force the REST API (no token needed)

Keys:
  →/space/enter next slide, ← previous slide, esc quit
  On the last slide: P png, S svg, J json, T twitter, L linkedin, Q quit
""",
    "stats": """
Examples:
  gh-wrapped stats octocat                    # Summary table
  gh-wrapped stats octocat -y 2024            # A past year
  gh-wrapped stats octocat --format json      # JSON output for scripting
""",
    "export": """
Examples:
  gh-wrapped export octocat                   # PNG card in the current directory
  gh-wrapped export octocat -f svg            # SVG card (no browser needed)
  gh-wrapped export octocat -f json -o me.json
""",
    "share": """
Examples:
  gh-wrapped share octocat                    # Twitter/X share URL, copied to clipboard
  gh-wrapped share octocat --platform linkedin  # Write share-links.txt for LinkedIn
  gh-wrapped share octocat --open             # Also open the share page in a browser
""",
}


def show_examples(command: str) -> None:
    """Display example usage for a command."""
    if command in EXAMPLES:
        console.print(EXAMPLES[command])
    else:
        console.print(f"[yellow]No examples available for '{command}'[/yellow]")


def fetch_options(f):
    """Options shared by every command that fetches data."""
    f = click.option("--example", is_flag=True, help="Show usage examples")(f)
    f = click.option(
        "--backend",
        type=click.Choice(BACKENDS),
        default=None,
        help="API to use (default: GraphQL with a token, REST without)",
    )(f)
    f = click.option(
        "--token",
        envvar="GITHUB_TOKEN",
        default=None,
        help="GitHub personal access token (or set GITHUB_TOKEN)",
    )(f)
    f = click.option(
        "--year", "-y", type=int, default=None, help="Year to analyse (default: current year)"
    )(f)
    return f


def _settings(
    username: Optional[str], year: Optional[int], token: Optional[str], backend: Optional[str]
) -> Settings:
    try:
        return load_settings(token=token, username=username, year=year, backend=backend)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--backend")


def _resolve_username(settings: Settings, interactive: bool) -> Optional[str]:
    """Pick the login: argument or GITHUB_USER, git config, then a prompt."""
    if settings.username:
        return settings.username
    detected = detect_github_username()
    if not interactive:
        return detected
    username = click.prompt(
        "Enter GitHub username", default=detected or "", show_default=bool(detected)
    ).strip()
    return username or None


def _print_rate_limit_help(error: GitHubError) -> None:
    console.print()
    if isinstance(error, AuthenticationRequiredError):
        console.print("[bold red]⚠  A GitHub token is required for this data[/bold red]")
    else:
        console.print("[bold red]⚠  GitHub API Rate Limit Exceeded[/bold red]")
    console.print()
    console.print(f"[yellow]Without token: {RATE_LIMIT_ANONYMOUS} requests/hour[/yellow]")
    console.print(f"[yellow]With token: {RATE_LIMIT_AUTHENTICATED:,} requests/hour[/yellow]")
    console.print()
    console.print(f"[cyan]Get a token at: {TOKEN_URL}[/cyan]")
    console.print("[dim](The read:user scope is enough)[/dim]")
    console.print()


def _report_retry_error(error: GitHubError) -> None:
    if isinstance(error, InvalidTokenError):
        console.print("[yellow]Invalid token. Please try again.[/yellow]\n")
    elif isinstance(error, RateLimitError):
        console.print("[yellow]Still rate limited. Try a different token.[/yellow]\n")
    else:
        console.print(f"[yellow]{error}[/yellow]\n")


def _load_stats(
    username: str,
    settings: Settings,
    interactive: bool = False,
    compare: bool = False,
) -> Tuple[WrappedStats, Optional[ComparisonStats]]:
    """Fetch and analyse a year, plus the previous year when comparing.

    In interactive mode a rate limit prompts for a token; otherwise the
    error propagates.
    """
    used_token = {"value": settings.token}

    with console.status(f"[blue]Fetching GitHub data for {username}...[/blue]") as status:

        def progress(message: str) -> None:
            status.update(f"[blue]{message}[/blue]")

        def prompt_token(error: GitHubError) -> str:
            status.stop()
            _print_rate_limit_help(error)
            token = click.prompt(
                "Paste your GitHub token (empty to exit)",
                default="",
                show_default=False,
                hide_input=True,
            ).strip()
            if not token:
                console.print("\n[yellow]No token provided. Exiting...[/yellow]\n")
                sys.exit(0)
            used_token["value"] = token
            status.start()
            return token

        def on_error(error: GitHubError) -> None:
            status.stop()
            _report_retry_error(error)
            status.start()

        def fetch(year: int):
            return fetch_with_token_retry(
                username,
                year,
                backend=settings.backend,
                token=used_token["value"],
                prompt_token=prompt_token if interactive else None,
                on_error=on_error,
                progress=progress,
                timeout=settings.request_timeout,
                max_pages=settings.max_pages,
                max_commit_repos=settings.max_commit_repos,
            )

        activity = fetch(settings.year)
        status.update("[blue]Generating your wrapped...[/blue]")
        stats = generate_wrapped_stats(activity)

        comparison = None
        if compare:
            status.update(f"[blue]Fetching {settings.year - 1} data for comparison...[/blue]")
            try:
                previous = fetch(settings.year - 1)
            except NoActivityError as e:
                logger.warning("Skipping comparison: %s", e)
            else:
                comparison = generate_comparison_stats(
                    generate_year_comparison(previous), generate_year_comparison(activity)
                )

    return stats, comparison


def _export(exporter: Exporter, fmt: str, path: Optional[Path] = None) -> Path:
    if fmt == "png":
        with console.status("[blue]Rendering PNG card...[/blue]") as status:
            return exporter.export_png(
                path, progress=lambda message: status.update(f"[blue]{message}[/blue]")
            )
    if fmt == "svg":
        return exporter.export_svg(path)
    return exporter.save_json(path)


def _perform_action(action: str, exporter: Exporter) -> None:
    """Carry out the choice made on the slideshow's last slide."""
    formats = {EXPORT_PNG: "png", EXPORT_SVG: "svg", EXPORT_JSON: "json"}
    if action in formats:
        fmt = formats[action]
        try:
            path = _export(exporter, fmt)
        except ExportError as e:
            console.print(f"[red]✗ Export failed: {e}[/red]")
            if fmt == "png":
                console.print("[yellow]Tip: SVG export (press S) needs no browser.[/yellow]")
            sys.exit(1)
        console.print("[green]✓ Exported successfully![/green]")
        console.print(f"[bold green]📁 File saved to:[/bold green] [cyan]{path}[/cyan]")
        return

    if action == SHARE_TWITTER:
        url = exporter.twitter_share_url()
        console.print("[bold]Share on Twitter/X:[/bold]")
        print(url)
        open_path(url)
        return

    if action == SHARE_LINKEDIN:
        path = exporter.save_share_links()
        console.print(f"[green]Share text saved to {path}[/green]")
        console.print("[dim]Paste it into your LinkedIn post.[/dim]")
        open_path(exporter.linkedin_share_url())
        return

    console.print("[green]Thanks for checking out your GitHub Wrapped! 👋[/green]")


def _fail(error: Exception) -> None:
    console.print(f"[red]{error}[/red]")
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="gh-wrapped")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """Your year on GitHub, as a terminal slideshow.

    Fetches your activity from the GitHub API, computes streaks, languages,
    an archetype and achievements, and lets you export a shareable card.
    """
    _setup_logging(verbose)
    if ctx.invoked_subcommand is None:
        ctx.invoke(show)


@main.command()
@click.argument("username", required=False)
@fetch_options
@click.option("--compare", is_flag=True, help="Compare with the previous year")
def show(
    username: Optional[str] = None,
    year: Optional[int] = None,
    token: Optional[str] = None,
    backend: Optional[str] = None,
    example: bool = False,
    compare: bool = False,
):
    """Show your GitHub Wrapped as an interactive slideshow."""
    if example:
        show_examples("show")
        return

    settings = _settings(username, year, token, backend)
    console.print(
        Panel.fit(
            f"[bold green]GITHUB WRAPPED[/bold green]\n"
            f"[green]━━━ YOUR {settings.year} CODE JOURNEY ━━━[/green]",
            border_style="green",
        )
    )

    login = _resolve_username(settings, interactive=True)
    if not login:
        console.print("[red]Username is required![/red]")
        sys.exit(1)
    console.print(f"[green]✓ Using username: {login}[/green]\n")

    try:
        stats, comparison = _load_stats(login, settings, interactive=True, compare=compare)
    except GitHubError as e:
        _fail(e)

    action = run_slideshow(stats, comparison, console=console)
    _perform_action(action, Exporter(stats, settings.output_dir))


@main.command()
@click.argument("username", required=False)
@fetch_options
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
def stats(
    username: Optional[str],
    year: Optional[int],
    token: Optional[str],
    backend: Optional[str],
    example: bool,
    output_format: str,
):
    """Print a summary of your year without the slideshow."""
    if example:
        show_examples("stats")
        return

    settings = _settings(username, year, token, backend)
    login = _resolve_username(settings, interactive=False)
    if not login:
        console.print("[red]Error: Missing argument 'USERNAME'[/red]")
        console.print("Use --example to see usage examples.")
        sys.exit(1)

    try:
        wrapped, _ = _load_stats(login, settings)
    except GitHubError as e:
        _fail(e)

    if output_format == "json":
        console.print_json(data=wrapped.to_dict())
        return
    _display_stats(wrapped)


def _display_stats(stats: WrappedStats) -> None:
    """Display wrapped stats as panels and tables."""
    archetype = stats.archetype
    console.print(
        Panel(
            f"[bold]User:[/bold] {stats.user.display_name} (@{stats.user.login})\n"
            f"[bold]Period:[/bold] {stats.date_range}\n"
            f"[bold]Commits:[/bold] {stats.total_commits} "
            f"({stats.avg_commits_per_day:.1f}/day)\n"
            f"[bold]Pull Requests:[/bold] {stats.total_prs}\n"
            f"[bold]Issues:[/bold] {stats.total_issues}\n"
            f"[bold]Reviews:[/bold] {stats.total_reviews}\n"
            f"[bold]Stars:[/bold] {stats.total_stars} across {stats.total_repos} repos\n"
            f"[bold]Longest Streak:[/bold] {stats.longest_streak} days "
            f"(current {stats.current_streak})\n"
            f"[bold]Peak Hour:[/bold] {format_hour(stats.peak_hour)}\n"
            f"[bold]Busiest Day:[/bold] {stats.busiest_day}\n"
            f"[bold]Most Active Repo:[/bold] {stats.most_active_repo}\n"
            f"[bold]Archetype:[/bold] "
            f"{archetype.emoji + ' ' + archetype.name if archetype else 'N/A'}\n"
            f"[bold]Tier:[/bold] {stats.tier.upper()} ({stats.score} points)",
            title=f"GitHub Wrapped {stats.year}",
        )
    )

    months = [0] * 12
    for day in stats.contributions:
        months[day.date.month - 1] += day.count
    sparkline = safe_sparkline(months)
    if sparkline:
        console.print(f"[bold]📈 Monthly activity:[/bold] {sparkline}")
        console.print("                      J F M A M J J A S O N D")

    if stats.top_languages:
        table = Table(title="Top Languages")
        table.add_column("Language", style="cyan")
        table.add_column("Share", justify="right", style="green")
        for language in stats.top_languages:
            table.add_row(language.name, f"{language.percentage:.1f}%")
        console.print(table)

    if stats.achievements:
        table = Table(title=f"Achievements ({len(stats.achievements)})")
        table.add_column("", width=3)
        table.add_column("Achievement", style="yellow")
        table.add_column("Rarity", style="magenta")
        table.add_column("Description", style="dim")
        for achievement in stats.achievements:
            table.add_row(
                achievement.emoji,
                achievement.name,
                achievement.rarity.upper(),
                achievement.description,
            )
        console.print(table)

    if stats.insights:
        console.print("[bold]Insights:[/bold]")
        for insight in stats.insights:
            console.print(f"  {insight}")


@main.command()
@click.argument("username", required=False)
@fetch_options
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["png", "svg", "json"]),
    default="png",
    help="Export format",
)
@click.option("--output", "-o", default=None, help="Output file (default: ./gh-wrapped.<format>)")
@click.option("--open", "open_file", is_flag=True, help="Open the file after exporting")
def export(
    username: Optional[str],
    year: Optional[int],
    token: Optional[str],
    backend: Optional[str],
    example: bool,
    output_format: str,
    output: Optional[str],
    open_file: bool,
):
    """Export your stats card as PNG, SVG or JSON."""
    if example:
        show_examples("export")
        return

    settings = _settings(username, year, token, backend)
    login = _resolve_username(settings, interactive=False)
    if not login:
        console.print("[red]Error: Missing argument 'USERNAME'[/red]")
        console.print("Use --example to see usage examples.")
        sys.exit(1)

    safe_path = _sanitize_output_path(output) if output else None

    try:
        wrapped, _ = _load_stats(login, settings)
        path = _export(Exporter(wrapped, settings.output_dir), output_format, safe_path)
    except (GitHubError, ExportError) as e:
        _fail(e)

    console.print(f"[green]Exported to {path}[/green]")
    if open_file:
        open_path(path)


@main.command()
@click.argument("username", required=False)
@fetch_options
@click.option(
    "--platform",
    type=click.Choice(["twitter", "linkedin"]),
    default="twitter",
    help="Where to share",
)
@click.option("--no-copy", is_flag=True, help="Don't copy the URL to the clipboard")
@click.option("--open", "open_url", is_flag=True, help="Open the share page in a browser")
def share(
    username: Optional[str],
    year: Optional[int],
    token: Optional[str],
    backend: Optional[str],
    example: bool,
    platform: str,
    no_copy: bool,
    open_url: bool,
):
    """Get a share link for your GitHub Wrapped."""
    if example:
        show_examples("share")
        return

    settings = _settings(username, year, token, backend)
    login = _resolve_username(settings, interactive=False)
    if not login:
        console.print("[red]Error: Missing argument 'USERNAME'[/red]")
        console.print("Use --example to see usage examples.")
        sys.exit(1)

    try:
        wrapped, _ = _load_stats(login, settings)
    except GitHubError as e:
        _fail(e)

    exporter = Exporter(wrapped, settings.output_dir)
    console.print(exporter.share_text())
    console.print()

    if platform == "linkedin":
        path = exporter.save_share_links()
        console.print(f"[green]Share links written to {path}[/green]")
        url = exporter.linkedin_share_url()
    else:
        url = exporter.twitter_share_url()

    console.print("[bold]Share your year:[/bold]")
    # Plain print so Rich does not wrap or truncate the URL
    print(url)

    if not no_copy:
        _copy_to_clipboard(url)
    if open_url:
        open_path(url)


if __name__ == "__main__":
    main()
