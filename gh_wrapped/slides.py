"""Slide rendering for the GitHub Wrapped slideshow.

Each slide is a rich renderable built from WrappedStats. The Slideshow class
is the navigation state machine; it knows nothing about the terminal, which
lives in terminal.py.

Slides, in order:
    Contributions, Languages, Archetype, Streak, PRs & Issues, Stars,
    Achievements, Year Comparison (optional), Export
"""

from typing import Callable, List, Optional

from rich import box
from rich.align import Align
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .constants import (
    LANGUAGE_BAR_WIDTH,
    MAX_ACHIEVEMENTS_SHOWN,
    RARITY_STYLES,
    SLIDE_HEIGHT,
    SLIDE_WIDTH,
)
from .models import ComparisonStats, WrappedStats
from .utils import format_hour, format_number, safe_sparkline

# Actions returned by Slideshow.handle_key()
NEXT = "next"
PREV = "prev"
QUIT = "quit"
EXPORT_PNG = "export_png"
EXPORT_SVG = "export_svg"
EXPORT_JSON = "export_json"
SHARE_TWITTER = "share_twitter"
SHARE_LINKEDIN = "share_linkedin"

# Actions that end the slideshow
FINAL_ACTIONS = {QUIT, EXPORT_PNG, EXPORT_SVG, EXPORT_JSON, SHARE_TWITTER, SHARE_LINKEDIN}

EXPORT_KEYS = {
    "p": EXPORT_PNG,
    "s": EXPORT_SVG,
    "j": EXPORT_JSON,
    "t": SHARE_TWITTER,
    "l": SHARE_LINKEDIN,
    "q": QUIT,
    "esc": QUIT,
}

# Language bar colours by rank
LANGUAGE_BAR_COLORS = ["#FF6B6B", "#FFA500", "#FFD700", "#4ECDC4", "#4A9EFF"]

MONTH_LABELS = "J F M A M J J A S O N D"


def _centered(*lines: RenderableType) -> RenderableType:
    return Align.center(Group(*lines), vertical="middle")


def _monthly_totals(stats: WrappedStats) -> List[int]:
    months = [0] * 12
    for day in stats.contributions:
        months[day.date.month - 1] += day.count
    return months


def contributions_slide(stats: WrappedStats) -> RenderableType:
    table = Table.grid(padding=(0, 4))
    table.add_column(style="cyan", min_width=28)
    table.add_column(style="bold green", justify="right", min_width=20)
    table.add_row("💻 Total Commits", str(stats.total_commits))
    table.add_row("📊 Pull Requests", str(stats.total_prs))
    table.add_row("🐛 Issues Opened", str(stats.total_issues))
    table.add_row("🔥 Daily Average", f"{stats.avg_commits_per_day:.1f} commits/day")

    lines: List[RenderableType] = [
        Align.center(Text(f"@{stats.user.login.upper()}", style="dim green")),
        Text(),
        Align.center(Text(f"IN {stats.year}, YOU MADE", style="bold white")),
        Align.center(Text(f"{format_number(stats.total_commits)} COMMITS", style="bold green")),
        Text(),
        Align.center(Panel(table, box=box.ROUNDED, border_style="green", padding=(1, 4))),
    ]

    sparkline = safe_sparkline(_monthly_totals(stats))
    if sparkline:
        lines.append(Align.center(Text(sparkline, style="green")))
        lines.append(Align.center(Text(MONTH_LABELS, style="dim")))
    return _centered(*lines)


def language_bar(percentage: float, color: str, width: int = LANGUAGE_BAR_WIDTH) -> Text:
    """Render a horizontal bar filled to a percentage."""
    filled = int(percentage / 100 * width)
    bar = Text("█" * filled, style=color)
    bar.append("░" * (width - filled), style="dim")
    return bar


def languages_slide(stats: WrappedStats) -> RenderableType:
    lines: List[RenderableType] = [
        Align.center(Text("💻 YOUR TOP LANGUAGES", style="bold cyan")),
        Align.center(Text(f"Most used in {stats.year}", style="dim white")),
        Text(),
    ]
    if not stats.top_languages:
        lines.append(Align.center(Text("No language data found", style="dim")))
        return _centered(*lines)

    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold white", min_width=14)
    table.add_column()
    table.add_column(justify="right")
    for i, language in enumerate(stats.top_languages):
        color = LANGUAGE_BAR_COLORS[i % len(LANGUAGE_BAR_COLORS)]
        table.add_row(
            language.name,
            language_bar(language.percentage, color),
            Text(f"{language.percentage:.1f}%", style=f"bold {color}"),
        )
    lines.append(Align.center(table))
    return _centered(*lines)


def coder_badge(peak_hour: int) -> str:
    if peak_hour >= 22 or peak_hour <= 5:
        return "🌙 NOCTURNAL CODER"
    return "☀️ DAYTIME CODER"


def archetype_slide(stats: WrappedStats) -> RenderableType:
    archetype = stats.archetype
    if archetype is None:
        return _centered(Align.center(Text("No archetype", style="dim")))

    return _centered(
        Align.center(Text(archetype.emoji)),
        Text(),
        Align.center(Text("YOU ARE A", style="bold cyan")),
        Align.center(Text(archetype.name.upper(), style="bold green")),
        Text(),
        Align.center(Text(archetype.description, style="dim white", justify="center"), width=70),
        Text(),
        Align.center(Text(" • ".join(archetype.traits), style="cyan")),
        Text(),
        Align.center(
            Panel(coder_badge(stats.peak_hour), box=box.ROUNDED, border_style="green", expand=False)
        ),
    )


def streak_slide(stats: WrappedStats) -> RenderableType:
    table = Table.grid(padding=(0, 1))
    table.add_column(style="cyan")
    table.add_column(style="bold green")
    table.add_row("⏰ Peak Hour:", format_hour(stats.peak_hour))
    table.add_row("📅 Busiest Day:", stats.busiest_day or "N/A")
    table.add_row("🎯 Most Active Repo:", stats.most_active_repo)

    return _centered(
        Align.center(Text("🔥 YOUR LONGEST STREAK", style="bold cyan")),
        Text(),
        Align.center(Text(f"{stats.longest_streak} DAYS", style="bold dark_orange")),
        Align.center(Text(f"Current streak: {stats.current_streak} days", style="dim")),
        Text(),
        Align.center(Panel(table, box=box.ROUNDED, border_style="green", expand=False)),
    )


def prs_issues_slide(stats: WrappedStats) -> RenderableType:
    counts = Table.grid(padding=(0, 8))
    counts.add_column(justify="center")
    counts.add_column(justify="center")
    counts.add_row(
        Text(str(stats.total_prs), style="bold magenta"),
        Text(str(stats.total_issues), style="bold cyan"),
    )
    counts.add_row(Text("PULL REQ", style="dim"), Text("ISSUES", style="dim"))

    lines: List[RenderableType] = [
        Align.center(Text("PULL REQUESTS & ISSUES", style="bold green")),
        Text(),
        Align.center(counts),
        Text(),
        Align.center(Text("📊 Contributions to collaboration", style="green")),
    ]
    if stats.total_reviews:
        lines.append(Align.center(Text(f"👀 {stats.total_reviews} code reviews", style="cyan")))
    lines.append(Align.center(Text("Building better code, one PR at a time", style="dim")))
    return _centered(*lines)


def stars_slide(stats: WrappedStats) -> RenderableType:
    lines: List[RenderableType] = [
        Align.center(Text("YOUR IMPACT", style="bold green")),
        Text(),
        Align.center(Text(f"⭐ {stats.total_stars} ⭐", style="bold yellow")),
        Align.center(Text("TOTAL STARS", style="bold cyan")),
        Text(),
        Align.center(Text(f"🌟 Across {stats.total_repos} repositories", style="green")),
    ]
    if stats.top_repos and stats.top_repos[0].stargazers_count:
        top = stats.top_repos[0]
        lines.append(
            Align.center(Text(f"Top repo: {top.name} ({top.stargazers_count} ⭐)", style="cyan"))
        )
    lines.append(
        Align.center(Text(f"Your code inspired {stats.total_stars} developers!", style="dim"))
    )
    return _centered(*lines)


def rarity_label(rarity: str) -> Text:
    style, symbol = RARITY_STYLES.get(rarity, RARITY_STYLES["common"])
    return Text(f"[{symbol} {rarity.upper()}]", style=style)


def achievements_slide(stats: WrappedStats) -> RenderableType:
    lines: List[RenderableType] = [
        Align.center(Text("🏆 ACHIEVEMENTS UNLOCKED", style="bold yellow")),
        Align.center(Text(f"{len(stats.achievements)} total badges earned", style="dim green")),
        Text(),
    ]
    table = Table(box=box.ROUNDED, border_style="green", show_header=False, width=85)
    table.add_column(width=3)
    table.add_column(ratio=1)
    table.add_column(justify="right")
    for achievement in stats.achievements[:MAX_ACHIEVEMENTS_SHOWN]:
        name = Text(achievement.name, style="bold yellow")
        name.append(f"\n{achievement.description}", style="dim")
        table.add_row(achievement.emoji, name, rarity_label(achievement.rarity))
    if stats.achievements:
        lines.append(Align.center(table))
    else:
        lines.append(Align.center(Text("Keep coding to unlock badges!", style="dim")))
    return _centered(*lines)


def growth_style(value: int) -> str:
    if value > 0:
        return "green"
    if value < 0:
        return "red"
    return "yellow"


def growth_symbol(value: int) -> str:
    if value > 0:
        return "↗"
    if value < 0:
        return "↘"
    return "→"


def comparison_slide(comparison: ComparisonStats) -> RenderableType:
    previous, current, growth = comparison.previous, comparison.current, comparison.growth
    table = Table.grid(padding=(0, 2))
    table.add_column(style="white", min_width=14)
    table.add_column(justify="right", style="dim")
    table.add_column()
    table.add_column(style="bold green")
    table.add_column()

    rows = [
        ("💻 Commits:", previous.total_commits, current.total_commits, growth.get("commits", 0)),
        ("🔀 PRs:", previous.total_prs, current.total_prs, growth.get("prs", 0)),
        ("🐛 Issues:", previous.total_issues, current.total_issues, growth.get("issues", 0)),
        ("🔥 Streak:", previous.longest_streak, current.longest_streak, growth.get("streak", 0)),
    ]
    for label, old, new, pct in rows:
        sign = "+" if pct > 0 else ""
        table.add_row(
            label,
            str(old),
            "→",
            str(new),
            Text(f"({sign}{pct}% {growth_symbol(pct)})", style=growth_style(pct)),
        )

    return _centered(
        Align.center(Text("📊 YEAR OVER YEAR COMPARISON", style="bold cyan")),
        Align.center(
            Text(f"{previous.year} vs {current.year} - Your Growth Story", style="dim white")
        ),
        Text(),
        Align.center(table),
    )


def export_slide(stats: WrappedStats) -> RenderableType:
    menu = Table.grid(padding=(0, 1))
    menu.add_column()
    menu.add_column(style="white")
    menu.add_row(Text("[P]", style="bold green"), "Export as PNG (Recommended)")
    menu.add_row(Text("[S]", style="bold cyan"), "Export as SVG (Vector)")
    menu.add_row(Text("[J]", style="bold cyan"), "Export as JSON")
    menu.add_row(Text("[T]", style="bold green"), "Share on Twitter")
    menu.add_row(Text("[L]", style="bold green"), "Share on LinkedIn")
    menu.add_row(Text("[Q]", style="bold red"), "Exit")

    return _centered(
        Align.center(Text("READY TO SHARE?", style="bold green")),
        Align.center(
            Text(
                f"{stats.total_commits} commits • {stats.total_prs} PRs • "
                f"{stats.total_repos} repos",
                style="white",
            )
        ),
        Align.center(
            Text(
                f"{stats.total_issues} issues • "
                f"{format_number(stats.total_lines_changed)} lines changed",
                style="dim green",
            )
        ),
        Text(),
        Align.center(
            Panel(
                menu,
                title="Press a key",
                box=box.ROUNDED,
                border_style="cyan",
                padding=(1, 3),
                width=60,
            )
        ),
    )


SlideBuilder = Callable[[], RenderableType]


class Slideshow:
    """Navigation state for the slide carousel.

    Attributes:
        stats: Stats every slide is rendered from
        comparison: Optional year-over-year comparison (adds a slide)
        index: Position of the current slide

    Example:
        >>> show = Slideshow(stats)
        >>> show.handle_key("right")
        'next'
        >>> show.index
        1
    """

    def __init__(self, stats: WrappedStats, comparison: Optional[ComparisonStats] = None):
        self.stats = stats
        self.comparison = comparison
        self.index = 0
        self.slides: List[SlideBuilder] = [
            lambda: contributions_slide(stats),
            lambda: languages_slide(stats),
            lambda: archetype_slide(stats),
            lambda: streak_slide(stats),
            lambda: prs_issues_slide(stats),
            lambda: stars_slide(stats),
            lambda: achievements_slide(stats),
        ]
        if comparison is not None:
            self.slides.append(lambda: comparison_slide(comparison))
        self.slides.append(lambda: export_slide(stats))

    @property
    def total(self) -> int:
        return len(self.slides)

    @property
    def on_export_slide(self) -> bool:
        return self.index == self.total - 1

    def handle_key(self, key: str) -> Optional[str]:
        """Apply a key press.

        Args:
            key: Normalized key name from read_key() ("left", "right",
                "enter", "esc", " ", or a single character)

        Returns:
            The resulting action, or None if the key does nothing here
        """
        key = key.lower() if len(key) == 1 else key

        if self.on_export_slide:
            if key == "left":
                return self._move(-1)
            return EXPORT_KEYS.get(key)

        if key in ("right", " ", "enter"):
            return self._move(1)
        if key == "left":
            return self._move(-1)
        if key in ("esc", "q"):
            return QUIT
        return None

    def _move(self, step: int) -> Optional[str]:
        target = min(max(self.index + step, 0), self.total - 1)
        if target == self.index:
            return None
        self.index = target
        return NEXT if step > 0 else PREV

    def render(self) -> RenderableType:
        """Render the current slide inside the frame."""
        return render_frame(self.slides[self.index](), self.stats.year, self.index, self.total)


def progress_dots(index: int, total: int) -> Text:
    dots = Text()
    for i in range(total):
        if i == index:
            dots.append("■ ", style="green")
        else:
            dots.append("□ ", style="dim")
    return dots


def render_frame(content: RenderableType, year: int, index: int, total: int) -> RenderableType:
    """Wrap a slide with the title bar, side arrows and progress dots."""
    on_last = index == total - 1
    header = Table.grid(expand=True)
    header.add_column(ratio=1)
    header.add_column(ratio=2, justify="center")
    header.add_column(ratio=1, justify="right")
    header.add_row(
        Text("[ESC] Exit", style="dim red"),
        Text(f"GITHUB WRAPPED {year}", style="bold green"),
        Text("Press P/S/J/T/L/Q", style="dim cyan") if on_last else Text(""),
    )

    body = Table.grid(expand=True)
    body.add_column(width=3, vertical="middle")
    body.add_column(ratio=1)
    body.add_column(width=3, vertical="middle")
    body.add_row(
        Text("←", style="bold cyan") if index > 0 else Text(""),
        content,
        Text("→", style="bold cyan") if not on_last else Text(""),
    )

    return Panel(
        Group(header, Text(), body),
        subtitle=progress_dots(index, total),
        box=box.DOUBLE,
        border_style="green",
        width=SLIDE_WIDTH,
        height=SLIDE_HEIGHT,
    )
