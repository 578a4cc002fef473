"""Statistics derivation for GitHub Wrapped.

Everything here is a pure function over already-fetched data:
- calculate_streaks(): Longest and current contribution streaks
- calculate_top_languages(): Top languages by share
- calculate_peak_hour(): Hour of day with most commits
- determine_archetype(): Developer archetype from the activity pattern
- calculate_achievements(): Unlocked badges from the achievement catalog
- generate_insights(): Short one-line observations
- calculate_busiest_day(): Weekday with most contributions
- find_most_active_repo(): Repository with most commits
- calculate_total_lines_changed(): PR lines, or a repo size estimate
- generate_wrapped_stats(): All of the above, bundled into WrappedStats
- generate_year_comparison() / generate_comparison_stats(): Year-over-year growth
"""

from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .constants import (
    DEFAULT_LANGUAGE_COLOR,
    LANGUAGE_COLORS,
    LANGUAGE_SPECIALIST_PERCENT,
    MAX_INSIGHTS,
    MERGE_MASTER_PR_THRESHOLD,
    TOP_LANGUAGES_LIMIT,
    TOP_REPOS_LIMIT,
    WEEKDAY_NAMES,
    WEEKEND_RATIO_THRESHOLD,
)
from .models import (
    Achievement,
    ActivityData,
    Archetype,
    Commit,
    ComparisonStats,
    ContributionDay,
    Language,
    LinesChanged,
    Repository,
    WrappedStats,
    YearComparison,
)
from .tiers import calculate_score, determine_tier
from .utils import format_date_range, year_window


def calculate_streaks(contributions: Sequence[ContributionDay]) -> Tuple[int, int]:
    """Calculate the longest and current streaks of active days.

    A day is active when its count is positive. The current streak counts
    back from the last day of the calendar and stops at the first idle day.

    Args:
        contributions: Daily contribution counts (any order)

    Returns:
        Tuple of (longest, current)

    Example:
        >>> days = [ContributionDay(date(2025, 1, d), c) for d, c in [(1, 1), (2, 3), (3, 0), (4, 2)]]
        >>> calculate_streaks(days)
        (2, 1)
    """
    ordered = sorted(contributions, key=lambda day: day.date)

    longest = 0
    run = 0
    for day in ordered:
        if day.count > 0:
            run += 1
            longest = max(longest, run)
        else:
            run = 0

    current = 0
    for day in reversed(ordered):
        if day.count <= 0:
            break
        current += 1

    return longest, current


def language_color(name: str) -> str:
    return LANGUAGE_COLORS.get(name, DEFAULT_LANGUAGE_COLOR)


def calculate_top_languages(
    language_bytes: Dict[str, int], limit: int = TOP_LANGUAGES_LIMIT
) -> List[Language]:
    """Rank languages by byte count.

    Args:
        language_bytes: Language name -> bytes
        limit: Maximum number of languages to return

    Returns:
        Languages sorted by bytes (descending) with their percentage of the
        total; empty if there is no language data
    """
    total = sum(language_bytes.values())
    if total <= 0:
        return []

    ranked = sorted(language_bytes.items(), key=lambda item: item[1], reverse=True)
    return [
        Language(
            name=name,
            bytes=count,
            percentage=count / total * 100,
            color=language_color(name),
        )
        for name, count in ranked[:limit]
    ]


def calculate_peak_hour(commits: Sequence[Commit]) -> int:
    """Find the local hour of day with the most commits (0 with no commits)."""
    hours = [0] * 24
    for commit in commits:
        hours[commit.timestamp.astimezone().hour] += 1
    # index() returns the earliest hour on ties
    return hours.index(max(hours))


ARCHETYPES = {
    "midnight": Archetype(
        name="The Midnight Warrior",
        emoji="🌙",
        description=(
            "You're a nocturnal coding machine who thrives in the quiet hours. "
            "Your best work happens after everyone else sleeps."
        ),
        traits=["Most active: 2-4 AM", "Prefers solo deep work", "Peak creativity after dark"],
    ),
    "early_bird": Archetype(
        name="The Early Bird",
        emoji="🌅",
        description=(
            "You start coding before the world wakes up. "
            "Your morning productivity is legendary."
        ),
        traits=["Most active: 5-9 AM", "Morning person", "Focused before distractions"],
    ),
    "weekend": Archetype(
        name="The Weekend Warrior",
        emoji="⚔️",
        description=(
            "Weekends are for side projects and open source. "
            "You code for passion, not just work."
        ),
        traits=["Active on weekends", "Side project enthusiast", "Passionate coder"],
    ),
    "merge_master": Archetype(
        name="The Merge Master",
        emoji="🔀",
        description=(
            "You live for collaboration and code reviews. "
            "Your PRs are always well-documented and mergeable."
        ),
        traits=["High PR activity", "Team player", "Code review champion"],
    ),
    "consistent": Archetype(
        name="The Consistent Coder",
        emoji="💻",
        description=(
            "Steady, reliable, and consistent. "
            "You show up every day and get things done."
        ),
        traits=["Regular contributions", "Reliable workflow", "Balanced approach"],
    ),
}


def _is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def determine_archetype(
    peak_hour: int,
    total_commits: int,
    total_prs: int,
    contributions: Sequence[ContributionDay],
) -> Archetype:
    """Pick the developer archetype.

    The rules are checked in order and the first match wins:
    peak hour 2-5 AM, peak hour 5-9 AM, active weekend days above 40% of all
    calendar days, more than 50 PRs, and finally the default.

    Args:
        peak_hour: Hour of day with most commits
        total_commits: Commits in the year (unused by the current rules)
        total_prs: Pull requests opened
        contributions: Daily contribution calendar

    Returns:
        A copy of the matching Archetype
    """
    if 2 <= peak_hour <= 5:
        key = "midnight"
    elif 5 <= peak_hour <= 9:
        key = "early_bird"
    else:
        active_weekend_days = sum(
            1 for day in contributions if day.count > 0 and _is_weekend(day.date)
        )
        if active_weekend_days > len(contributions) * WEEKEND_RATIO_THRESHOLD:
            key = "weekend"
        elif total_prs > MERGE_MASTER_PR_THRESHOLD:
            key = "merge_master"
        else:
            key = "consistent"

    archetype = ARCHETYPES[key]
    return Archetype.from_dict(archetype.to_dict())


@dataclass(frozen=True)
class AchievementRule:
    """A catalog entry: the badge and the predicate that unlocks it."""

    achievement: Achievement
    unlocked: Callable[[WrappedStats], bool]


def _rule(
    id: str,
    name: str,
    description: str,
    emoji: str,
    rarity: str,
    unlocked: Callable[[WrappedStats], bool],
) -> AchievementRule:
    return AchievementRule(Achievement(id, name, description, emoji, rarity), unlocked)


ACHIEVEMENTS: List[AchievementRule] = [
    # Mythic
    _rule("legend", "Living Legend", "365-day streak - committed every single day",
          "👑", "mythic", lambda s: s.longest_streak >= 365),
    _rule("ultra-prolific", "Ultra Prolific", "5000+ commits this year",
          "⚡", "mythic", lambda s: s.total_commits >= 5000),
    _rule("viral-sensation", "Viral Sensation", "10000+ stars earned",
          "💫", "mythic", lambda s: s.total_stars >= 10000),
    # Legendary
    _rule("century-club", "Century Club", "100+ day contribution streak",
          "🌟", "legendary", lambda s: s.longest_streak >= 100),
    _rule("commit-machine", "Commit Machine", "1000+ commits this year",
          "💪", "legendary", lambda s: s.total_commits >= 1000),
    _rule("super-star", "GitHub Super Star", "1000+ stars earned",
          "🌠", "legendary", lambda s: s.total_stars >= 1000),
    # Epic
    _rule("half-year-streak", "Half Year Hero", "180+ day contribution streak",
          "🔥", "epic", lambda s: s.longest_streak >= 180),
    _rule("pr-champion", "PR Champion", "200+ PRs created",
          "🏆", "epic", lambda s: s.total_prs >= 200),
    _rule("mega-productive", "Mega Productive", "2500+ commits this year",
          "🚀", "epic", lambda s: s.total_commits >= 2500),
    _rule("celebrity", "Open Source Celebrity", "500+ stars earned",
          "✨", "epic", lambda s: s.total_stars >= 500),
    # Rare
    _rule("night-owl", "Night Owl", "Peak coding hours after midnight",
          "🦉", "rare", lambda s: 0 <= s.peak_hour <= 5),
    _rule("pr-hero", "Pull Request Hero", "100+ PRs created",
          "🔀", "rare", lambda s: s.total_prs >= 100),
    _rule("polyglot", "Polyglot", "Used 5+ programming languages",
          "🗣️", "rare", lambda s: len(s.top_languages) >= 5),
    _rule("popular", "Rising Star", "100+ stars earned",
          "⭐", "rare", lambda s: s.total_stars >= 100),
    _rule("prolific", "Prolific Coder", "500+ commits this year",
          "💻", "rare", lambda s: s.total_commits >= 500),
    # Common
    _rule("getting-started", "Getting Started", "Made your first commit of the year",
          "👨‍💻", "common", lambda s: s.total_commits > 0),
    _rule("consistent", "Consistent Contributor", "30+ day streak",
          "📅", "common", lambda s: s.longest_streak >= 30),
    _rule("active", "Active Developer", "100+ commits this year",
          "🔨", "common", lambda s: s.total_commits >= 100),
    _rule("collaborator", "Team Collaborator", "20+ PRs created",
          "🤝", "common", lambda s: s.total_prs >= 20),
    _rule("noticed", "Getting Noticed", "10+ stars earned",
          "🌟", "common", lambda s: s.total_stars >= 10),
]


def calculate_achievements(stats: WrappedStats) -> List[Achievement]:
    """Evaluate the achievement catalog against computed stats.

    Args:
        stats: Stats with totals, streaks, peak hour and languages filled in

    Returns:
        Unlocked achievements in catalog order (rarest first)
    """
    return [rule.achievement for rule in ACHIEVEMENTS if rule.unlocked(stats)]


def generate_insights(stats: WrappedStats) -> List[str]:
    """Generate up to three one-line observations about the year.

    Args:
        stats: Stats with totals, streaks, peak hour and languages filled in

    Returns:
        Insight strings, most characteristic first
    """
    insights: List[str] = []

    if 0 <= stats.peak_hour <= 5:
        insights.append("🌙 Night owl - 100% of commits after midnight")
    elif 9 <= stats.peak_hour <= 17:
        insights.append("☀️ 9-to-5 grinder - peak productivity during work hours")
    elif 18 <= stats.peak_hour <= 23:
        insights.append("🌆 Evening coder - most active after dinner")

    if stats.top_languages:
        top = stats.top_languages[0]
        if top.percentage > LANGUAGE_SPECIALIST_PERCENT:
            insights.append(f"💎 {top.name} specialist - {top.percentage:.0f}% of your code")
        elif len(stats.top_languages) >= 5:
            insights.append(
                f"🗣️ True polyglot - mastered {len(stats.top_languages)} languages"
            )

    if stats.total_commits:
        if stats.avg_commits_per_day >= 5:
            insights.append(
                f"🔥 Commit machine - averaging {stats.avg_commits_per_day:.1f} commits/day"
            )
        elif stats.avg_commits_per_day >= 1:
            insights.append(
                f"✨ Consistent contributor - {stats.avg_commits_per_day:.1f} commits/day"
            )

    if stats.longest_streak >= 7:
        insights.append(f"⚡ {stats.longest_streak}-day streak - dedication level: legendary")

    if stats.total_prs >= 20:
        insights.append(f"🤝 Collaboration king - {stats.total_prs} PRs merged")

    if stats.total_stars >= 50:
        insights.append(f"⭐ Community favorite - {stats.total_stars} stars earned")

    return insights[:MAX_INSIGHTS]


def calculate_busiest_day(contributions: Sequence[ContributionDay]) -> str:
    """Find the weekday with the most contributions.

    Ties go to the earliest day in Sunday-first order.
    """
    totals = [0] * 7
    for day in contributions:
        if day.count > 0:
            # date.weekday() is Monday=0; shift to Sunday=0
            totals[(day.date.weekday() + 1) % 7] += day.count
    return WEEKDAY_NAMES[totals.index(max(totals))]


def find_most_active_repo(commits: Sequence[Commit], repos: Sequence[Repository]) -> str:
    """Name the repository with the most commits.

    Returns:
        Repository name; "N/A" without repositories, the first repository
        when there are no commits
    """
    if not repos:
        return "N/A"
    if not commits:
        return repos[0].name

    counts = Counter(commit.repository or "unknown" for commit in commits)
    # most_common keeps first-seen order on ties
    return counts.most_common(1)[0][0]


def calculate_total_lines_changed(
    repos: Sequence[Repository], lines_changed: Optional[LinesChanged] = None
) -> int:
    """Total PR lines changed, or the summed repository size as an estimate."""
    if lines_changed is not None:
        return lines_changed.total
    return sum(repo.size for repo in repos)


def _days_in_window(year: int, today: Optional[date] = None) -> int:
    start, end = year_window(year, today)
    days = (end - start).days
    # Today counts as a started day while the year is running
    if end == (today or date.today()):
        days += 1
    return max(days, 1)


def generate_wrapped_stats(
    activity: ActivityData, today: Optional[date] = None
) -> WrappedStats:
    """Compute the full year-in-review from fetched activity.

    Args:
        activity: Data returned by fetch_activity()
        today: Override for the current date (default: date.today())

    Returns:
        WrappedStats with archetype, achievements, insights and tier

    Example:
        >>> activity = fetch_activity(create_client("octocat"), 2025)
        >>> stats = generate_wrapped_stats(activity)
        >>> print(stats.archetype.name, stats.tier)
    """
    start, end = year_window(activity.year, today)
    longest, current = calculate_streaks(activity.contributions)
    total_commits = activity.total_commits or len(activity.commits)
    top_repos = sorted(
        activity.repositories, key=lambda repo: repo.stargazers_count, reverse=True
    )[:TOP_REPOS_LIMIT]

    stats = WrappedStats(
        user=activity.user,
        year=activity.year,
        date_range=format_date_range(start, end),
        total_commits=total_commits,
        total_prs=activity.total_prs,
        total_issues=activity.total_issues,
        total_stars=sum(repo.stargazers_count for repo in activity.repositories),
        total_repos=activity.user.public_repos,
        total_reviews=activity.total_reviews,
        longest_streak=longest,
        current_streak=current,
        top_languages=calculate_top_languages(activity.language_bytes),
        top_repos=top_repos,
        contributions=list(activity.contributions),
        peak_hour=calculate_peak_hour(activity.commits),
        busiest_day=calculate_busiest_day(activity.contributions),
        most_active_repo=find_most_active_repo(activity.commits, activity.repositories),
        total_lines_changed=calculate_total_lines_changed(
            activity.repositories, activity.lines_changed
        ),
        avg_commits_per_day=total_commits / _days_in_window(activity.year, today),
    )

    stats.archetype = determine_archetype(
        stats.peak_hour, stats.total_commits, stats.total_prs, stats.contributions
    )
    stats.achievements = calculate_achievements(stats)
    stats.insights = generate_insights(stats)
    stats.score = calculate_score(stats)
    stats.tier = determine_tier(stats.score)
    return stats


def generate_year_comparison(activity: ActivityData) -> YearComparison:
    """Summarize one year's activity for a year-over-year comparison."""
    longest, _ = calculate_streaks(activity.contributions)
    return YearComparison(
        year=activity.year,
        total_commits=activity.total_commits or len(activity.commits),
        total_prs=activity.total_prs,
        total_issues=activity.total_issues,
        longest_streak=longest,
        top_languages=calculate_top_languages(activity.language_bytes),
        peak_hour=calculate_peak_hour(activity.commits),
    )


def calculate_growth(old: int, current: int) -> int:
    """Percentage growth, rounded; 100 from zero to something, 0 from zero to zero."""
    if old == 0:
        return 100 if current > 0 else 0
    return round((current - old) / old * 100)


def generate_comparison_stats(
    previous: YearComparison, current: YearComparison
) -> ComparisonStats:
    """Compare two years' headline numbers.

    Args:
        previous: The earlier year
        current: The later year

    Returns:
        ComparisonStats with growth keyed by commits, prs, issues and streak
    """
    return ComparisonStats(
        previous=previous,
        current=current,
        growth={
            "commits": calculate_growth(previous.total_commits, current.total_commits),
            "prs": calculate_growth(previous.total_prs, current.total_prs),
            "issues": calculate_growth(previous.total_issues, current.total_issues),
            "streak": calculate_growth(previous.longest_streak, current.longest_streak),
        },
    )
