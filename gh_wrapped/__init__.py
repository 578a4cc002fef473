"""GitHub Wrapped - Your year on GitHub, in the terminal.

This package fetches a user's activity from the GitHub REST or GraphQL API,
derives streaks, languages, an archetype, achievements and insights, and
presents them as a terminal slideshow with PNG/SVG/JSON export.

Modules:
    models: Data classes for fetched activity and computed stats
    api, rest, graphql: GitHub API clients
    fetch: Client selection, parallel fetching and the token retry loop
    analytics: Pure statistics derivation
    tiers: Tier scoring for the exported card
    slides, terminal: Slideshow rendering and keyboard loop
    export, export_worker: Card export and share links
    config: Settings from flags, environment and .env
    cli: Command-line interface

Example:
    >>> from gh_wrapped import create_client, fetch_activity, generate_wrapped_stats
    >>> activity = fetch_activity(create_client("octocat"), 2025)
    >>> stats = generate_wrapped_stats(activity)
    >>> print(stats.archetype.name, stats.longest_streak)
"""

__version__ = "0.1.0"

# Re-export commonly used symbols for convenience
from .analytics import (
    calculate_achievements,
    calculate_busiest_day,
    calculate_peak_hour,
    calculate_streaks,
    calculate_top_languages,
    calculate_total_lines_changed,
    determine_archetype,
    find_most_active_repo,
    generate_comparison_stats,
    generate_insights,
    generate_wrapped_stats,
    generate_year_comparison,
)
from .config import Settings, detect_github_username, load_settings
from .errors import (
    AuthenticationRequiredError,
    ExportError,
    GitHubError,
    InvalidTokenError,
    NoActivityError,
    RateLimitError,
    UserNotFoundError,
)
from .export import Exporter
from .fetch import create_client, fetch_activity, fetch_with_token_retry
from .graphql import GraphQLClient
from .models import (
    Achievement,
    ActivityData,
    Archetype,
    Commit,
    ComparisonStats,
    ContributionDay,
    GitHubUser,
    Language,
    LinesChanged,
    Repository,
    WrappedStats,
    YearComparison,
)
from .rest import RestClient
from .slides import Slideshow
from .tiers import calculate_score, determine_tier

__all__ = [
    # Version
    "__version__",
    # Data models
    "Achievement",
    "ActivityData",
    "Archetype",
    "Commit",
    "ComparisonStats",
    "ContributionDay",
    "GitHubUser",
    "Language",
    "LinesChanged",
    "Repository",
    "WrappedStats",
    "YearComparison",
    # Errors
    "GitHubError",
    "UserNotFoundError",
    "InvalidTokenError",
    "AuthenticationRequiredError",
    "RateLimitError",
    "NoActivityError",
    "ExportError",
    # Configuration
    "Settings",
    "load_settings",
    "detect_github_username",
    # Fetching
    "RestClient",
    "GraphQLClient",
    "create_client",
    "fetch_activity",
    "fetch_with_token_retry",
    # Analytics
    "calculate_streaks",
    "calculate_top_languages",
    "calculate_peak_hour",
    "determine_archetype",
    "calculate_achievements",
    "generate_insights",
    "calculate_busiest_day",
    "find_most_active_repo",
    "calculate_total_lines_changed",
    "generate_wrapped_stats",
    "generate_year_comparison",
    "generate_comparison_stats",
    "calculate_score",
    "determine_tier",
    # Presentation
    "Slideshow",
    "Exporter",
]
