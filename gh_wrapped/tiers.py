"""Tier scoring for GitHub Wrapped.

The tier picks the colour theme of the exported card:
ORIGIN (green) below 1000 points, PRIME (cyan) from 1000, MASTER (gold)
from 3000.
"""

import math

from .constants import SCORE_WEIGHTS, TIER_MASTER, TIER_PRIME, TIER_THEMES
from .utils import classify


def calculate_score(stats) -> int:
    """Score a year of activity.

    score = commits + 5 * PRs + 2 * repos + 3 * stars
            + 10 * longest streak + 8 * current streak

    Args:
        stats: WrappedStats (or anything with the same total fields)

    Returns:
        Score rounded down to an integer
    """
    score = (
        stats.total_commits * SCORE_WEIGHTS["commits"]
        + stats.total_prs * SCORE_WEIGHTS["prs"]
        + stats.total_repos * SCORE_WEIGHTS["repos"]
        + stats.total_stars * SCORE_WEIGHTS["stars"]
        + stats.longest_streak * SCORE_WEIGHTS["longest_streak"]
        + stats.current_streak * SCORE_WEIGHTS["current_streak"]
    )
    return math.floor(score)


def determine_tier(score: int) -> str:
    """Map a score to origin, prime or master.

    Example:
        >>> determine_tier(1500)
        'prime'
    """
    return classify(score, [(TIER_MASTER, "master"), (TIER_PRIME, "prime")], "origin")


def tier_name(tier: str) -> str:
    return tier.upper()


def tier_theme(tier: str) -> dict:
    """Colours for a tier (accent, secondary, label); origin if unknown."""
    return TIER_THEMES.get(tier, TIER_THEMES["origin"])
