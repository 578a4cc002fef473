"""Constants for GitHub Wrapped.

Centralizes API endpoints, fetch limits, and the thresholds used for
archetypes, achievements, insights and tiers.
"""

# GitHub API
GITHUB_API_URL = "https://api.github.com"
GITHUB_GRAPHQL_URL = "https://api.github.com/graphql"
USER_AGENT = "gh-wrapped-cli"
TOKEN_URL = "https://github.com/settings/tokens"
TOKEN_NEW_URL = (
    "https://github.com/settings/tokens/new"
    "?description=GitHub%20Wrapped&scopes=read:user"
)

# Fetch limits
REQUEST_TIMEOUT = 15  # seconds
AVATAR_TIMEOUT = 5  # seconds
PER_PAGE = 100
MAX_REPO_PAGES = 10  # 10 x 100 repositories at most
MAX_COMMIT_REPOS = 10  # Commits are read from the most recently updated repos
MAX_FETCH_WORKERS = 4

# Unauthenticated vs authenticated hourly request budgets (for messages)
RATE_LIMIT_ANONYMOUS = 60
RATE_LIMIT_AUTHENTICATED = 5000

# Analytics
TOP_LANGUAGES_LIMIT = 5
TOP_REPOS_LIMIT = 5
MAX_INSIGHTS = 3
WEEKEND_RATIO_THRESHOLD = 0.4
MERGE_MASTER_PR_THRESHOLD = 50
LANGUAGE_SPECIALIST_PERCENT = 60
DEFAULT_LANGUAGE_COLOR = "#858585"

LANGUAGE_COLORS = {
    "JavaScript": "#f1e05a",
    "TypeScript": "#3178c6",
    "Python": "#3572A5",
    "Java": "#b07219",
    "C": "#555555",
    "C++": "#f34b7d",
    "C#": "#178600",
    "PHP": "#4F5D95",
    "Ruby": "#701516",
    "Go": "#00ADD8",
    "Rust": "#dea584",
    "Swift": "#ffac45",
    "Kotlin": "#A97BFF",
    "HTML": "#e34c26",
    "CSS": "#563d7c",
    "Shell": "#89e051",
}

WEEKDAY_NAMES = [
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
]

# Achievement rarities, rarest first
RARITY_ORDER = ["mythic", "legendary", "epic", "rare", "common"]

RARITY_COLORS = {
    "mythic": "#FF00FF",
    "legendary": "#FFD700",
    "epic": "#9B59B6",
    "rare": "#4A9EFF",
    "common": "#CCCCCC",
}

# Terminal styles per rarity: (rich style, symbol)
RARITY_STYLES = {
    "mythic": ("magenta", "✨"),
    "legendary": ("yellow", "🟠"),
    "epic": ("magenta", "🟣"),
    "rare": ("blue", "🔵"),
    "common": ("white", "⚪"),
}

# Tier score weights and thresholds
SCORE_WEIGHTS = {
    "commits": 1,
    "prs": 5,
    "repos": 2,
    "stars": 3,
    "longest_streak": 10,
    "current_streak": 8,
}
TIER_PRIME = 1000
TIER_MASTER = 3000

TIER_THEMES = {
    "origin": {"accent": "#00FF41", "secondary": "#008F11", "label": "ORIGIN"},
    "prime": {"accent": "#00E5FF", "secondary": "#0091A1", "label": "PRIME"},
    "master": {"accent": "#FFD700", "secondary": "#B8860B", "label": "MASTER"},
}

# Export card
CARD_WIDTH = 750
CARD_HEIGHT = 1050
PNG_SCALE = 2
DEFAULT_PNG_NAME = "gh-wrapped.png"
DEFAULT_SVG_NAME = "gh-wrapped.svg"
DEFAULT_JSON_NAME = "gh-wrapped.json"
DEFAULT_SHARE_LINKS_NAME = "share-links.txt"
PROJECT_URL = "https://github.com/gh-wrapped/gh-wrapped"

# Slideshow
SLIDE_WIDTH = 100
SLIDE_HEIGHT = 30
LANGUAGE_BAR_WIDTH = 50
MAX_ACHIEVEMENTS_SHOWN = 5
