"""Data models for GitHub Wrapped.

This module contains all dataclasses used throughout the package:
- GitHubUser, Repository, Commit, ContributionDay: Fetched API data
- LinesChanged, ActivityData: The contract both API clients fill in
- Language, Archetype, Achievement: Derived analytics values
- WrappedStats: Everything the slides and exports display
- YearComparison, ComparisonStats: Year-over-year growth
"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp as returned by the GitHub API.

    Args:
        value: String like "2025-03-01T14:22:05Z" (None returns None)

    Returns:
        Timezone-aware datetime, or None if the value is missing or malformed
    """
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None


@dataclass
class GitHubUser:
    """A GitHub account profile.

    Attributes:
        login: Username
        name: Display name (may be None)
        avatar_url: URL of the avatar image
        bio: Profile bio (may be None)
        company: Company field (may be None)
        location: Location field (may be None)
        public_repos: Number of public repositories
        followers: Follower count
        following: Following count
        created_at: Account creation timestamp as returned by the API
    """

    login: str
    name: Optional[str] = None
    avatar_url: str = ""
    bio: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    public_repos: int = 0
    followers: int = 0
    following: int = 0
    created_at: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.login

    @classmethod
    def from_rest(cls, data: dict) -> "GitHubUser":
        """Build a user from a REST ``/users/{login}`` payload."""
        return cls(
            login=data.get("login", ""),
            name=data.get("name"),
            avatar_url=data.get("avatar_url") or "",
            bio=data.get("bio"),
            company=data.get("company"),
            location=data.get("location"),
            public_repos=data.get("public_repos") or 0,
            followers=data.get("followers") or 0,
            following=data.get("following") or 0,
            created_at=data.get("created_at") or "",
        )

    @classmethod
    def from_graphql(cls, data: dict) -> "GitHubUser":
        """Build a user from the ``user`` node of the GraphQL query."""
        return cls(
            login=data.get("login", ""),
            name=data.get("name"),
            avatar_url=data.get("avatarUrl") or "",
            bio=data.get("bio"),
            company=data.get("company"),
            location=data.get("location"),
            public_repos=(data.get("repositories") or {}).get("totalCount", 0),
            followers=(data.get("followers") or {}).get("totalCount", 0),
            following=(data.get("following") or {}).get("totalCount", 0),
            created_at=data.get("createdAt") or "",
        )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "GitHubUser":
        return cls(**d)


@dataclass
class Repository:
    """A repository owned by the user.

    Attributes:
        name: Repository name
        full_name: owner/name
        description: Description (may be None)
        stargazers_count: Star count
        forks_count: Fork count
        language: Primary language (may be None)
        created_at: Creation timestamp string
        updated_at: Last update timestamp string
        size: Size in KB as reported by the REST API (0 from GraphQL)
        html_url: Web URL
    """

    name: str
    full_name: str = ""
    description: Optional[str] = None
    stargazers_count: int = 0
    forks_count: int = 0
    language: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""
    size: int = 0
    html_url: str = ""

    @classmethod
    def from_rest(cls, data: dict) -> "Repository":
        return cls(
            name=data.get("name", ""),
            full_name=data.get("full_name", ""),
            description=data.get("description"),
            stargazers_count=data.get("stargazers_count") or 0,
            forks_count=data.get("forks_count") or 0,
            language=data.get("language"),
            created_at=data.get("created_at") or "",
            updated_at=data.get("updated_at") or "",
            size=data.get("size") or 0,
            html_url=data.get("html_url") or "",
        )

    @classmethod
    def from_graphql(cls, data: dict, owner: str) -> "Repository":
        primary_language = data.get("primaryLanguage") or {}
        return cls(
            name=data.get("name", ""),
            full_name=f"{owner}/{data.get('name', '')}",
            description=data.get("description"),
            stargazers_count=data.get("stargazerCount") or 0,
            forks_count=data.get("forkCount") or 0,
            language=primary_language.get("name"),
            created_at=data.get("createdAt") or "",
            updated_at=data.get("updatedAt") or "",
            size=0,
            html_url=data.get("url") or "",
        )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Repository":
        return cls(**d)


@dataclass
class Commit:
    """A single authored commit, tagged with the repository it came from.

    Attributes:
        timestamp: Author date (timezone-aware)
        repository: Name of the source repository
        sha: Commit SHA (empty for GraphQL contribution nodes)
        message: Commit message (empty for GraphQL contribution nodes)
    """

    timestamp: datetime
    repository: str
    sha: str = ""
    message: str = ""

    @classmethod
    def from_rest(cls, data: dict, repository: str) -> Optional["Commit"]:
        """Parse a commit from ``/repos/{owner}/{repo}/commits``.

        Returns:
            Commit, or None if the payload carries no usable author date
        """
        commit_data = data.get("commit") or {}
        author = commit_data.get("author") or {}
        timestamp = parse_timestamp(author.get("date"))
        if timestamp is None:
            return None
        return cls(
            timestamp=timestamp,
            repository=repository,
            sha=data.get("sha", ""),
            message=commit_data.get("message", ""),
        )


@dataclass
class ContributionDay:
    """Contribution count for one calendar day."""

    date: date
    count: int

    @classmethod
    def from_graphql(cls, data: dict) -> Optional["ContributionDay"]:
        raw = data.get("date")
        if not raw:
            return None
        try:
            day = date.fromisoformat(raw)
        except ValueError:
            return None
        return cls(date=day, count=data.get("contributionCount") or 0)

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "count": self.count}

    @classmethod
    def from_dict(cls, d: dict) -> "ContributionDay":
        return cls(date=date.fromisoformat(d["date"]), count=d.get("count", 0))


@dataclass
class LinesChanged:
    """Additions and deletions summed over pull requests."""

    additions: int = 0
    deletions: int = 0

    @property
    def total(self) -> int:
        return self.additions + self.deletions


@dataclass
class ActivityData:
    """Everything fetched for one user and year.

    Both the REST and GraphQL clients produce this structure; the analytics
    layer only ever reads from it.

    Attributes:
        user: Profile of the user
        year: Calendar year the activity covers
        repositories: Owned public repositories
        language_bytes: Language name -> bytes (REST) or commit weight (GraphQL)
        commits: Authored commits in the year, tagged with their repository
        total_prs: Pull requests opened in the year
        total_issues: Issues opened in the year
        contributions: Daily contribution calendar for the year window
        lines_changed: Real PR additions/deletions, if the backend provides them
        total_commits: Accurate commit count, if the backend provides one
        total_reviews: Pull request reviews, if the backend provides them
    """

    user: GitHubUser
    year: int
    repositories: List[Repository] = field(default_factory=list)
    language_bytes: Dict[str, int] = field(default_factory=dict)
    commits: List[Commit] = field(default_factory=list)
    total_prs: int = 0
    total_issues: int = 0
    contributions: List[ContributionDay] = field(default_factory=list)
    lines_changed: Optional[LinesChanged] = None
    total_commits: Optional[int] = None
    total_reviews: int = 0


@dataclass
class Language:
    """A language's share of the user's code."""

    name: str
    bytes: int
    percentage: float
    color: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Language":
        return cls(**d)


@dataclass
class Archetype:
    """Developer archetype chosen from the activity pattern."""

    name: str
    emoji: str
    description: str
    traits: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Archetype":
        return cls(**d)


@dataclass
class Achievement:
    """An unlocked badge.

    Attributes:
        id: Stable identifier (e.g. "century-club")
        name: Display name
        description: What it takes to unlock
        emoji: Badge icon
        rarity: One of common, rare, epic, legendary, mythic
    """

    id: str
    name: str
    description: str
    emoji: str
    rarity: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Achievement":
        return cls(**d)


@dataclass
class WrappedStats:
    """The computed year-in-review for one user.

    Attributes:
        user: Profile of the user
        year: Calendar year
        date_range: Human-readable window, e.g. "Jan 1 - Dec 31, 2025"
        total_commits: Commits in the year
        total_prs: Pull requests opened
        total_issues: Issues opened
        total_stars: Stars summed over the user's repositories
        total_repos: Public repository count
        total_reviews: Pull request reviews (GraphQL only, else 0)
        longest_streak: Longest run of consecutive active days
        current_streak: Active days ending at the last day of the window
        top_languages: Up to five languages by share
        top_repos: Up to five repositories by stars
        contributions: Daily contribution calendar
        peak_hour: Hour of day (0-23) with most commits
        busiest_day: Weekday name with most contributions
        most_active_repo: Repository with most commits
        total_lines_changed: PR additions + deletions, or a size estimate
        avg_commits_per_day: Commits divided by days in the window
        archetype: Developer archetype
        achievements: Unlocked achievements
        insights: Up to three one-line insights
        score: Tier score
        tier: origin, prime or master
    """

    user: GitHubUser
    year: int
    date_range: str = ""
    total_commits: int = 0
    total_prs: int = 0
    total_issues: int = 0
    total_stars: int = 0
    total_repos: int = 0
    total_reviews: int = 0
    longest_streak: int = 0
    current_streak: int = 0
    top_languages: List[Language] = field(default_factory=list)
    top_repos: List[Repository] = field(default_factory=list)
    contributions: List[ContributionDay] = field(default_factory=list)
    peak_hour: int = 0
    busiest_day: str = ""
    most_active_repo: str = "N/A"
    total_lines_changed: int = 0
    avg_commits_per_day: float = 0.0
    archetype: Optional[Archetype] = None
    achievements: List[Achievement] = field(default_factory=list)
    insights: List[str] = field(default_factory=list)
    score: int = 0
    tier: str = "origin"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "user": self.user.to_dict(),
            "year": self.year,
            "date_range": self.date_range,
            "total_commits": self.total_commits,
            "total_prs": self.total_prs,
            "total_issues": self.total_issues,
            "total_stars": self.total_stars,
            "total_repos": self.total_repos,
            "total_reviews": self.total_reviews,
            "longest_streak": self.longest_streak,
            "current_streak": self.current_streak,
            "top_languages": [lang.to_dict() for lang in self.top_languages],
            "top_repos": [repo.to_dict() for repo in self.top_repos],
            "contributions": [day.to_dict() for day in self.contributions],
            "peak_hour": self.peak_hour,
            "busiest_day": self.busiest_day,
            "most_active_repo": self.most_active_repo,
            "total_lines_changed": self.total_lines_changed,
            "avg_commits_per_day": round(self.avg_commits_per_day, 2),
            "archetype": self.archetype.to_dict() if self.archetype else None,
            "achievements": [a.to_dict() for a in self.achievements],
            "insights": self.insights,
            "score": self.score,
            "tier": self.tier,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "WrappedStats":
        """Create from a dictionary produced by to_dict()."""
        archetype = d.get("archetype")
        return cls(
            user=GitHubUser.from_dict(d["user"]),
            year=d.get("year", 0),
            date_range=d.get("date_range", ""),
            total_commits=d.get("total_commits", 0),
            total_prs=d.get("total_prs", 0),
            total_issues=d.get("total_issues", 0),
            total_stars=d.get("total_stars", 0),
            total_repos=d.get("total_repos", 0),
            total_reviews=d.get("total_reviews", 0),
            longest_streak=d.get("longest_streak", 0),
            current_streak=d.get("current_streak", 0),
            top_languages=[Language.from_dict(x) for x in d.get("top_languages", [])],
            top_repos=[Repository.from_dict(x) for x in d.get("top_repos", [])],
            contributions=[
                ContributionDay.from_dict(x) for x in d.get("contributions", [])
            ],
            peak_hour=d.get("peak_hour", 0),
            busiest_day=d.get("busiest_day", ""),
            most_active_repo=d.get("most_active_repo", "N/A"),
            total_lines_changed=d.get("total_lines_changed", 0),
            avg_commits_per_day=d.get("avg_commits_per_day", 0.0),
            archetype=Archetype.from_dict(archetype) if archetype else None,
            achievements=[Achievement.from_dict(x) for x in d.get("achievements", [])],
            insights=d.get("insights", []),
            score=d.get("score", 0),
            tier=d.get("tier", "origin"),
        )


@dataclass
class YearComparison:
    """Headline numbers for one year, used for year-over-year growth."""

    year: int
    total_commits: int
    total_prs: int
    total_issues: int
    longest_streak: int
    top_languages: List[Language] = field(default_factory=list)
    peak_hour: int = 0


@dataclass
class ComparisonStats:
    """Two years side by side with growth percentages.

    Attributes:
        previous: The earlier year
        current: The later year
        growth: Percentage growth keyed by commits, prs, issues, streak
    """

    previous: YearComparison
    current: YearComparison
    growth: Dict[str, int] = field(default_factory=dict)
