"""Feed domain entities.

FeedItem is a closed set of variants discriminated by ``kind``. No variant holds
a reference to another FeedItem; nested values are small immutable records.
"""

from typing import Annotated, Literal, assert_never

from pydantic import BaseModel, ConfigDict, Field


class ValueObject(BaseModel):
    """Immutable value record."""

    model_config = ConfigDict(frozen=True, extra="forbid")


# ============================================
# Value objects
# ============================================


class Team(ValueObject):
    name: str
    short_name: str
    logo: str


class TeamScore(ValueObject):
    name: str
    short_name: str
    logo: str
    score: str
    overs: str
    run_rate: str | None = None


class Batsman(ValueObject):
    name: str
    runs: int
    balls: int
    fours: int
    sixes: int


class Bowler(ValueObject):
    name: str
    overs: str
    maidens: int
    runs: int
    wickets: int


class Author(ValueObject):
    name: str
    avatar_url: str | None = None


class Player(ValueObject):
    player_id: str | None = None
    name: str
    avatar_url: str | None = None


class MatchContext(ValueObject):
    match_id: str
    match_title: str = ""


class UpcomingMatch(ValueObject):
    """An upcoming fixture.

    Appears both as a carousel preview copy and as an element of the upcoming
    matches collection. Copies are value-equal, never shared, so collections
    deduplicate them by ``match_id``.
    """

    match_id: int = Field(..., description="比赛ID，去重依据")
    title: str
    venue: str
    start_time: str
    team1: Team
    team2: Team
    match_type: str
    series_name: str
    is_notification_set: bool = False


class MatchResultSummary(ValueObject):
    """Element of the match results collection."""

    match_id: str
    title: str
    match_type: str
    team1: Team
    team2: Team
    result: str
    player_of_match: Player | None = None
    completed_at: str
    venue: str | None = None


# ============================================
# Feed items
# ============================================


class FeedItemBase(ValueObject):
    id: str = Field(..., description="条目ID，在已加载集合内唯一")
    timestamp: int = Field(..., description="排序/展示提示，不保证顺序")


class LiveMatch(FeedItemBase):
    kind: Literal["live_match"] = "live_match"
    match_id: int
    title: str
    venue: str
    status: str
    match_type: str
    series_name: str
    team1: TeamScore
    team2: TeamScore
    live_text: str
    current_batsmen: tuple[Batsman, ...] = ()
    current_bowler: Bowler | None = None
    last_wicket: str | None = None
    recent_balls: tuple[str, ...] = ()
    started_at: str


class UpcomingMatchesCarousel(FeedItemBase):
    kind: Literal["upcoming_matches_carousel"] = "upcoming_matches_carousel"
    title: str = "Upcoming Matches"
    matches: tuple[UpcomingMatch, ...] = Field(..., description="预览比赛列表")
    total_count: int = Field(..., description="完整列表的比赛总数")
    pagination_endpoint: str = "/api/matches/upcoming"


class NewsArticle(FeedItemBase):
    kind: Literal["news_article"] = "news_article"
    article_id: str
    headline: str
    summary: str
    thumbnail_url: str | None = None
    author: Author
    published_at: str
    category: str
    read_time: str | None = None


class VideoHighlight(FeedItemBase):
    kind: Literal["video_highlight"] = "video_highlight"
    video_id: int
    title: str
    thumbnail_url: str
    duration: str
    views: int
    uploaded_at: str
    video_url: str
    match_context: MatchContext | None = None


class MatchResult(FeedItemBase):
    kind: Literal["match_result"] = "match_result"
    match_id: str
    title: str
    match_type: str
    team1: Team
    team2: Team
    result: str
    player_of_match: Player | None = None
    completed_at: str
    venue: str | None = None


class BannerAd(FeedItemBase):
    kind: Literal["banner_ad"] = "banner_ad"
    image_url: str
    target_url: str
    priority: int | None = None


FeedItem = Annotated[
    LiveMatch
    | UpcomingMatchesCarousel
    | NewsArticle
    | VideoHighlight
    | MatchResult
    | BannerAd,
    Field(discriminator="kind"),
]


def feed_item_headline(item: FeedItem) -> str:
    """One-line text for a feed item."""
    match item:
        case LiveMatch():
            return f"LIVE {item.title}: {item.live_text}"
        case UpcomingMatchesCarousel():
            return f"{item.title} ({len(item.matches)} of {item.total_count})"
        case NewsArticle():
            return item.headline
        case VideoHighlight():
            return f"{item.title} [{item.duration}]"
        case MatchResult():
            return f"{item.title}: {item.result}"
        case BannerAd():
            return f"Ad -> {item.target_url}"
        case _:
            assert_never(item)
