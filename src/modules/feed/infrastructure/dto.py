"""Payload schemas for the remote content API.

Each schema validates the ``data`` object of one raw feed item type (or one
entry of a secondary collection). Unknown keys are ignored.
"""

from pydantic import Field

from src.modules.feed.domain.gateway import WireModel


class TeamDTO(WireModel):
    name: str
    short_name: str = Field(..., alias="shortName")
    logo: str
    scores: list[str | None] = Field(default_factory=list)


class TeamScoreDTO(WireModel):
    name: str
    short_name: str = Field(..., alias="shortName")
    logo: str
    score: str
    overs: str
    run_rate: str | None = Field(default=None, alias="runRate")


class BatsmanDTO(WireModel):
    name: str
    runs: int
    balls: int
    fours: int
    sixes: int


class BowlerDTO(WireModel):
    name: str
    overs: str
    maidens: int
    runs: int
    wickets: int


class AuthorDTO(WireModel):
    name: str
    avatar_url: str | None = Field(default=None, alias="avatar")


class PlayerDTO(WireModel):
    player_id: str | None = Field(default=None, alias="playerId")
    name: str
    avatar_url: str | None = Field(default=None, alias="image")


class MatchContextDTO(WireModel):
    match_id: str = Field(..., alias="matchId")
    title: str | None = None


class LiveMatchDTO(WireModel):
    match_id: int = Field(..., alias="matchId")
    title: str
    match_type: str = Field(..., alias="matchType")
    venue: str
    status: str
    series_name: str = Field(..., alias="seriesName")
    team1: TeamScoreDTO
    team2: TeamScoreDTO
    live_text: str = Field(..., alias="liveText")
    current_batsmen: list[BatsmanDTO] | None = Field(
        default=None, alias="currentBatsmen"
    )
    current_bowler: BowlerDTO | None = Field(default=None, alias="currentBowler")
    last_wicket: str | None = Field(default=None, alias="lastWicket")
    recent_balls: list[str] = Field(default_factory=list, alias="recentBalls")
    started_at: str = Field(..., alias="startedAt")


class UpcomingMatchDTO(WireModel):
    match_id: int = Field(..., alias="matchId")
    title: str
    venue: str
    start_time: str = Field(..., alias="startTime")
    team1: TeamDTO
    team2: TeamDTO
    match_type: str = Field(..., alias="matchType")
    series_name: str = Field(..., alias="seriesName")
    is_notification_set: bool = Field(default=False, alias="isNotificationSet")


class UpcomingMatchesCarouselDTO(WireModel):
    total_count: int = Field(..., alias="totalCount", ge=0)
    matches: list[UpcomingMatchDTO]
    title: str | None = None


class NewsDTO(WireModel):
    article_id: str = Field(..., alias="articleId")
    headline: str
    summary: str
    thumbnail_url: str | None = Field(default=None, alias="imageUrl")
    author: AuthorDTO
    published_at: str = Field(..., alias="publishedAt")
    category: str
    read_time: str | None = Field(default=None, alias="readTimeMinutes")


class VideoDTO(WireModel):
    video_id: int = Field(..., alias="videoId")
    title: str
    description: str | None = None
    thumbnail_url: str = Field(..., alias="thumbnail")
    duration: str
    duration_seconds: int | None = Field(default=None, alias="durationSeconds")
    views: int
    uploaded_at: str = Field(..., alias="uploadedAt")
    video_url: str = Field(..., alias="videoUrl")
    video_type: str | None = Field(default=None, alias="type")
    match_context: MatchContextDTO | None = Field(default=None, alias="matchContext")


class MatchResultDTO(WireModel):
    match_id: str = Field(..., alias="matchId")
    title: str
    match_type: str = Field(..., alias="matchType")
    team1: TeamDTO
    team2: TeamDTO
    result: str
    player_of_match: PlayerDTO | None = Field(default=None, alias="playerOfMatch")
    completed_at: str = Field(..., alias="completedAt")
    venue: str | None = "Unknown"


class BannerAdDTO(WireModel):
    ad_id: str = Field(..., alias="adId")
    title: str | None = None
    subtitle: str | None = None
    image_url: str = Field(..., alias="imageUrl")
    target_url: str = Field(..., alias="deepLink")
    sponsor: str | None = None
    priority: int | None = None
