"""Payload → domain converters.

Every converter is a pure, total function of an already validated payload.
"""

from src.modules.feed.domain.entities import (
    Author,
    BannerAd,
    Batsman,
    Bowler,
    LiveMatch,
    MatchContext,
    MatchResult,
    MatchResultSummary,
    NewsArticle,
    Player,
    Team,
    TeamScore,
    UpcomingMatch,
    UpcomingMatchesCarousel,
    VideoHighlight,
)
from src.modules.feed.infrastructure.dto import (
    AuthorDTO,
    BannerAdDTO,
    BatsmanDTO,
    BowlerDTO,
    LiveMatchDTO,
    MatchContextDTO,
    MatchResultDTO,
    NewsDTO,
    PlayerDTO,
    TeamDTO,
    TeamScoreDTO,
    UpcomingMatchDTO,
    UpcomingMatchesCarouselDTO,
    VideoDTO,
)

DEFAULT_CAROUSEL_TITLE = "Upcoming Matches"
UPCOMING_PAGINATION_ENDPOINT = "/api/matches/upcoming"


def team_to_domain(dto: TeamDTO) -> Team:
    return Team(name=dto.name, short_name=dto.short_name, logo=dto.logo)


def team_score_to_domain(dto: TeamScoreDTO) -> TeamScore:
    return TeamScore(
        name=dto.name,
        short_name=dto.short_name,
        logo=dto.logo,
        score=dto.score,
        overs=dto.overs,
        run_rate=dto.run_rate,
    )


def batsman_to_domain(dto: BatsmanDTO) -> Batsman:
    return Batsman(
        name=dto.name,
        runs=dto.runs,
        balls=dto.balls,
        fours=dto.fours,
        sixes=dto.sixes,
    )


def bowler_to_domain(dto: BowlerDTO) -> Bowler:
    return Bowler(
        name=dto.name,
        overs=dto.overs,
        maidens=dto.maidens,
        runs=dto.runs,
        wickets=dto.wickets,
    )


def author_to_domain(dto: AuthorDTO) -> Author:
    return Author(name=dto.name, avatar_url=dto.avatar_url)


def player_to_domain(dto: PlayerDTO) -> Player:
    return Player(player_id=dto.player_id, name=dto.name, avatar_url=dto.avatar_url)


def match_context_to_domain(dto: MatchContextDTO) -> MatchContext:
    return MatchContext(match_id=dto.match_id, match_title=dto.title or "")


def upcoming_match_to_domain(dto: UpcomingMatchDTO) -> UpcomingMatch:
    return UpcomingMatch(
        match_id=dto.match_id,
        title=dto.title,
        venue=dto.venue,
        start_time=dto.start_time,
        team1=team_to_domain(dto.team1),
        team2=team_to_domain(dto.team2),
        match_type=dto.match_type,
        series_name=dto.series_name,
        is_notification_set=dto.is_notification_set,
    )


def match_result_summary_to_domain(dto: MatchResultDTO) -> MatchResultSummary:
    return MatchResultSummary(
        match_id=dto.match_id,
        title=dto.title,
        match_type=dto.match_type,
        team1=team_to_domain(dto.team1),
        team2=team_to_domain(dto.team2),
        result=dto.result,
        player_of_match=(
            player_to_domain(dto.player_of_match) if dto.player_of_match else None
        ),
        completed_at=dto.completed_at,
        venue=dto.venue,
    )


# ============================================
# Feed item converters (one per type tag)
# ============================================


def live_match_to_domain(dto: LiveMatchDTO, item_id: str, timestamp: int) -> LiveMatch:
    return LiveMatch(
        id=item_id,
        timestamp=timestamp,
        match_id=dto.match_id,
        title=dto.title,
        venue=dto.venue,
        status=dto.status,
        match_type=dto.match_type,
        series_name=dto.series_name,
        team1=team_score_to_domain(dto.team1),
        team2=team_score_to_domain(dto.team2),
        live_text=dto.live_text,
        current_batsmen=tuple(batsman_to_domain(b) for b in dto.current_batsmen or ()),
        current_bowler=(
            bowler_to_domain(dto.current_bowler) if dto.current_bowler else None
        ),
        last_wicket=dto.last_wicket,
        recent_balls=tuple(dto.recent_balls),
        started_at=dto.started_at,
    )


def carousel_to_domain(
    dto: UpcomingMatchesCarouselDTO, item_id: str, timestamp: int
) -> UpcomingMatchesCarousel:
    return UpcomingMatchesCarousel(
        id=item_id,
        timestamp=timestamp,
        title=dto.title or DEFAULT_CAROUSEL_TITLE,
        matches=tuple(upcoming_match_to_domain(m) for m in dto.matches),
        total_count=dto.total_count,
        pagination_endpoint=UPCOMING_PAGINATION_ENDPOINT,
    )


def news_to_domain(dto: NewsDTO, item_id: str, timestamp: int) -> NewsArticle:
    return NewsArticle(
        id=item_id,
        timestamp=timestamp,
        article_id=dto.article_id,
        headline=dto.headline,
        summary=dto.summary,
        thumbnail_url=dto.thumbnail_url,
        author=author_to_domain(dto.author),
        published_at=dto.published_at,
        category=dto.category,
        read_time=dto.read_time,
    )


def video_to_domain(dto: VideoDTO, item_id: str, timestamp: int) -> VideoHighlight:
    return VideoHighlight(
        id=item_id,
        timestamp=timestamp,
        video_id=dto.video_id,
        title=dto.title,
        thumbnail_url=dto.thumbnail_url,
        duration=dto.duration,
        views=dto.views,
        uploaded_at=dto.uploaded_at,
        video_url=dto.video_url,
        match_context=(
            match_context_to_domain(dto.match_context) if dto.match_context else None
        ),
    )


def match_result_to_domain(
    dto: MatchResultDTO, item_id: str, timestamp: int
) -> MatchResult:
    return MatchResult(
        id=item_id,
        timestamp=timestamp,
        match_id=dto.match_id,
        title=dto.title,
        match_type=dto.match_type,
        team1=team_to_domain(dto.team1),
        team2=team_to_domain(dto.team2),
        result=dto.result,
        player_of_match=(
            player_to_domain(dto.player_of_match) if dto.player_of_match else None
        ),
        completed_at=dto.completed_at,
        venue=dto.venue,
    )


def banner_ad_to_domain(dto: BannerAdDTO, item_id: str, timestamp: int) -> BannerAd:
    return BannerAd(
        id=item_id,
        timestamp=timestamp,
        image_url=dto.image_url,
        target_url=dto.target_url,
        priority=dto.priority,
    )
