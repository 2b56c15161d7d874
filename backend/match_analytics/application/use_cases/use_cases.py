"""
Application Use Cases Module

Use cases represent application-specific business rules and orchestrate
the flow of data between the domain layer and the infrastructure layer.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional

from match_analytics.application.dtos.dtos import (
    AccuracyStatsDTO,
    BaselinePredictionDTO,
    HeadToHeadResponseDTO,
    MatchDTO,
    MatchSummaryDTO,
    PredictionParams,
    PredictionResultDTO,
    RefreshPredictionResponseDTO,
    TeamStatisticsDTO,
    TeamStatisticsResponseDTO,
    WorkerRequest,
)
from match_analytics.domain.entities.entities import MatchSummary, PredictionSource, TeamStatistics
from match_analytics.domain.exceptions import (
    InvalidPredictionInputException,
    PredictionException,
    PredictionTimeoutException,
)
from match_analytics.domain.services.statistics_service import StatisticsService
from match_analytics.infrastructure.cache.cache_service import CacheService
from match_analytics.infrastructure.data_sources.match_repository import MatchRepository
from match_analytics.infrastructure.data_sources.remote_prediction_client import RemotePredictionClient
from match_analytics.infrastructure.services.background_processor import BackgroundProcessor
from match_analytics.utils.time_utils import get_current_time, parse_timestamp


logger = logging.getLogger(__name__)


def _summary_dto(summary: MatchSummary) -> MatchSummaryDTO:
    return MatchSummaryDTO(
        total_matches=summary.total_matches,
        home_wins=summary.home_wins,
        draws=summary.draws,
        away_wins=summary.away_wins,
        record=summary.record,
        average_goals=round(summary.average_goals, 2),
        average_first_half_goals=round(summary.average_first_half_goals, 2),
        btts_match_rate=round(summary.btts_match_rate, 4),
        over25_match_rate=round(summary.over25_match_rate, 4),
        results=summary.results,
    )


def _team_statistics_dto(stats: TeamStatistics) -> TeamStatisticsDTO:
    return TeamStatisticsDTO(
        team_name=stats.team_name,
        matches_played=stats.matches_played,
        wins=stats.wins,
        draws=stats.draws,
        losses=stats.losses,
        goals_scored=stats.goals_scored,
        goals_conceded=stats.goals_conceded,
        home_wins=stats.home_wins,
        away_wins=stats.away_wins,
        recent_form=stats.recent_form,
        win_rate=round(stats.win_rate, 4),
        goals_per_match=round(stats.goals_per_match, 2),
        goals_conceded_per_match=round(stats.goals_conceded_per_match, 2),
    )


class SearchMatchesUseCase:
    """Use case for searching historical matches."""

    def __init__(self, repository: MatchRepository):
        self.repository = repository

    async def execute(
        self,
        home_team: Optional[str] = None,
        away_team: Optional[str] = None,
        limit: int = 50,
    ) -> list[MatchDTO]:
        """Search by team pairing; with a single team, matches it at either venue."""
        home = home_team.strip() if home_team else ""
        away = away_team.strip() if away_team else ""

        loop = asyncio.get_running_loop()
        if home and away:
            matches = await loop.run_in_executor(None, self.repository.search_matches, home, away, limit)
        elif home or away:
            matches = await loop.run_in_executor(None, self.repository.search_by_team, home or away, limit)
        else:
            matches = await loop.run_in_executor(None, self.repository.get_all_matches, limit)

        return [MatchDTO.from_entity(m) for m in matches]


class GetTeamStatisticsUseCase:
    """Use case for a team's descriptive statistics."""

    def __init__(
        self,
        repository: MatchRepository,
        statistics_service: StatisticsService,
        cache: CacheService,
        history_limit: int = 100,
    ):
        self.repository = repository
        self.statistics_service = statistics_service
        self.cache = cache
        self.history_limit = history_limit

    async def execute(self, team_name: str) -> TeamStatisticsResponseDTO:
        team = team_name.strip()
        if not team:
            raise ValueError("Team name is required")

        cache_key = CacheService.statistics_key(team)
        cached = self.cache.get(cache_key)
        if cached:
            return TeamStatisticsResponseDTO.model_validate(cached)

        loop = asyncio.get_running_loop()
        matches = await loop.run_in_executor(None, self.repository.search_by_team, team, self.history_limit)
        stats = self.statistics_service.calculate_team_statistics(team, matches)
        summary = self.statistics_service.summarize_matches(matches)

        result = TeamStatisticsResponseDTO(
            statistics=_team_statistics_dto(stats),
            summary=_summary_dto(summary),
            recent_matches=[MatchDTO.from_entity(m) for m in matches[:10]],
        )
        self.cache.set(cache_key, result.model_dump(mode="json"), CacheService.TTL_STATISTICS)
        return result


class GetHeadToHeadUseCase:
    """Use case for the head-to-head record of a pairing."""

    def __init__(self, repository: MatchRepository, statistics_service: StatisticsService):
        self.repository = repository
        self.statistics_service = statistics_service

    async def execute(self, home_team: str, away_team: str, limit: int = 50) -> HeadToHeadResponseDTO:
        if not home_team.strip() or not away_team.strip():
            raise ValueError("Both team names are required")

        loop = asyncio.get_running_loop()
        matches = await loop.run_in_executor(None, self.repository.search_matches, home_team, away_team, limit)
        summary = self.statistics_service.summarize_matches(matches)

        return HeadToHeadResponseDTO(
            home_team=home_team.strip(),
            away_team=away_team.strip(),
            summary=_summary_dto(summary),
            matches=[MatchDTO.from_entity(m) for m in matches],
        )


class GetMatchPredictionUseCase:
    """
    Use case for the prediction of a team pairing.

    Serves a cached prediction when one is still fresh, then an edge
    prediction from the remote service, and falls back to the local
    baseline engine running in the background processor.
    """

    def __init__(
        self,
        repository: MatchRepository,
        remote_client: RemotePredictionClient,
        processor: BackgroundProcessor,
        cache: CacheService,
        timeout_seconds: float = 5.0,
        history_limit: int = 50,
    ):
        self.repository = repository
        self.remote_client = remote_client
        self.processor = processor
        self.cache = cache
        self.timeout_seconds = timeout_seconds
        self.history_limit = history_limit

    async def execute(self, params: PredictionParams) -> PredictionResultDTO:
        """
        Get a prediction for the pairing.

        Raises:
            InvalidPredictionInputException: If a team name is blank
            PredictionTimeoutException: If the local engine does not answer in time
            PredictionException: If the local engine reports an error
        """
        if not params.home_team.strip() or not params.away_team.strip():
            raise InvalidPredictionInputException("Both home and away team names are required")

        cache_key = CacheService.prediction_key(params.home_team, params.away_team, params.league)
        cached = self.cache.get(cache_key)
        if cached:
            return PredictionResultDTO.model_validate(cached)

        edge = await self.remote_client.fetch_prediction(params)
        if edge is not None:
            logger.info(f"Serving edge prediction for {params.home_team} vs {params.away_team}")
            return edge

        logger.info(f"No edge prediction for {params.home_team} vs {params.away_team}, computing baseline")
        result = await self._compute_local(params)
        self.cache.set(cache_key, result.model_dump(mode="json"), CacheService.TTL_PREDICTIONS)
        return result

    async def _compute_local(self, params: PredictionParams) -> PredictionResultDTO:
        loop = asyncio.get_running_loop()
        search = self.repository.search_matches
        # Each history holds only matches played at the venue of this fixture
        h2h, home_matches, away_matches = await asyncio.gather(
            loop.run_in_executor(None, search, params.home_team, params.away_team, self.history_limit),
            loop.run_in_executor(None, search, params.home_team, None, self.history_limit),
            loop.run_in_executor(None, search, None, params.away_team, self.history_limit),
        )

        request = WorkerRequest.calculate_predictions(
            home_team=params.home_team,
            away_team=params.away_team,
            matches=h2h,
            home_matches=home_matches,
            away_matches=away_matches,
        )

        try:
            response = await self.processor.submit(request, timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise PredictionTimeoutException(
                f"Baseline prediction timed out after {self.timeout_seconds}s"
            ) from e

        if response.is_error:
            raise PredictionException(response.payload.get("message", "Unknown error"))

        baseline = BaselinePredictionDTO.model_validate(response.payload)
        now = get_current_time()
        return PredictionResultDTO(
            home_team=params.home_team,
            away_team=params.away_team,
            league=params.league,
            home_win_probability=baseline.home_win_probability,
            draw_probability=baseline.draw_probability,
            away_win_probability=baseline.away_win_probability,
            btts_probability=baseline.btts_probability,
            over25_probability=baseline.over25_probability,
            confidence_score=baseline.confidence_score,
            key_factors=baseline.key_factors,
            prediction_source=PredictionSource.LOCAL,
            generated_at=now,
            expires_at=now + timedelta(seconds=CacheService.TTL_PREDICTIONS),
            model_version=baseline.model_version,
        )


class RefreshPredictionUseCase:
    """Use case for asking the remote service to recompute a pairing."""

    def __init__(self, remote_client: RemotePredictionClient, cache: CacheService):
        self.remote_client = remote_client
        self.cache = cache

    async def execute(self, params: PredictionParams) -> RefreshPredictionResponseDTO:
        triggered = await self.remote_client.trigger_update(params)
        # Drop any locally cached answer so the next read sees the fresh one
        self.cache.invalidate(CacheService.prediction_key(params.home_team, params.away_team, params.league))
        if triggered:
            return RefreshPredictionResponseDTO(triggered=True, message="Prediction update triggered")
        return RefreshPredictionResponseDTO(triggered=False, message="Failed to trigger prediction update")


class GetAccuracyStatsUseCase:
    """Use case for the accuracy of past edge predictions."""

    def __init__(self, remote_client: RemotePredictionClient):
        self.remote_client = remote_client

    async def execute(self, date_from: datetime, date_to: datetime) -> Optional[AccuracyStatsDTO]:
        date_from = parse_timestamp(date_from)
        date_to = parse_timestamp(date_to)
        if date_from > date_to:
            raise ValueError("date_from must not be after date_to")
        return await self.remote_client.get_accuracy_stats(date_from, date_to)
