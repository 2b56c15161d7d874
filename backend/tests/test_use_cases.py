"""
Unit Tests for Application Use Cases
"""

import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from match_analytics.application.dtos.dtos import (
    PredictionParams,
    PredictionResultDTO,
    WorkerResponse,
)
from match_analytics.application.use_cases.use_cases import (
    GetAccuracyStatsUseCase,
    GetHeadToHeadUseCase,
    GetMatchPredictionUseCase,
    GetTeamStatisticsUseCase,
    RefreshPredictionUseCase,
    SearchMatchesUseCase,
)
from match_analytics.domain.entities.entities import PredictionSource
from match_analytics.domain.exceptions import (
    InvalidPredictionInputException,
    PredictionException,
    PredictionTimeoutException,
)
from match_analytics.domain.services.prediction_service import PredictionService
from match_analytics.domain.services.statistics_service import StatisticsService
from match_analytics.infrastructure.cache.cache_service import CacheService
from match_analytics.infrastructure.data_sources.match_repository import MatchRepository
from match_analytics.infrastructure.data_sources.remote_prediction_client import RemotePredictionClient
from match_analytics.infrastructure.services.background_processor import BackgroundProcessor
from match_analytics.utils.time_utils import DEFAULT_TZ, get_current_time


@pytest.fixture
def repository():
    # No database configured: answers from the offline dataset
    return MatchRepository()


@pytest.fixture
def cache():
    return CacheService()


@pytest.fixture
def processor():
    processor = BackgroundProcessor()
    yield processor
    processor.terminate()


class TestSearchMatchesUseCase:

    @pytest.mark.asyncio
    async def test_pairing(self, repository):
        matches = await SearchMatchesUseCase(repository).execute("Barcelona", "Real Madrid")
        assert [m.id for m in matches] == [1]
        assert matches[0].result == "2-1"

    @pytest.mark.asyncio
    async def test_single_team_matches_either_venue(self, repository):
        matches = await SearchMatchesUseCase(repository).execute(away_team="Barcelona")
        assert [m.id for m in matches] == [1]

    @pytest.mark.asyncio
    async def test_no_filter_lists_recent(self, repository):
        matches = await SearchMatchesUseCase(repository).execute(limit=2)
        assert [m.id for m in matches] == [10, 9]


class TestGetTeamStatisticsUseCase:

    @pytest.mark.asyncio
    async def test_statistics(self, repository, cache):
        use_case = GetTeamStatisticsUseCase(repository, StatisticsService(), cache)

        result = await use_case.execute("Barcelona")

        assert result.statistics.matches_played == 1
        assert result.statistics.wins == 1
        assert result.statistics.recent_form == "W"
        assert result.summary.record == "1-0-0"
        assert len(result.recent_matches) == 1

    @pytest.mark.asyncio
    async def test_cached_result_reused(self, cache):
        repository = MagicMock(wraps=MatchRepository())
        use_case = GetTeamStatisticsUseCase(repository, StatisticsService(), cache)

        first = await use_case.execute("Arsenal")
        second = await use_case.execute("arsenal ")

        assert repository.search_by_team.call_count == 1
        assert second == first

    @pytest.mark.asyncio
    async def test_blank_team(self, repository, cache):
        with pytest.raises(ValueError):
            await GetTeamStatisticsUseCase(repository, StatisticsService(), cache).execute("  ")


class TestGetHeadToHeadUseCase:

    @pytest.mark.asyncio
    async def test_head_to_head(self, repository):
        result = await GetHeadToHeadUseCase(repository, StatisticsService()).execute("Valencia", "Sevilla")

        assert result.summary.total_matches == 1
        assert result.summary.record == "0-1-0"
        assert result.matches[0].result == "1-1"

    @pytest.mark.asyncio
    async def test_requires_both_teams(self, repository):
        with pytest.raises(ValueError):
            await GetHeadToHeadUseCase(repository, StatisticsService()).execute("Valencia", "")


class TestGetMatchPredictionUseCase:

    @pytest.fixture
    def params(self):
        return PredictionParams(home_team="Barcelona", away_team="Real Madrid")

    @pytest.fixture
    def unconfigured_remote(self, cache):
        return RemotePredictionClient(cache=cache)

    @pytest.mark.asyncio
    async def test_local_baseline(self, repository, unconfigured_remote, processor, cache, params):
        use_case = GetMatchPredictionUseCase(repository, unconfigured_remote, processor, cache)

        result = await use_case.execute(params)

        assert result.prediction_source == PredictionSource.LOCAL
        total = result.home_win_probability + result.draw_probability + result.away_win_probability
        assert total == pytest.approx(1.0)
        # One head-to-head match, one match for each team
        assert result.confidence_score == pytest.approx(0.3 + 0.03 + 0.01 + 0.01)
        assert result.expires_at > result.generated_at

    @pytest.mark.asyncio
    async def test_histories_are_venue_specific(self, unconfigured_remote, processor, cache, make_match):
        # Alpha lost five times away, Beta never played at all
        away_defeats = [make_match("Gamma", "Alpha", 3, 0) for _ in range(5)]

        def search_matches(home_team=None, away_team=None, limit=50):
            return [
                m for m in away_defeats
                if (not home_team or m.home_team == home_team)
                and (not away_team or m.away_team == away_team)
            ]

        repository = MagicMock(spec=MatchRepository)
        repository.search_matches.side_effect = search_matches
        repository.search_by_team.return_value = away_defeats
        use_case = GetMatchPredictionUseCase(repository, unconfigured_remote, processor, cache)
        params = PredictionParams(home_team="Alpha", away_team="Beta")

        result = await use_case.execute(params)
        no_history = PredictionService().compute_baseline("Alpha", "Beta", [], [], [])

        repository.search_by_team.assert_not_called()
        assert result.home_win_probability == pytest.approx(no_history.home_win_probability)
        assert result.confidence_score == pytest.approx(0.3)
        assert "Alpha excellent form" not in result.key_factors
        assert "High-scoring home team" not in result.key_factors

    @pytest.mark.asyncio
    async def test_local_baseline_cached(self, repository, unconfigured_remote, processor, cache, params):
        use_case = GetMatchPredictionUseCase(repository, unconfigured_remote, processor, cache)

        first = await use_case.execute(params)
        processor.terminate()
        second = await use_case.execute(params)

        assert second.generated_at == first.generated_at

    @pytest.mark.asyncio
    async def test_edge_prediction_preferred(self, repository, processor, cache, params):
        now = get_current_time()
        edge = PredictionResultDTO(
            home_team="Barcelona",
            away_team="Real Madrid",
            league=params.league,
            home_win_probability=0.6,
            draw_probability=0.25,
            away_win_probability=0.15,
            btts_probability=0.5,
            over25_probability=0.5,
            confidence_score=0.8,
            prediction_source=PredictionSource.EDGE,
            generated_at=now,
            expires_at=now + timedelta(hours=1),
            model_version="edge-v2",
        )
        remote = MagicMock()
        remote.fetch_prediction = AsyncMock(return_value=edge)

        result = await GetMatchPredictionUseCase(repository, remote, processor, cache).execute(params)

        assert result.prediction_source == PredictionSource.EDGE
        assert processor.pending == 0

    @pytest.mark.asyncio
    async def test_blank_team_rejected(self, repository, unconfigured_remote, processor, cache):
        use_case = GetMatchPredictionUseCase(repository, unconfigured_remote, processor, cache)

        with pytest.raises(InvalidPredictionInputException):
            await use_case.execute(PredictionParams(home_team=" ", away_team="Real Madrid"))

    @pytest.mark.asyncio
    async def test_timeout(self, repository, unconfigured_remote, cache, params):
        worker = MagicMock()
        worker.submit = AsyncMock(side_effect=asyncio.TimeoutError())
        use_case = GetMatchPredictionUseCase(repository, unconfigured_remote, worker, cache, timeout_seconds=0.1)

        with pytest.raises(PredictionTimeoutException):
            await use_case.execute(params)

    @pytest.mark.asyncio
    async def test_worker_error(self, repository, unconfigured_remote, cache, params):
        worker = MagicMock()
        worker.submit = AsyncMock(return_value=WorkerResponse.error("boom", request_id=1))
        use_case = GetMatchPredictionUseCase(repository, unconfigured_remote, worker, cache)

        with pytest.raises(PredictionException, match="boom"):
            await use_case.execute(params)

        assert cache.keys() == []


class TestRemoteUseCases:

    @pytest.mark.asyncio
    async def test_refresh_invalidates_local_prediction(self, cache):
        params = PredictionParams(home_team="A", away_team="B")
        cache.set(CacheService.prediction_key("A", "B", params.league), {"stale": True}, 60)
        remote = MagicMock()
        remote.trigger_update = AsyncMock(return_value=True)

        result = await RefreshPredictionUseCase(remote, cache).execute(params)

        assert result.triggered is True
        assert cache.keys() == []

    @pytest.mark.asyncio
    async def test_refresh_failure(self, cache):
        result = await RefreshPredictionUseCase(RemotePredictionClient(cache=cache), cache).execute(
            PredictionParams(home_team="A", away_team="B")
        )
        assert result.triggered is False

    @pytest.mark.asyncio
    async def test_accuracy_rejects_inverted_range(self):
        now = get_current_time()
        with pytest.raises(ValueError):
            await GetAccuracyStatsUseCase(MagicMock()).execute(now, now - timedelta(days=1))

    @pytest.mark.asyncio
    async def test_accuracy_compares_naive_and_aware_dates(self):
        remote = MagicMock()
        remote.get_accuracy_stats = AsyncMock(return_value=None)
        use_case = GetAccuracyStatsUseCase(remote)
        naive = datetime(2024, 2, 1)
        aware = DEFAULT_TZ.localize(datetime(2024, 1, 1))

        with pytest.raises(ValueError):
            await use_case.execute(naive, aware)

        assert await use_case.execute(datetime(2023, 12, 1), aware) is None
        date_from, date_to = remote.get_accuracy_stats.call_args.args
        assert date_from.tzinfo is not None
        assert date_to == aware
