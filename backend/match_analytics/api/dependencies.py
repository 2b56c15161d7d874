"""
API Dependencies Module

Builds the services the application owns for its lifetime and provides
dependency injection for FastAPI routes.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request

from match_analytics.config import Settings
from match_analytics.domain.services.prediction_service import PredictionService
from match_analytics.domain.services.statistics_service import StatisticsService
from match_analytics.infrastructure.cache.cache_service import CacheService
from match_analytics.infrastructure.cache.redis_client import RedisClient
from match_analytics.infrastructure.database.database_service import DatabaseService, create_database_service
from match_analytics.infrastructure.data_sources.match_repository import MatchRepository
from match_analytics.infrastructure.data_sources.remote_prediction_client import RemotePredictionClient
from match_analytics.infrastructure.services.background_processor import BackgroundProcessor
from match_analytics.scheduler import CacheMaintenanceScheduler
from match_analytics.application.use_cases.use_cases import (
    GetAccuracyStatsUseCase,
    GetHeadToHeadUseCase,
    GetMatchPredictionUseCase,
    GetTeamStatisticsUseCase,
    RefreshPredictionUseCase,
    SearchMatchesUseCase,
)

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Services owned by one running application."""
    settings: Settings
    cache: CacheService
    scheduler: CacheMaintenanceScheduler
    database: Optional[DatabaseService]
    repository: MatchRepository
    remote_client: RemotePredictionClient
    statistics_service: StatisticsService
    processor: BackgroundProcessor

    def start(self) -> None:
        """Start background services, replacing a processor left terminated by a previous shutdown."""
        if not self.processor.is_running:
            self.processor = BackgroundProcessor(
                self.processor.prediction_service,
                max_pending=self.processor.max_pending,
            )
        self.scheduler.start()

    def shutdown(self) -> None:
        self.processor.terminate()
        self.scheduler.shutdown()
        if self.database is not None:
            self.database.dispose()


def build_container(settings: Settings) -> ServiceContainer:
    """Create every service from settings."""
    redis_client = RedisClient(settings.redis) if settings.redis_enabled else None
    cache = CacheService(redis_client=redis_client)
    database = create_database_service(settings.database_url)

    return ServiceContainer(
        settings=settings,
        cache=cache,
        scheduler=CacheMaintenanceScheduler(cache, settings.cache_sweep_interval_seconds),
        database=database,
        repository=MatchRepository(database),
        remote_client=RemotePredictionClient(settings.remote, cache),
        statistics_service=StatisticsService(settings.model),
        processor=BackgroundProcessor(
            PredictionService(settings.model),
            max_pending=settings.worker_max_pending,
        ),
    )


def get_container(request: Request) -> ServiceContainer:
    """Get the container of the running application."""
    return request.app.state.container


def get_search_matches_use_case(container: ServiceContainer = Depends(get_container)) -> SearchMatchesUseCase:
    return SearchMatchesUseCase(container.repository)


def get_team_statistics_use_case(container: ServiceContainer = Depends(get_container)) -> GetTeamStatisticsUseCase:
    return GetTeamStatisticsUseCase(container.repository, container.statistics_service, container.cache)


def get_head_to_head_use_case(container: ServiceContainer = Depends(get_container)) -> GetHeadToHeadUseCase:
    return GetHeadToHeadUseCase(container.repository, container.statistics_service)


def get_match_prediction_use_case(container: ServiceContainer = Depends(get_container)) -> GetMatchPredictionUseCase:
    return GetMatchPredictionUseCase(
        repository=container.repository,
        remote_client=container.remote_client,
        processor=container.processor,
        cache=container.cache,
        timeout_seconds=container.settings.prediction_timeout_seconds,
    )


def get_refresh_prediction_use_case(container: ServiceContainer = Depends(get_container)) -> RefreshPredictionUseCase:
    return RefreshPredictionUseCase(container.remote_client, container.cache)


def get_accuracy_stats_use_case(container: ServiceContainer = Depends(get_container)) -> GetAccuracyStatsUseCase:
    return GetAccuracyStatsUseCase(container.remote_client)
