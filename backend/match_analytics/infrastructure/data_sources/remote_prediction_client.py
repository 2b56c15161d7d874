"""
Remote Prediction Client

Reads predictions computed by the hosted prediction service ("edge"
predictions) through its REST API, and asks the service to recompute them.

Any failure is reported as "not available" (None), which is the signal for
callers to fall back to the local baseline engine.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from match_analytics.application.dtos.dtos import (
    AccuracyStatsDTO,
    PredictionParams,
    PredictionResultDTO,
)
from match_analytics.domain.entities.entities import PredictionSource
from match_analytics.infrastructure.cache.cache_service import CacheService
from match_analytics.utils.time_utils import get_current_time, parse_timestamp

logger = logging.getLogger(__name__)


@dataclass
class RemotePredictionConfig:
    """Configuration for the hosted prediction API."""
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    timeout: float = 10.0

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)


class RemotePredictionClient:
    """
    Client for the hosted prediction API.
    """

    SOURCE_NAME = "PredictionAPI"
    RECOMPUTE_RPC = "calculate_all_features_batch"
    ACCURACY_RPC = "get_prediction_accuracy_stats"

    def __init__(
        self,
        config: Optional[RemotePredictionConfig] = None,
        cache: Optional[CacheService] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or RemotePredictionConfig()
        self.cache = cache or CacheService()
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    def _headers(self) -> dict:
        return {
            "apikey": self.config.api_key,
            "Authorization": f"Bearer {self.config.api_key}",
            "Accept": "application/json",
        }

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Optional[Any]:
        """Make request to the prediction API; None on any failure."""
        if not self.is_configured:
            return None

        url = f"{self.config.base_url.rstrip('/')}{endpoint}"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.config.timeout) as client:
                response = await client.request(method, url, params=params, json=json, headers=self._headers())
                response.raise_for_status()
                if response.status_code == 204 or not response.content:
                    return {}
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"{self.SOURCE_NAME} request error ({endpoint}): {e}")
            return None

    @staticmethod
    def _parse_prediction(row: dict) -> PredictionResultDTO:
        features = row.get("features") or {}

        def feature(name: str, default: float) -> float:
            value = features.get(name)
            return default if value is None else value

        return PredictionResultDTO(
            id=str(row["id"]) if row.get("id") is not None else None,
            home_team=row["home_team"],
            away_team=row["away_team"],
            league=row["league"],
            home_win_probability=feature("home_win_probability", 0.33),
            draw_probability=feature("draw_probability", 0.33),
            away_win_probability=feature("away_win_probability", 0.33),
            btts_probability=feature("btts_probability", 0.5),
            over25_probability=feature("over25_probability", 0.5),
            confidence_score=feature("confidence_score", 0.5),
            key_factors=features.get("key_factors") or [],
            prediction_source=PredictionSource.EDGE,
            generated_at=parse_timestamp(row["generated_at"]),
            expires_at=parse_timestamp(row["expires_at"]),
            model_version=row.get("model_version") or "unknown",
        )

    def _cache_key(self, params: PredictionParams) -> str:
        return f"edge:{CacheService.prediction_key(params.home_team, params.away_team, params.league)}"

    async def fetch_prediction(self, params: PredictionParams) -> Optional[PredictionResultDTO]:
        """
        Get the latest unexpired edge prediction for a team pairing.

        Returns:
            The prediction, or None when the service is unconfigured,
            unreachable or holds no fresh result
        """
        cache_key = self._cache_key(params)
        cached = self.cache.get(cache_key)
        if cached:
            prediction = PredictionResultDTO.model_validate(cached)
            if prediction.expires_at and prediction.expires_at > get_current_time():
                return prediction
            self.cache.invalidate(cache_key)

        now = get_current_time()
        data = await self._make_request(
            "GET",
            "/rest/v1/predictions",
            params={
                "select": "*",
                "home_team": f"eq.{params.home_team}",
                "away_team": f"eq.{params.away_team}",
                "league": f"eq.{params.league}",
                "expires_at": f"gte.{now.isoformat()}",
                "order": "generated_at.desc",
                "limit": 1,
            },
        )
        if not data:
            return None

        row = data[0] if isinstance(data, list) else data
        try:
            prediction = self._parse_prediction(row)
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            logger.warning(f"Discarding malformed edge prediction for {params.home_team} vs {params.away_team}: {e}")
            return None

        if prediction.expires_at <= now:
            return None

        ttl = max(1, int((prediction.expires_at - now).total_seconds()))
        self.cache.set(cache_key, prediction.model_dump(mode="json"), ttl)
        return prediction

    async def trigger_update(self, params: PredictionParams) -> bool:
        """Ask the service to recompute the pairing's features; evicts the cached entry."""
        data = await self._make_request(
            "POST",
            f"/rest/v1/rpc/{self.RECOMPUTE_RPC}",
            json={
                "p_home_team": params.home_team,
                "p_away_team": params.away_team,
                "p_league": params.league,
            },
        )
        if data is None:
            logger.error(f"Failed to trigger prediction update for {params.home_team} vs {params.away_team}")
            return False

        self.cache.invalidate(self._cache_key(params))
        return True

    async def get_accuracy_stats(self, date_from: datetime, date_to: datetime) -> Optional[AccuracyStatsDTO]:
        """Get accuracy statistics of edge predictions between two dates."""
        data = await self._make_request(
            "POST",
            f"/rest/v1/rpc/{self.ACCURACY_RPC}",
            json={"date_from": date_from.isoformat(), "date_to": date_to.isoformat()},
        )
        if data is None:
            return None
        try:
            return AccuracyStatsDTO.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Malformed accuracy stats response: {e}")
            return None
