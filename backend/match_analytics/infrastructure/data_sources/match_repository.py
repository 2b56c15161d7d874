"""
Match Repository

Looks up historical matches by team name in the relational backend.
When no backend is configured it answers from the bundled offline dataset
instead of failing.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, DateTime, Integer, String, or_
from sqlalchemy.exc import SQLAlchemyError

from match_analytics.domain.entities.entities import Match
from match_analytics.domain.exceptions import DataSourceException
from match_analytics.infrastructure.database.database_service import Base, DatabaseService
from match_analytics.infrastructure.data_sources.offline_data import (
    OFFLINE_MATCHES,
    offline_search_by_team,
    offline_search_matches,
    offline_team_names,
)
from match_analytics.utils.time_utils import parse_timestamp

logger = logging.getLogger(__name__)

TABLE_NOT_FOUND_ERROR = (
    "The 'matches' table was not found. Make sure it has been created in the match database."
)


class MatchModel(Base):
    """
    SQLAlchemy model for a completed match.
    """
    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    match_time = Column(DateTime(timezone=True), index=True, nullable=False)
    home_team = Column(String, index=True, nullable=False)
    away_team = Column(String, index=True, nullable=False)
    half_time_home_goals = Column(Integer, nullable=False, default=0)
    half_time_away_goals = Column(Integer, nullable=False, default=0)
    full_time_home_goals = Column(Integer, nullable=False)
    full_time_away_goals = Column(Integer, nullable=False)
    league = Column(String, nullable=True)
    season = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


def sanitize_ilike_pattern(value: str) -> str:
    """Collapse whitespace and escape LIKE wildcards (% and _)."""
    normalized = " ".join(value.split())
    return normalized.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class MatchRepository:
    """
    Repository for match lookups.

    Results are ordered most recent first and bounded by `limit`.
    """

    def __init__(self, db_service: Optional[DatabaseService] = None):
        self.db_service = db_service

    @property
    def is_configured(self) -> bool:
        return self.db_service is not None

    @staticmethod
    def _to_entity(row: MatchModel) -> Match:
        return Match(
            id=row.id,
            home_team=row.home_team,
            away_team=row.away_team,
            full_time_home_goals=row.full_time_home_goals,
            full_time_away_goals=row.full_time_away_goals,
            half_time_home_goals=row.half_time_home_goals or 0,
            half_time_away_goals=row.half_time_away_goals or 0,
            match_time=parse_timestamp(row.match_time),
            league=row.league,
            season=row.season,
        )

    @staticmethod
    def _raise_query_error(action: str, error: SQLAlchemyError):
        message = str(error).lower()
        logger.error(f"Error while {action}: {error}")
        if "no such table" in message or ("relation" in message and "does not exist" in message):
            raise DataSourceException(TABLE_NOT_FOUND_ERROR) from error
        raise DataSourceException(f"Match query failed while {action}") from error

    def _query(self, action: str, build, limit: int) -> List[Match]:
        session = self.db_service.get_session()
        try:
            query = build(session.query(MatchModel))
            rows = query.order_by(MatchModel.match_time.desc()).limit(limit).all()
            return [self._to_entity(row) for row in rows]
        except SQLAlchemyError as e:
            self._raise_query_error(action, e)
        finally:
            session.close()

    def get_all_matches(self, limit: int = 100) -> List[Match]:
        """Get the most recent matches."""
        if not self.is_configured:
            return sorted(OFFLINE_MATCHES, key=lambda m: m.match_time, reverse=True)[:limit]
        return self._query("listing matches", lambda q: q, limit)

    def search_matches(
        self,
        home_team: Optional[str] = None,
        away_team: Optional[str] = None,
        limit: int = 50,
    ) -> List[Match]:
        """
        Search matches by home and/or away team name (case-insensitive containment).

        Args:
            home_team: Fragment of the home team's name
            away_team: Fragment of the away team's name
            limit: Maximum matches to return

        Returns:
            Matches, most recent first
        """
        home = " ".join(home_team.split()) if home_team and home_team.strip() else None
        away = " ".join(away_team.split()) if away_team and away_team.strip() else None

        if not self.is_configured:
            return offline_search_matches(home, away, limit)

        def build(query):
            if home:
                query = query.filter(MatchModel.home_team.ilike(f"%{sanitize_ilike_pattern(home)}%", escape="\\"))
            if away:
                query = query.filter(MatchModel.away_team.ilike(f"%{sanitize_ilike_pattern(away)}%", escape="\\"))
            return query

        return self._query("searching matches", build, limit)

    def search_by_team(self, team_name: str, limit: int = 50) -> List[Match]:
        """Search matches where the team played at home or away."""
        team = " ".join(team_name.split())
        if not team:
            return []

        if not self.is_configured:
            return offline_search_by_team(team, limit)

        pattern = f"%{sanitize_ilike_pattern(team)}%"

        def build(query):
            return query.filter(or_(
                MatchModel.home_team.ilike(pattern, escape="\\"),
                MatchModel.away_team.ilike(pattern, escape="\\"),
            ))

        return self._query(f"searching matches for {team}", build, limit)

    def get_team_names(self) -> List[str]:
        """Get the sorted set of team names, for autocomplete."""
        if not self.is_configured:
            return offline_team_names()

        session = self.db_service.get_session()
        try:
            rows = session.query(MatchModel.home_team, MatchModel.away_team).limit(1000).all()
        except SQLAlchemyError as e:
            logger.error(f"Error while listing team names: {e}")
            return []
        finally:
            session.close()

        teams = set()
        for home, away in rows:
            if home:
                teams.add(home)
            if away:
                teams.add(away)
        return sorted(teams)
