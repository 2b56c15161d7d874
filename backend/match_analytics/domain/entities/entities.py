"""
Domain Entities Module

This module contains the core domain entities for the match analytics system.
These entities represent the core business concepts and are independent of any infrastructure.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from enum import Enum

from match_analytics.domain.constants import BASELINE_MODEL_VERSION
from match_analytics.utils.time_utils import parse_timestamp


class MatchOutcome(Enum):
    """Possible outcomes of a football match."""
    HOME_WIN = "home_win"
    DRAW = "draw"
    AWAY_WIN = "away_win"


class PredictionSource(str, Enum):
    """Where a prediction was computed."""
    LOCAL = "local"
    EDGE = "edge"


@dataclass(frozen=True)
class Match:
    """
    Represents one completed fixture.

    Attributes:
        id: Unique, stable identifier of the match
        home_team: Name of the home team
        away_team: Name of the away team
        full_time_home_goals: Goals scored by the home team at full time
        full_time_away_goals: Goals scored by the away team at full time
        half_time_home_goals: Goals scored by the home team at half time
        half_time_away_goals: Goals scored by the away team at half time
        match_time: Kickoff timestamp
        league: Competition label, if known
        season: Season label (e.g. "2023/24"), if known

    Half-time goals above the full-time figure are odd but accepted.
    """
    id: Any
    home_team: str
    away_team: str
    full_time_home_goals: int
    full_time_away_goals: int
    half_time_home_goals: int
    half_time_away_goals: int
    match_time: datetime
    league: Optional[str] = None
    season: Optional[str] = None

    def __post_init__(self):
        goals = (
            self.full_time_home_goals,
            self.full_time_away_goals,
            self.half_time_home_goals,
            self.half_time_away_goals,
        )
        if any(g < 0 for g in goals):
            raise ValueError(f"Goals must be non-negative, got {goals}")

    @classmethod
    def from_dict(cls, data: dict) -> "Match":
        """Build a match from a backend row or wire payload."""
        return cls(
            id=data["id"],
            home_team=data["home_team"],
            away_team=data["away_team"],
            full_time_home_goals=int(data["full_time_home_goals"]),
            full_time_away_goals=int(data["full_time_away_goals"]),
            half_time_home_goals=int(data.get("half_time_home_goals") or 0),
            half_time_away_goals=int(data.get("half_time_away_goals") or 0),
            match_time=parse_timestamp(data["match_time"]),
            league=data.get("league"),
            season=data.get("season"),
        )

    def to_dict(self) -> dict:
        """Serialize to the row shape used by the backend and the wire."""
        return {
            "id": self.id,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "full_time_home_goals": self.full_time_home_goals,
            "full_time_away_goals": self.full_time_away_goals,
            "half_time_home_goals": self.half_time_home_goals,
            "half_time_away_goals": self.half_time_away_goals,
            "match_time": self.match_time.isoformat(),
            "league": self.league,
            "season": self.season,
        }

    @property
    def outcome(self) -> MatchOutcome:
        """Get the full-time outcome."""
        if self.full_time_home_goals > self.full_time_away_goals:
            return MatchOutcome.HOME_WIN
        elif self.full_time_home_goals < self.full_time_away_goals:
            return MatchOutcome.AWAY_WIN
        return MatchOutcome.DRAW

    @property
    def total_goals(self) -> int:
        """Get total goals scored in the match."""
        return self.full_time_home_goals + self.full_time_away_goals

    @property
    def half_time_goals(self) -> int:
        return self.half_time_home_goals + self.half_time_away_goals

    @property
    def both_teams_scored(self) -> bool:
        return self.full_time_home_goals > 0 and self.full_time_away_goals > 0

    @property
    def result(self) -> str:
        return f"{self.full_time_home_goals}-{self.full_time_away_goals}"

    @property
    def half_time_result(self) -> str:
        return f"{self.half_time_home_goals}-{self.half_time_away_goals}"


@dataclass(frozen=True)
class BaselinePrediction:
    """
    Result of the local baseline prediction engine.

    Attributes:
        home_win_probability: Probability of home team winning (0-1)
        draw_probability: Probability of a draw (0-1)
        away_win_probability: Probability of away team winning (0-1)
        btts_probability: Probability that both teams score (0-1)
        over25_probability: Probability of more than 2.5 goals (0-1)
        confidence_score: Data-sufficiency confidence (0-1)
        key_factors: Ordered human-readable explanations
        prediction_source: Always "local" for this engine
        model_version: Identifier of the model that produced the result
    """
    home_win_probability: float
    draw_probability: float
    away_win_probability: float
    btts_probability: float
    over25_probability: float
    confidence_score: float
    key_factors: tuple[str, ...] = ()
    prediction_source: str = PredictionSource.LOCAL.value
    model_version: str = BASELINE_MODEL_VERSION

    def __post_init__(self):
        """Validate probability values."""
        probs = [
            self.home_win_probability,
            self.draw_probability,
            self.away_win_probability,
            self.btts_probability,
            self.over25_probability,
            self.confidence_score,
        ]
        for prob in probs:
            if not 0 <= prob <= 1:
                raise ValueError(f"Probability must be between 0 and 1, got {prob}")

        total = self.home_win_probability + self.draw_probability + self.away_win_probability
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Match outcome probabilities must sum to 1, got {total}")

    @property
    def most_likely_outcome(self) -> MatchOutcome:
        """Get the outcome with the highest probability."""
        probs = {
            MatchOutcome.HOME_WIN: self.home_win_probability,
            MatchOutcome.DRAW: self.draw_probability,
            MatchOutcome.AWAY_WIN: self.away_win_probability,
        }
        return max(probs, key=probs.get)

    def to_dict(self) -> dict:
        """Serialize to the outbound worker payload."""
        return {
            "home_win_probability": self.home_win_probability,
            "draw_probability": self.draw_probability,
            "away_win_probability": self.away_win_probability,
            "btts_probability": self.btts_probability,
            "over25_probability": self.over25_probability,
            "confidence_score": self.confidence_score,
            "key_factors": list(self.key_factors),
            "model_version": self.model_version,
            "prediction_source": self.prediction_source,
        }


@dataclass
class TeamStatistics:
    """
    Historical statistics for a team.

    Attributes:
        team_name: Name the statistics were computed for
        matches_played: Total matches played
        wins: Total wins
        draws: Total draws
        losses: Total losses
        goals_scored: Total goals scored
        goals_conceded: Total goals conceded
        home_wins: Wins at home
        away_wins: Wins away
        recent_form: Last 5 match results (W/D/L), most recent last
    """
    team_name: str
    matches_played: int
    wins: int
    draws: int
    losses: int
    goals_scored: int
    goals_conceded: int
    home_wins: int = 0
    away_wins: int = 0
    recent_form: str = ""  # e.g., "WWDLW"

    @property
    def win_rate(self) -> float:
        """Calculate win rate."""
        if self.matches_played == 0:
            return 0.0
        return self.wins / self.matches_played

    @property
    def goals_per_match(self) -> float:
        """Calculate average goals scored per match."""
        if self.matches_played == 0:
            return 0.0
        return self.goals_scored / self.matches_played

    @property
    def goals_conceded_per_match(self) -> float:
        """Calculate average goals conceded per match."""
        if self.matches_played == 0:
            return 0.0
        return self.goals_conceded / self.matches_played

    @property
    def goal_difference(self) -> int:
        """Calculate goal difference."""
        return self.goals_scored - self.goals_conceded


@dataclass
class MatchSummary:
    """
    Descriptive statistics over a collection of matches (e.g. a head-to-head).

    These figures feed the dashboard only; the prediction engine does not
    read them.
    """
    total_matches: int = 0
    home_wins: int = 0
    draws: int = 0
    away_wins: int = 0
    average_goals: float = 0.0
    average_first_half_goals: float = 0.0
    btts_match_rate: float = 0.0
    over25_match_rate: float = 0.0
    results: list[str] = field(default_factory=list)

    @property
    def record(self) -> str:
        """Home wins, draws and away wins as 'W-D-L'."""
        return f"{self.home_wins}-{self.draws}-{self.away_wins}"
