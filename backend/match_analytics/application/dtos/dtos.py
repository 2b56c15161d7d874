"""
Data Transfer Objects (DTOs) Module

DTOs are used to transfer data between layers, across the background worker
boundary and to/from the API. They use Pydantic for validation and serialization.
"""

from datetime import datetime
from typing import Any, Optional, Union
from enum import Enum
from pydantic import BaseModel, Field

from match_analytics.domain.entities.entities import Match, PredictionSource
from match_analytics.domain.constants import DEFAULT_LEAGUE


# ============================================================
# Enums
# ============================================================

class MessageType(str, Enum):
    """Message types exchanged with the background worker."""
    CALCULATE_PREDICTIONS = "CALCULATE_PREDICTIONS"
    PREDICTION_RESULT = "PREDICTION_RESULT"
    ERROR = "ERROR"


# ============================================================
# Worker Messages
# ============================================================

class MatchRecordDTO(BaseModel):
    """Match row as it travels over the wire."""
    id: Union[int, str]
    home_team: str
    away_team: str
    full_time_home_goals: int = Field(..., ge=0)
    full_time_away_goals: int = Field(..., ge=0)
    half_time_home_goals: int = Field(default=0, ge=0)
    half_time_away_goals: int = Field(default=0, ge=0)
    match_time: datetime
    league: Optional[str] = None
    season: Optional[str] = None

    class Config:
        from_attributes = True

    def to_entity(self) -> Match:
        return Match.from_dict(self.model_dump())


class CalculatePredictionsPayload(BaseModel):
    """Payload of a CALCULATE_PREDICTIONS request."""
    home_team: str = Field(default="", alias="homeTeam")
    away_team: str = Field(default="", alias="awayTeam")
    matches: list[MatchRecordDTO] = Field(default_factory=list)
    home_matches: list[MatchRecordDTO] = Field(default_factory=list, alias="homeMatches")
    away_matches: list[MatchRecordDTO] = Field(default_factory=list, alias="awayMatches")

    class Config:
        populate_by_name = True


class WorkerRequest(BaseModel):
    """Inbound message: `{type, payload}`."""
    type: str
    payload: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def calculate_predictions(
        cls,
        home_team: str,
        away_team: str,
        matches: list[Match],
        home_matches: list[Match],
        away_matches: list[Match],
    ) -> "WorkerRequest":
        """Build a CALCULATE_PREDICTIONS request from domain matches."""
        return cls(
            type=MessageType.CALCULATE_PREDICTIONS.value,
            payload={
                "homeTeam": home_team,
                "awayTeam": away_team,
                "matches": [m.to_dict() for m in matches],
                "homeMatches": [m.to_dict() for m in home_matches],
                "awayMatches": [m.to_dict() for m in away_matches],
            },
        )


class ErrorPayload(BaseModel):
    message: str


class BaselinePredictionDTO(BaseModel):
    """Outbound payload of a PREDICTION_RESULT message."""
    home_win_probability: float = Field(..., ge=0, le=1)
    draw_probability: float = Field(..., ge=0, le=1)
    away_win_probability: float = Field(..., ge=0, le=1)
    btts_probability: float = Field(..., ge=0, le=1)
    over25_probability: float = Field(..., ge=0, le=1)
    confidence_score: float = Field(..., ge=0, le=1)
    key_factors: list[str] = Field(default_factory=list)
    model_version: str
    prediction_source: str = PredictionSource.LOCAL.value


class WorkerResponse(BaseModel):
    """Outbound message: `{type, payload}` plus the id of the request it answers."""
    type: MessageType
    payload: dict[str, Any]
    request_id: Optional[int] = None

    @property
    def is_error(self) -> bool:
        return self.type == MessageType.ERROR

    @classmethod
    def error(cls, message: str, request_id: Optional[int] = None) -> "WorkerResponse":
        return cls(
            type=MessageType.ERROR,
            payload=ErrorPayload(message=message).model_dump(),
            request_id=request_id,
        )


# ============================================================
# Prediction DTOs
# ============================================================

class PredictionParams(BaseModel):
    """Team pairing a prediction is requested for."""
    home_team: str = Field(..., description="Home team name")
    away_team: str = Field(..., description="Away team name")
    league: str = Field(default=DEFAULT_LEAGUE, description="League name")


class PredictionResultDTO(BaseModel):
    """Prediction served to clients, computed remotely (edge) or locally."""
    id: Optional[str] = None
    home_team: str
    away_team: str
    league: str
    home_win_probability: float = Field(..., ge=0, le=1)
    draw_probability: float = Field(..., ge=0, le=1)
    away_win_probability: float = Field(..., ge=0, le=1)
    btts_probability: float = Field(..., ge=0, le=1)
    over25_probability: float = Field(..., ge=0, le=1)
    confidence_score: float = Field(..., ge=0, le=1)
    key_factors: list[str] = Field(default_factory=list)
    prediction_source: PredictionSource
    generated_at: datetime
    expires_at: Optional[datetime] = None
    model_version: str

    class Config:
        from_attributes = True


class CalibrationPointDTO(BaseModel):
    predicted_probability: float
    actual_frequency: float
    count: int


class AccuracyStatsDTO(BaseModel):
    """Accuracy of past remote predictions over a date range."""
    total_predictions: int
    correct_predictions: int
    accuracy_percentage: float
    average_confidence: float
    brier_score: float
    calibration_data: list[CalibrationPointDTO] = Field(default_factory=list)


class RefreshPredictionResponseDTO(BaseModel):
    triggered: bool
    message: str


# ============================================================
# Match & Statistics DTOs
# ============================================================

class MatchDTO(BaseModel):
    """Match data transfer object with dashboard-formatted fields."""
    id: Union[int, str]
    home_team: str
    away_team: str
    match_time: datetime
    full_time_home_goals: int
    full_time_away_goals: int
    half_time_home_goals: int
    half_time_away_goals: int
    result: str
    half_time_result: str
    total_goals: int
    both_teams_scored: bool
    league: Optional[str] = None
    season: Optional[str] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_entity(cls, match: Match) -> "MatchDTO":
        return cls(
            id=match.id,
            home_team=match.home_team,
            away_team=match.away_team,
            match_time=match.match_time,
            full_time_home_goals=match.full_time_home_goals,
            full_time_away_goals=match.full_time_away_goals,
            half_time_home_goals=match.half_time_home_goals,
            half_time_away_goals=match.half_time_away_goals,
            result=match.result,
            half_time_result=match.half_time_result,
            total_goals=match.total_goals,
            both_teams_scored=match.both_teams_scored,
            league=match.league,
            season=match.season,
        )


class MatchesResponseDTO(BaseModel):
    matches: list[MatchDTO]
    total: int


class TeamNamesResponseDTO(BaseModel):
    teams: list[str]


class TeamStatisticsDTO(BaseModel):
    """Team statistics data transfer object."""
    team_name: str
    matches_played: int
    wins: int
    draws: int
    losses: int
    goals_scored: int
    goals_conceded: int
    home_wins: int
    away_wins: int
    recent_form: str
    win_rate: float
    goals_per_match: float
    goals_conceded_per_match: float

    class Config:
        from_attributes = True


class MatchSummaryDTO(BaseModel):
    """Descriptive statistics over a set of matches."""
    total_matches: int
    home_wins: int
    draws: int
    away_wins: int
    record: str
    average_goals: float
    average_first_half_goals: float
    btts_match_rate: float
    over25_match_rate: float
    results: list[str] = Field(default_factory=list)

    class Config:
        from_attributes = True


class TeamStatisticsResponseDTO(BaseModel):
    statistics: TeamStatisticsDTO
    summary: MatchSummaryDTO
    recent_matches: list[MatchDTO]


class HeadToHeadResponseDTO(BaseModel):
    home_team: str
    away_team: str
    summary: MatchSummaryDTO
    matches: list[MatchDTO]


# ============================================================
# Utility DTOs
# ============================================================

class HealthResponseDTO(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    timestamp: datetime
    worker_running: bool = False


class ErrorResponseDTO(BaseModel):
    """Error response."""
    error: str
    message: str
    details: Optional[dict[str, Any]] = None
