"""
Domain Value Objects Module

Value objects are immutable objects that are defined by their attributes rather than identity.
They encapsulate validation logic and provide type safety.
"""

from dataclasses import dataclass

from match_analytics.domain import constants


@dataclass(frozen=True)
class OutcomeProbabilities:
    """
    Home win / draw / away win probabilities.

    Raw values coming from the truncated scoreline grid sum to slightly
    less than 1; use `normalized()` to rescale them.
    """
    home_win: float
    draw: float
    away_win: float

    def __post_init__(self):
        if self.home_win < 0 or self.draw < 0 or self.away_win < 0:
            raise ValueError("Outcome probabilities must be non-negative")

    @property
    def total(self) -> float:
        return self.home_win + self.draw + self.away_win

    def normalized(self) -> "OutcomeProbabilities":
        """Rescale so the three outcomes sum to 1."""
        total = self.total
        if total <= 0:
            raise ValueError("Cannot normalize an empty distribution")
        return OutcomeProbabilities(
            home_win=self.home_win / total,
            draw=self.draw / total,
            away_win=self.away_win / total,
        )

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.home_win, self.draw, self.away_win)


@dataclass(frozen=True)
class ModelSettings:
    """
    Tunable constants of the baseline model.

    Defaults mirror `domain.constants`. The form sensitivity and the
    confidence rates are calibration choices and are expected to be
    revisited against held-out match outcomes.
    """
    max_goals: int = constants.MAX_GOALS
    form_window: int = constants.FORM_WINDOW
    expected_goals_window: int = constants.EXPECTED_GOALS_WINDOW
    neutral_form_index: float = constants.NEUTRAL_FORM_INDEX
    neutral_expected_goals: float = constants.NEUTRAL_EXPECTED_GOALS
    home_advantage: float = constants.HOME_ADVANTAGE_MULTIPLIER
    away_disadvantage: float = constants.AWAY_DISADVANTAGE_MULTIPLIER
    form_sensitivity: float = constants.FORM_SENSITIVITY
    min_outcome_probability: float = constants.MIN_OUTCOME_PROBABILITY
    max_outcome_probability: float = constants.MAX_OUTCOME_PROBABILITY
    max_over25_probability: float = constants.MAX_OVER_25_PROBABILITY
    base_confidence: float = constants.BASE_CONFIDENCE
    h2h_confidence_cap: float = constants.H2H_CONFIDENCE_CAP
    h2h_confidence_rate: float = constants.H2H_CONFIDENCE_RATE
    home_confidence_cap: float = constants.HOME_CONFIDENCE_CAP
    home_confidence_rate: float = constants.HOME_CONFIDENCE_RATE
    away_confidence_cap: float = constants.AWAY_CONFIDENCE_CAP
    away_confidence_rate: float = constants.AWAY_CONFIDENCE_RATE

    def __post_init__(self):
        if self.max_goals < 2:
            raise ValueError("max_goals must cover at least 3 total goals")
        caps = self.base_confidence + self.h2h_confidence_cap + self.home_confidence_cap + self.away_confidence_cap
        if caps > 1.0 + 1e-12:
            raise ValueError(f"Confidence caps must sum to at most 1, got {caps}")
