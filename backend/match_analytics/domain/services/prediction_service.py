"""
Prediction Service Module

This domain service contains the baseline prediction engine:
1. Poisson distribution over a bounded scoreline grid for match outcomes
2. Form-based adjustment and normalization of the outcome probabilities
3. Secondary markets (both teams to score, over 2.5 goals)

This is a pure domain service with no external dependencies.
"""

import math
from typing import Optional, Sequence

from match_analytics.domain.entities.entities import BaselinePrediction, Match, PredictionSource
from match_analytics.domain.value_objects.value_objects import ModelSettings, OutcomeProbabilities
from match_analytics.domain.services.statistics_service import StatisticsService
from match_analytics.domain.services.confidence_calculator import ConfidenceCalculator
from match_analytics.domain.exceptions import InvalidPredictionInputException
from match_analytics.domain import constants


class PredictionService:
    """
    Domain service for generating baseline match predictions.

    Every call is independent: the service holds configuration only and
    never reads or writes shared state, so one instance can serve any
    number of requests.
    """

    def __init__(
        self,
        settings: Optional[ModelSettings] = None,
        statistics_service: Optional[StatisticsService] = None,
        confidence_calculator: Optional[ConfidenceCalculator] = None,
    ):
        """Initialize the prediction service."""
        self.settings = settings or ModelSettings()
        self.statistics = statistics_service or StatisticsService(self.settings)
        self.confidence = confidence_calculator or ConfidenceCalculator(self.settings)

    @staticmethod
    def _get_poisson_distribution(expected: float, max_goals: int) -> list[float]:
        """
        Generate Poisson distribution up to max_goals.
        Optimized to avoid repeated factorial/pow calculations.
        """
        if expected <= 0:
            probs = [0.0] * (max_goals + 1)
            probs[0] = 1.0
            return probs

        probs = [0.0] * (max_goals + 1)
        # P(0) = e^-lambda
        current_prob = math.exp(-expected)
        probs[0] = current_prob

        for k in range(1, max_goals + 1):
            current_prob *= expected / k
            probs[k] = current_prob

        return probs

    def calculate_outcome_probabilities(
        self,
        home_expected: float,
        away_expected: float,
    ) -> OutcomeProbabilities:
        """
        Calculate raw match outcome probabilities using Poisson distribution.

        Scorelines are enumerated for 0..max_goals goals per side. The mass
        beyond the grid is ignored, so the three values sum to slightly less
        than 1 and are left un-normalized here.

        Args:
            home_expected: Expected goals for home team
            away_expected: Expected goals for away team

        Returns:
            Raw (home_win, draw, away_win) grid sums
        """
        home_win = 0.0
        draw = 0.0
        away_win = 0.0

        max_goals = self.settings.max_goals
        home_probs = self._get_poisson_distribution(home_expected, max_goals)
        away_probs = self._get_poisson_distribution(away_expected, max_goals)

        for home_goals in range(max_goals + 1):
            for away_goals in range(max_goals + 1):
                prob = home_probs[home_goals] * away_probs[away_goals]

                if home_goals > away_goals:
                    home_win += prob
                elif home_goals == away_goals:
                    draw += prob
                else:
                    away_win += prob

        return OutcomeProbabilities(home_win=home_win, draw=draw, away_win=away_win)

    def calculate_over25_probability(
        self,
        home_expected: float,
        away_expected: float,
    ) -> float:
        """
        Probability of more than 2.5 total goals over the same truncated grid.

        Capped at 0.95 to keep the market away from near-certainty.
        """
        over = 0.0

        max_goals = self.settings.max_goals
        home_probs = self._get_poisson_distribution(home_expected, max_goals)
        away_probs = self._get_poisson_distribution(away_expected, max_goals)

        for home_goals in range(max_goals + 1):
            for away_goals in range(max_goals + 1):
                if home_goals + away_goals > constants.OVER_25_THRESHOLD:
                    over += home_probs[home_goals] * away_probs[away_goals]

        return max(0.0, min(self.settings.max_over25_probability, over))

    def apply_form_adjustment(
        self,
        raw: OutcomeProbabilities,
        home_form: float,
        away_form: float,
    ) -> OutcomeProbabilities:
        """
        Shift probability between home and away wins by form difference.

        The adjusted win probabilities are clamped to [0.05, 0.9], the draw
        takes the remainder (at least 0.05) and the three are normalized to
        sum to 1.

        Args:
            raw: Grid probabilities from `calculate_outcome_probabilities`
            home_form: Home team form index (0-1)
            away_form: Away team form index (0-1)

        Returns:
            Normalized outcome probabilities
        """
        s = self.settings
        adjustment = (home_form - away_form) * s.form_sensitivity

        home_win = self._clamp(raw.home_win + adjustment, s.min_outcome_probability, s.max_outcome_probability)
        away_win = self._clamp(raw.away_win - adjustment, s.min_outcome_probability, s.max_outcome_probability)
        draw = max(s.min_outcome_probability, 1 - home_win - away_win)

        return OutcomeProbabilities(home_win=home_win, draw=draw, away_win=away_win).normalized()

    @staticmethod
    def _clamp(value: float, lower: float, upper: float) -> float:
        return max(lower, min(upper, value))

    @staticmethod
    def _merge_history(*collections: Sequence[Match]) -> list[Match]:
        """Concatenate match collections, keeping the first copy of each match id."""
        seen = set()
        merged = []
        for collection in collections:
            for match in collection:
                if match.id in seen:
                    continue
                seen.add(match.id)
                merged.append(match)
        return merged

    def compute_baseline(
        self,
        home_team: str,
        away_team: str,
        matches: Sequence[Match],
        home_matches: Sequence[Match],
        away_matches: Sequence[Match],
    ) -> BaselinePrediction:
        """
        Compute the baseline prediction for a home/away pairing.

        Empty collections fall back to neutral defaults and produce a
        complete result with low confidence.

        Args:
            home_team: Home team name
            away_team: Away team name
            matches: Head-to-head history of the two teams
            home_matches: Recent history of the home team
            away_matches: Recent history of the away team

        Returns:
            BaselinePrediction tagged as a local prediction

        Raises:
            InvalidPredictionInputException: If a team name is missing or blank
        """
        if not home_team or not home_team.strip():
            raise InvalidPredictionInputException("Home team name is required")
        if not away_team or not away_team.strip():
            raise InvalidPredictionInputException("Away team name is required")

        home_history = self._merge_history(matches, home_matches)
        away_history = self._merge_history(matches, away_matches)

        home_form = self.statistics.form_index(home_history, is_home_side=True)
        away_form = self.statistics.form_index(away_history, is_home_side=False)

        home_expected = self.statistics.expected_goals(home_history, is_home_side=True)
        away_expected = self.statistics.expected_goals(away_history, is_home_side=False)

        raw = self.calculate_outcome_probabilities(home_expected, away_expected)
        outcome = self.apply_form_adjustment(raw, home_form, away_form)

        btts = self.statistics.btts_probability(home_expected, away_expected)
        over25 = self.calculate_over25_probability(home_expected, away_expected)

        confidence = self.confidence.calculate_confidence(
            len(matches), len(home_matches), len(away_matches)
        )

        key_factors = self.confidence.build_key_factors(
            home_team=home_team,
            away_team=away_team,
            home_form=home_form,
            away_form=away_form,
            home_expected=home_expected,
            away_expected=away_expected,
            btts_probability=btts,
            over25_probability=over25,
            h2h_count=len(matches),
        )

        return BaselinePrediction(
            home_win_probability=outcome.home_win,
            draw_probability=outcome.draw,
            away_win_probability=outcome.away_win,
            btts_probability=btts,
            over25_probability=over25,
            confidence_score=confidence,
            key_factors=key_factors,
            prediction_source=PredictionSource.LOCAL.value,
            model_version=constants.BASELINE_MODEL_VERSION,
        )
