"""
Confidence Calculator Service Module

Scores how well a baseline prediction is supported by the amount of
history behind it, and explains the prediction with a short list of
key factors.
"""

from typing import Optional

from match_analytics.domain.value_objects.value_objects import ModelSettings
from match_analytics.domain import constants


class ConfidenceCalculator:
    """
    Calculates data-sufficiency confidence and key factors.
    """

    def __init__(self, settings: Optional[ModelSettings] = None):
        self.settings = settings or ModelSettings()

    def calculate_confidence(
        self,
        h2h_count: int,
        home_count: int,
        away_count: int,
    ) -> float:
        """
        Confidence from sample sizes.

        Base 0.3, plus up to 0.3 for head-to-head matches, up to 0.2 for the
        home team's history and up to 0.2 for the away team's history.
        Each bucket is capped on its own, so the total tops out at 1.0.

        Args:
            h2h_count: Number of head-to-head matches
            home_count: Number of matches in the home team's history
            away_count: Number of matches in the away team's history

        Returns:
            Confidence score (0-1)
        """
        s = self.settings
        return (
            s.base_confidence
            + self._bucket(h2h_count, s.h2h_confidence_rate, s.h2h_confidence_cap)
            + self._bucket(home_count, s.home_confidence_rate, s.home_confidence_cap)
            + self._bucket(away_count, s.away_confidence_rate, s.away_confidence_cap)
        )

    @staticmethod
    def _bucket(count: int, rate: float, cap: float) -> float:
        return min(cap, max(0, count) * rate)

    def build_key_factors(
        self,
        home_team: str,
        away_team: str,
        home_form: float,
        away_form: float,
        home_expected: float,
        away_expected: float,
        btts_probability: float,
        over25_probability: float,
        h2h_count: int,
    ) -> tuple[str, ...]:
        """
        Human-readable factors behind a prediction.

        Rules are evaluated in a fixed order and each adds at most one
        entry, so identical inputs always give the same list.
        """
        factors = []

        for team, form in ((home_team, home_form), (away_team, away_form)):
            if form > constants.STRONG_FORM_THRESHOLD:
                factors.append(f"{team} excellent form")
            elif form < constants.POOR_FORM_THRESHOLD:
                factors.append(f"{team} poor form")

        if home_expected > constants.HIGH_SCORING_XG_THRESHOLD:
            factors.append("High-scoring home team")
        if away_expected > constants.HIGH_SCORING_XG_THRESHOLD:
            factors.append("High-scoring away team")

        if btts_probability > constants.LIKELY_MARKET_THRESHOLD:
            factors.append("Both teams likely to score")
        if over25_probability > constants.LIKELY_MARKET_THRESHOLD:
            factors.append("High-scoring match expected")

        if h2h_count > constants.STRONG_H2H_MATCHES:
            factors.append("Strong H2H history")

        return tuple(factors)
