"""
Statistics Domain Service

Empirical estimators consumed by the baseline prediction engine
(form index, expected goals, both-teams-to-score) and the descriptive
statistics shown on the dashboard.
"""

import math
import functools
from typing import Iterable, List, Optional, Sequence

from match_analytics.domain.entities.entities import Match, MatchSummary, TeamStatistics
from match_analytics.domain.value_objects.value_objects import ModelSettings
from match_analytics.domain import constants


class StatisticsService:
    """
    Estimators over match history.

    The estimators never filter by team name: callers hand in matches that
    are already relevant to the team being evaluated and choose the side
    through `is_home_side`.
    """

    def __init__(self, settings: Optional[ModelSettings] = None):
        self.settings = settings or ModelSettings()

    @staticmethod
    @functools.lru_cache(maxsize=1024)
    def poisson_probability(expected: float, actual: int) -> float:
        """
        Calculate Poisson probability.

        P(X = k) = (λ^k * e^(-λ)) / k!

        Args:
            expected: Expected value (λ)
            actual: Actual value (k)

        Returns:
            Probability of exactly 'actual' events occurring
        """
        if expected <= 0:
            return 0.0 if actual > 0 else 1.0

        return (math.pow(expected, actual) * math.exp(-expected)) / math.factorial(actual)

    @staticmethod
    def most_recent(matches: Iterable[Match], limit: int) -> List[Match]:
        """Return at most `limit` matches ordered by kickoff, newest first."""
        ordered = sorted(matches, key=lambda m: m.match_time, reverse=True)
        return ordered[:limit]

    def form_index(self, matches: Sequence[Match], is_home_side: bool) -> float:
        """
        Normalized points won over the most recent matches.

        Win = 3, draw = 1, loss = 0, judged from the home side's point of
        view when `is_home_side` is true and from the away side otherwise.

        Args:
            matches: Matches of the team being evaluated
            is_home_side: Evaluate the team as the home side

        Returns:
            Points won divided by points available (0-1), 0.5 with no matches
        """
        recent = self.most_recent(matches, self.settings.form_window)
        if not recent:
            return self.settings.neutral_form_index

        points = 0
        for match in recent:
            goals_for = match.full_time_home_goals if is_home_side else match.full_time_away_goals
            goals_against = match.full_time_away_goals if is_home_side else match.full_time_home_goals
            if goals_for > goals_against:
                points += constants.POINTS_WIN
            elif goals_for == goals_against:
                points += constants.POINTS_DRAW

        return points / (constants.POINTS_WIN * len(recent))

    def expected_goals(self, matches: Sequence[Match], is_home_side: bool) -> float:
        """
        Expected goals rate from recent scoring.

        Mean of the side's full-time goals over the most recent matches,
        scaled by the fixed home advantage multiplier. The neutral default is
        scaled as well.

        Args:
            matches: Matches of the team being evaluated
            is_home_side: Evaluate the team as the home side

        Returns:
            Expected goals (λ) for the team
        """
        recent = self.most_recent(matches, self.settings.expected_goals_window)
        if recent:
            goals = [
                m.full_time_home_goals if is_home_side else m.full_time_away_goals
                for m in recent
            ]
            average = sum(goals) / len(goals)
        else:
            average = self.settings.neutral_expected_goals

        multiplier = self.settings.home_advantage if is_home_side else self.settings.away_disadvantage
        return average * multiplier

    def btts_probability(self, home_expected: float, away_expected: float) -> float:
        """
        Probability that both teams score, from the two Poisson rates.

        P(BTTS) = 1 - P(H=0) - P(A=0) + P(H=0) * P(A=0)
        """
        home_blank = self.poisson_probability(home_expected, 0)
        away_blank = self.poisson_probability(away_expected, 0)
        probability = 1 - home_blank - away_blank + home_blank * away_blank
        return min(1.0, max(0.0, probability))

    # --- Descriptive statistics ---

    @staticmethod
    def _normalize_name(name: str) -> str:
        """Normalize team name for comparison."""
        return " ".join(name.lower().split())

    @staticmethod
    def _is_same_team(target: str, candidate: str) -> bool:
        # Exact normalized match, or containment when the name is substantial
        if target == candidate:
            return True
        return len(target) > 3 and target in candidate

    @staticmethod
    def calculate_team_statistics(
        team_name: str,
        matches: List[Match],
    ) -> TeamStatistics:
        """
        Calculate statistics for a team from match history.

        Args:
            team_name: Team name
            matches: List of historical matches

        Returns:
            TeamStatistics for the team
        """
        matches_played = 0
        wins = 0
        draws = 0
        losses = 0
        goals_scored = 0
        goals_conceded = 0
        home_wins = 0
        away_wins = 0
        recent_results = []

        target_norm = StatisticsService._normalize_name(team_name)

        # Oldest first so the form string ends with the latest result
        for match in sorted(matches, key=lambda m: m.match_time):
            is_home = StatisticsService._is_same_team(
                target_norm, StatisticsService._normalize_name(match.home_team)
            )
            is_away = not is_home and StatisticsService._is_same_team(
                target_norm, StatisticsService._normalize_name(match.away_team)
            )
            if not (is_home or is_away):
                continue

            matches_played += 1

            goals_for = match.full_time_home_goals if is_home else match.full_time_away_goals
            goals_against = match.full_time_away_goals if is_home else match.full_time_home_goals
            goals_scored += goals_for
            goals_conceded += goals_against

            if goals_for > goals_against:
                wins += 1
                if is_home:
                    home_wins += 1
                else:
                    away_wins += 1
                recent_results.append('W')
            elif goals_for < goals_against:
                losses += 1
                recent_results.append('L')
            else:
                draws += 1
                recent_results.append('D')

        return TeamStatistics(
            team_name=team_name,
            matches_played=matches_played,
            wins=wins,
            draws=draws,
            losses=losses,
            goals_scored=goals_scored,
            goals_conceded=goals_conceded,
            home_wins=home_wins,
            away_wins=away_wins,
            recent_form=''.join(recent_results[-constants.FORM_WINDOW:]),
        )

    @staticmethod
    def summarize_matches(matches: Sequence[Match]) -> MatchSummary:
        """
        Aggregate results and scoring figures over a set of matches.

        Args:
            matches: Matches to summarize, e.g. a head-to-head history

        Returns:
            MatchSummary; all figures are zero for an empty collection
        """
        if not matches:
            return MatchSummary()

        n = len(matches)
        home_wins = sum(1 for m in matches if m.full_time_home_goals > m.full_time_away_goals)
        away_wins = sum(1 for m in matches if m.full_time_home_goals < m.full_time_away_goals)

        return MatchSummary(
            total_matches=n,
            home_wins=home_wins,
            draws=n - home_wins - away_wins,
            away_wins=away_wins,
            average_goals=sum(m.total_goals for m in matches) / n,
            average_first_half_goals=sum(m.half_time_goals for m in matches) / n,
            btts_match_rate=sum(1 for m in matches if m.both_teams_scored) / n,
            over25_match_rate=sum(1 for m in matches if m.total_goals > constants.OVER_25_THRESHOLD) / n,
            results=[m.result for m in StatisticsService.most_recent(matches, n)],
        )
