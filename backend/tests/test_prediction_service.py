"""
Unit Tests for Prediction Service

Tests the core prediction algorithm and calculations.
"""

import math

import pytest

from match_analytics.domain.services.prediction_service import PredictionService
from match_analytics.domain.value_objects.value_objects import ModelSettings, OutcomeProbabilities
from match_analytics.domain.exceptions import InvalidPredictionInputException
from match_analytics.domain.constants import BASELINE_MODEL_VERSION


class TestPoissonGrid:
    """Tests for the scoreline grid calculations."""

    @pytest.fixture
    def service(self):
        return PredictionService()

    def test_distribution_matches_poisson(self, service):
        probs = service._get_poisson_distribution(2.0, 6)
        assert len(probs) == 7
        assert probs[0] == pytest.approx(math.exp(-2))
        assert probs[2] == pytest.approx(2 * math.exp(-2))

    def test_distribution_with_zero_rate(self, service):
        assert service._get_poisson_distribution(0.0, 6) == [1.0, 0, 0, 0, 0, 0, 0]

    def test_raw_outcomes_lose_truncated_mass(self, service):
        raw = service.calculate_outcome_probabilities(1.5, 1.2)
        assert 0.99 < raw.total < 1.0

    def test_raw_outcomes_favour_higher_rate(self, service):
        raw = service.calculate_outcome_probabilities(2.0, 0.8)
        assert raw.home_win > raw.away_win

    def test_goalless_rates_give_certain_draw(self, service):
        raw = service.calculate_outcome_probabilities(0.0, 0.0)
        assert raw.as_tuple() == (0.0, 1.0, 0.0)

    def test_over25_probability(self, service):
        # Total goals ~ Poisson(3.0) on the grid
        expected = 1 - math.exp(-3) * (1 + 3 + 4.5)
        assert service.calculate_over25_probability(1.5, 1.5) == pytest.approx(expected, abs=0.01)

    def test_over25_capped(self):
        service = PredictionService(ModelSettings(max_over25_probability=0.5))
        assert service.calculate_over25_probability(2.0, 2.0) == 0.5

    def test_over25_zero_without_goals(self, service):
        assert service.calculate_over25_probability(0.0, 0.0) == 0.0


class TestFormAdjustment:
    """Tests for the form-based adjustment of outcome probabilities."""

    @pytest.fixture
    def service(self):
        return PredictionService()

    def test_equal_form_keeps_win_probabilities(self, service):
        raw = OutcomeProbabilities(home_win=0.45, draw=0.28, away_win=0.25)
        adjusted = service.apply_form_adjustment(raw, 0.5, 0.5)

        assert adjusted.home_win == pytest.approx(0.45)
        assert adjusted.away_win == pytest.approx(0.25)
        assert adjusted.draw == pytest.approx(0.30)

    def test_better_home_form_shifts_towards_home(self, service):
        raw = OutcomeProbabilities(home_win=0.4, draw=0.3, away_win=0.3)
        adjusted = service.apply_form_adjustment(raw, 1.0, 0.5)

        # 0.5 form difference * 0.2 sensitivity
        assert adjusted.home_win == pytest.approx(0.5)
        assert adjusted.away_win == pytest.approx(0.2)

    def test_clamps_to_bounds(self, service):
        raw = OutcomeProbabilities(home_win=0.95, draw=0.05, away_win=0.0)
        adjusted = service.apply_form_adjustment(raw, 1.0, 0.0)

        assert adjusted.home_win == pytest.approx(0.9)
        assert adjusted.away_win == pytest.approx(0.05)
        assert adjusted.draw == pytest.approx(0.05)

    def test_draw_floor_then_normalized(self, service):
        raw = OutcomeProbabilities(home_win=0.9, draw=0.0, away_win=0.9)
        adjusted = service.apply_form_adjustment(raw, 0.5, 0.5)

        # 0.9 / 0.9 / 0.05 floor, rescaled to sum to 1
        assert sum(adjusted.as_tuple()) == pytest.approx(1.0)
        assert adjusted.draw == pytest.approx(0.05 / 1.85)
        assert adjusted.home_win == pytest.approx(adjusted.away_win)

    def test_custom_sensitivity(self):
        service = PredictionService(ModelSettings(form_sensitivity=0.0))
        raw = OutcomeProbabilities(home_win=0.4, draw=0.3, away_win=0.3)
        adjusted = service.apply_form_adjustment(raw, 1.0, 0.0)
        assert adjusted.home_win == pytest.approx(0.4)


class TestComputeBaseline:
    """Tests for the full baseline prediction."""

    @pytest.fixture
    def service(self):
        return PredictionService()

    @staticmethod
    def assert_valid(prediction):
        total = (
            prediction.home_win_probability
            + prediction.draw_probability
            + prediction.away_win_probability
        )
        assert total == pytest.approx(1.0, abs=1e-9)
        for value in (
            prediction.home_win_probability,
            prediction.draw_probability,
            prediction.away_win_probability,
            prediction.btts_probability,
            prediction.over25_probability,
            prediction.confidence_score,
        ):
            assert 0.0 <= value <= 1.0
        assert prediction.over25_probability <= 0.95
        assert prediction.prediction_source == "local"
        assert prediction.model_version == BASELINE_MODEL_VERSION

    def test_empty_history_uses_neutral_defaults(self, service):
        prediction = service.compute_baseline("Home FC", "Away FC", [], [], [])

        self.assert_valid(prediction)
        assert prediction.confidence_score == pytest.approx(0.3)
        # Home advantage alone tilts the prediction
        assert prediction.home_win_probability > prediction.away_win_probability
        assert prediction.key_factors == ()

    def test_dominant_head_to_head(self, service, make_match):
        h2h = [make_match("Barcelona", "Real Madrid", 3, 0) for _ in range(10)]

        prediction = service.compute_baseline("Barcelona", "Real Madrid", h2h, [], [])

        self.assert_valid(prediction)
        assert prediction.home_win_probability == pytest.approx(0.9)
        assert prediction.away_win_probability == pytest.approx(0.05)
        assert prediction.btts_probability == pytest.approx(0.0, abs=1e-12)
        assert prediction.confidence_score == pytest.approx(0.6)
        assert prediction.key_factors == (
            "Barcelona excellent form",
            "Real Madrid poor form",
            "High-scoring home team",
        )

    def test_zero_history_scenario(self, service):
        prediction = service.compute_baseline("Barcelona", "Getafe", [], [], [])

        assert prediction.confidence_score == pytest.approx(0.3)
        assert prediction.home_win_probability > prediction.away_win_probability
        assert prediction.most_likely_outcome.value == "home_win"

    def test_more_wins_never_lower_win_probability(self, service, make_match):
        previous = 0.0
        for wins in range(6):
            # Same goals scored in every match, so only form changes
            home = [make_match("A", "C", 1, 0 if i < wins else 2) for i in range(5)]
            prediction = service.compute_baseline("A", "B", [], home, [])
            assert prediction.home_win_probability >= previous
            previous = prediction.home_win_probability

    def test_confidence_grows_with_history(self, service, make_match):
        previous = 0.0
        for size in range(0, 40, 5):
            away = [make_match("D", "B", 1, 1) for _ in range(size)]
            prediction = service.compute_baseline("A", "B", [], [], away)
            assert previous <= prediction.confidence_score <= 1.0
            previous = prediction.confidence_score

    def test_confidence_capped_at_one(self, service, make_match):
        h2h = [make_match("A", "B", 1, 1) for _ in range(40)]
        home = [make_match("A", "C", 1, 0) for _ in range(40)]
        away = [make_match("D", "B", 0, 1) for _ in range(40)]

        prediction = service.compute_baseline("A", "B", h2h, home, away)

        self.assert_valid(prediction)
        assert prediction.confidence_score == pytest.approx(1.0)
        assert "Strong H2H history" in prediction.key_factors

    def test_confidence_counts_raw_collections(self, service, make_match):
        shared = make_match("A", "B", 1, 0)
        prediction = service.compute_baseline("A", "B", [shared], [shared], [shared])
        # 0.3 + 0.03 + 0.01 + 0.01
        assert prediction.confidence_score == pytest.approx(0.35)

    def test_duplicate_matches_counted_once(self, service, make_match):
        shared = make_match("A", "B", 4, 0)
        other = make_match("A", "C", 0, 0)

        with_duplicate = service.compute_baseline("A", "B", [shared], [shared, other], [])
        without_duplicate = service.compute_baseline("A", "B", [shared], [other], [])

        assert with_duplicate.home_win_probability == pytest.approx(without_duplicate.home_win_probability)
        assert with_duplicate.over25_probability == pytest.approx(without_duplicate.over25_probability)

    def test_deterministic(self, service, make_match):
        h2h = [make_match("A", "B", 2, 1), make_match("A", "B", 0, 2)]
        home = [make_match("A", "C", 3, 3)]
        away = [make_match("D", "B", 1, 2)]

        first = service.compute_baseline("A", "B", h2h, home, away)
        second = service.compute_baseline("A", "B", h2h, home, away)

        assert first == second

    def test_ignores_input_order(self, service, make_match):
        home = [make_match("A", "C", g, 1) for g in range(7)]
        first = service.compute_baseline("A", "B", [], home, [])
        second = service.compute_baseline("A", "B", [], list(reversed(home)), [])
        assert first == second

    @pytest.mark.parametrize("home_team,away_team,message", [
        ("", "B", "Home team name is required"),
        ("   ", "B", "Home team name is required"),
        ("A", "", "Away team name is required"),
    ])
    def test_blank_team_names_rejected(self, service, home_team, away_team, message):
        with pytest.raises(InvalidPredictionInputException, match=message):
            service.compute_baseline(home_team, away_team, [], [], [])

    def test_merge_history_deduplicates_by_id(self, make_match):
        a = make_match(match_id=1)
        b = make_match(match_id=2)
        merged = PredictionService._merge_history([a, b], [b, a, make_match(match_id=3)])
        assert [m.id for m in merged] == [1, 2, 3]
