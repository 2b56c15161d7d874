"""
Shared fixtures for the match analytics test suite.
"""

import itertools
from datetime import datetime, timedelta

import pytest

from match_analytics.domain.entities.entities import Match
from match_analytics.utils.time_utils import DEFAULT_TZ


KICKOFF = DEFAULT_TZ.localize(datetime(2024, 1, 1, 15, 0))


@pytest.fixture
def make_match():
    """
    Factory for matches with sequential ids.

    Each new match kicks off one day after the previous one unless
    `days_ago`/`match_time` is given, so creation order is chronological.
    """
    ids = itertools.count(1)

    def _make(
        home_team="Home FC",
        away_team="Away FC",
        home_goals=1,
        away_goals=1,
        ht_home=0,
        ht_away=0,
        match_time=None,
        match_id=None,
        league="Premier League",
    ):
        next_id = next(ids)
        return Match(
            id=match_id if match_id is not None else next_id,
            home_team=home_team,
            away_team=away_team,
            full_time_home_goals=home_goals,
            full_time_away_goals=away_goals,
            half_time_home_goals=ht_home,
            half_time_away_goals=ht_away,
            match_time=match_time or KICKOFF + timedelta(days=next_id),
            league=league,
        )

    return _make
