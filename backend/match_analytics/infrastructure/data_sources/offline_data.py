"""
Offline match dataset.

A small fixed set of results that keeps lookups answering when no match
backend is configured.
"""

from match_analytics.domain.entities.entities import Match


_OFFLINE_ROWS = [
    {
        "id": 1,
        "match_time": "2024-01-15T15:00:00Z",
        "home_team": "Barcelona",
        "away_team": "Real Madrid",
        "half_time_home_goals": 1,
        "half_time_away_goals": 0,
        "full_time_home_goals": 2,
        "full_time_away_goals": 1,
        "league": "spain",
        "season": "2023/24",
    },
    {
        "id": 2,
        "match_time": "2024-01-14T18:30:00Z",
        "home_team": "Valencia",
        "away_team": "Sevilla",
        "half_time_home_goals": 0,
        "half_time_away_goals": 1,
        "full_time_home_goals": 1,
        "full_time_away_goals": 1,
        "league": "spain",
        "season": "2023/24",
    },
    {
        "id": 3,
        "match_time": "2024-01-13T20:00:00Z",
        "home_team": "Athletic Bilbao",
        "away_team": "Villarreal",
        "half_time_home_goals": 2,
        "half_time_away_goals": 0,
        "full_time_home_goals": 3,
        "full_time_away_goals": 1,
        "league": "spain",
        "season": "2023/24",
    },
    {
        "id": 4,
        "match_time": "2024-01-12T16:15:00Z",
        "home_team": "Las Palmas",
        "away_team": "Getafe",
        "half_time_home_goals": 0,
        "half_time_away_goals": 0,
        "full_time_home_goals": 0,
        "full_time_away_goals": 2,
        "league": "spain",
        "season": "2023/24",
    },
    {
        "id": 5,
        "match_time": "2024-01-11T19:45:00Z",
        "home_team": "Girona",
        "away_team": "Alaves",
        "half_time_home_goals": 1,
        "half_time_away_goals": 1,
        "full_time_home_goals": 2,
        "full_time_away_goals": 2,
        "league": "spain",
        "season": "2023/24",
    },
    {
        "id": 6,
        "match_time": "2024-02-02T20:00:00Z",
        "home_team": "Manchester City",
        "away_team": "Liverpool",
        "half_time_home_goals": 1,
        "half_time_away_goals": 1,
        "full_time_home_goals": 2,
        "full_time_away_goals": 2,
        "league": "england",
        "season": "2023/24",
    },
    {
        "id": 7,
        "match_time": "2024-02-05T18:00:00Z",
        "home_team": "Arsenal",
        "away_team": "Chelsea",
        "half_time_home_goals": 0,
        "half_time_away_goals": 0,
        "full_time_home_goals": 1,
        "full_time_away_goals": 0,
        "league": "england",
        "season": "2023/24",
    },
    {
        "id": 8,
        "match_time": "2024-02-07T19:30:00Z",
        "home_team": "Bayern Munich",
        "away_team": "Borussia Dortmund",
        "half_time_home_goals": 2,
        "half_time_away_goals": 1,
        "full_time_home_goals": 3,
        "full_time_away_goals": 2,
        "league": "germany",
        "season": "2023/24",
    },
    {
        "id": 9,
        "match_time": "2024-02-09T20:45:00Z",
        "home_team": "Juventus",
        "away_team": "Inter",
        "half_time_home_goals": 0,
        "half_time_away_goals": 0,
        "full_time_home_goals": 0,
        "full_time_away_goals": 1,
        "league": "italy",
        "season": "2023/24",
    },
    {
        "id": 10,
        "match_time": "2024-02-12T21:00:00Z",
        "home_team": "PSG",
        "away_team": "Marseille",
        "half_time_home_goals": 1,
        "half_time_away_goals": 0,
        "full_time_home_goals": 2,
        "full_time_away_goals": 0,
        "league": "france",
        "season": "2023/24",
    },
]

OFFLINE_MATCHES: tuple[Match, ...] = tuple(Match.from_dict(row) for row in _OFFLINE_ROWS)


def _newest_first(matches):
    return sorted(matches, key=lambda m: m.match_time, reverse=True)


def offline_search_matches(home_team=None, away_team=None, limit=50) -> list[Match]:
    results = list(OFFLINE_MATCHES)
    if home_team:
        q = home_team.lower()
        results = [m for m in results if q in m.home_team.lower()]
    if away_team:
        q = away_team.lower()
        results = [m for m in results if q in m.away_team.lower()]
    return _newest_first(results)[:limit]


def offline_search_by_team(team_name: str, limit=50) -> list[Match]:
    q = team_name.lower()
    results = [m for m in OFFLINE_MATCHES if q in m.home_team.lower() or q in m.away_team.lower()]
    return _newest_first(results)[:limit]


def offline_team_names() -> list[str]:
    teams = set()
    for m in OFFLINE_MATCHES:
        teams.add(m.home_team)
        teams.add(m.away_team)
    return sorted(teams)
