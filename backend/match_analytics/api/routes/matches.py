"""
Matches Router

API endpoints for searching historical matches and team statistics.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from match_analytics.api.dependencies import (
    ServiceContainer,
    get_container,
    get_head_to_head_use_case,
    get_search_matches_use_case,
    get_team_statistics_use_case,
)
from match_analytics.application.dtos.dtos import (
    ErrorResponseDTO,
    HeadToHeadResponseDTO,
    MatchesResponseDTO,
    TeamNamesResponseDTO,
    TeamStatisticsResponseDTO,
)
from match_analytics.application.use_cases.use_cases import (
    GetHeadToHeadUseCase,
    GetTeamStatisticsUseCase,
    SearchMatchesUseCase,
)
from match_analytics.domain.exceptions import DataSourceException


router = APIRouter(prefix="/matches", tags=["Matches"])


@router.get(
    "",
    response_model=MatchesResponseDTO,
    summary="Get recent matches",
    description="Returns the most recent matches, newest first.",
)
async def get_matches(
    limit: int = Query(default=100, ge=1, le=500, description="Maximum matches to return"),
    use_case: SearchMatchesUseCase = Depends(get_search_matches_use_case),
) -> MatchesResponseDTO:
    try:
        matches = await use_case.execute(limit=limit)
    except DataSourceException as e:
        raise HTTPException(status_code=503, detail=str(e))
    return MatchesResponseDTO(matches=matches, total=len(matches))


@router.get(
    "/search",
    response_model=MatchesResponseDTO,
    responses={503: {"model": ErrorResponseDTO, "description": "Match backend unavailable"}},
    summary="Search matches by team",
    description="Case-insensitive search on home and/or away team name. With one team, matches it at either venue.",
)
async def search_matches(
    home_team: Optional[str] = Query(default=None, description="Home team name fragment"),
    away_team: Optional[str] = Query(default=None, description="Away team name fragment"),
    limit: int = Query(default=50, ge=1, le=200, description="Maximum matches to return"),
    use_case: SearchMatchesUseCase = Depends(get_search_matches_use_case),
) -> MatchesResponseDTO:
    try:
        matches = await use_case.execute(home_team, away_team, limit)
    except DataSourceException as e:
        raise HTTPException(status_code=503, detail=str(e))
    return MatchesResponseDTO(matches=matches, total=len(matches))


@router.get(
    "/teams",
    response_model=TeamNamesResponseDTO,
    summary="List team names",
    description="Sorted team names, for autocomplete.",
)
async def get_team_names(container: ServiceContainer = Depends(get_container)) -> TeamNamesResponseDTO:
    return TeamNamesResponseDTO(teams=container.repository.get_team_names())


@router.get(
    "/team/{team_name}/statistics",
    response_model=TeamStatisticsResponseDTO,
    responses={503: {"model": ErrorResponseDTO, "description": "Match backend unavailable"}},
    summary="Get team statistics",
)
async def get_team_statistics(
    team_name: str,
    use_case: GetTeamStatisticsUseCase = Depends(get_team_statistics_use_case),
) -> TeamStatisticsResponseDTO:
    try:
        return await use_case.execute(team_name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DataSourceException as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get(
    "/head-to-head",
    response_model=HeadToHeadResponseDTO,
    summary="Get head-to-head record",
)
async def get_head_to_head(
    home_team: str = Query(..., description="Home team name"),
    away_team: str = Query(..., description="Away team name"),
    limit: int = Query(default=50, ge=1, le=200),
    use_case: GetHeadToHeadUseCase = Depends(get_head_to_head_use_case),
) -> HeadToHeadResponseDTO:
    try:
        return await use_case.execute(home_team, away_team, limit)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DataSourceException as e:
        raise HTTPException(status_code=503, detail=str(e))
