"""
Predictions Router

API endpoints for getting match predictions.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query

from match_analytics.api.dependencies import (
    get_accuracy_stats_use_case,
    get_match_prediction_use_case,
    get_refresh_prediction_use_case,
)
from match_analytics.application.dtos.dtos import (
    AccuracyStatsDTO,
    ErrorResponseDTO,
    PredictionParams,
    PredictionResultDTO,
    RefreshPredictionResponseDTO,
)
from match_analytics.application.use_cases.use_cases import (
    GetAccuracyStatsUseCase,
    GetMatchPredictionUseCase,
    RefreshPredictionUseCase,
)
from match_analytics.domain.exceptions import (
    DataSourceException,
    InvalidPredictionInputException,
    PredictionException,
    PredictionTimeoutException,
    WorkerUnavailableException,
)


router = APIRouter(prefix="/predictions", tags=["Predictions"])


@router.post(
    "",
    response_model=PredictionResultDTO,
    responses={
        400: {"model": ErrorResponseDTO, "description": "Missing team names"},
        500: {"model": ErrorResponseDTO, "description": "Prediction failed"},
        503: {"model": ErrorResponseDTO, "description": "Worker or match backend unavailable"},
        504: {"model": ErrorResponseDTO, "description": "Prediction timed out"},
    },
    summary="Get prediction for a team pairing",
    description="Returns the remote (edge) prediction when available, otherwise the local baseline prediction.",
)
async def get_prediction(
    params: PredictionParams,
    use_case: GetMatchPredictionUseCase = Depends(get_match_prediction_use_case),
) -> PredictionResultDTO:
    try:
        return await use_case.execute(params)
    except InvalidPredictionInputException as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PredictionTimeoutException as e:
        raise HTTPException(status_code=504, detail=str(e))
    except WorkerUnavailableException as e:
        raise HTTPException(status_code=503, detail=str(e))
    except DataSourceException as e:
        raise HTTPException(status_code=503, detail=str(e))
    except PredictionException as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post(
    "/refresh",
    response_model=RefreshPredictionResponseDTO,
    summary="Trigger a remote prediction update",
)
async def refresh_prediction(
    params: PredictionParams,
    use_case: RefreshPredictionUseCase = Depends(get_refresh_prediction_use_case),
) -> RefreshPredictionResponseDTO:
    return await use_case.execute(params)


@router.get(
    "/accuracy",
    response_model=AccuracyStatsDTO,
    responses={404: {"model": ErrorResponseDTO, "description": "Accuracy stats unavailable"}},
    summary="Get accuracy of past predictions",
)
async def get_accuracy_stats(
    date_from: datetime = Query(..., description="Start of the range (ISO-8601)"),
    date_to: datetime = Query(..., description="End of the range (ISO-8601)"),
    use_case: GetAccuracyStatsUseCase = Depends(get_accuracy_stats_use_case),
) -> AccuracyStatsDTO:
    try:
        stats = await use_case.execute(date_from, date_to)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if stats is None:
        raise HTTPException(status_code=404, detail="Accuracy statistics are not available")
    return stats
