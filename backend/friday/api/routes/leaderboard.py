"""Leaderboard API routes."""

from fastapi import APIRouter, Depends, Request

from friday.api.dependencies import (
    PageParams,
    enforce_submission_limit,
    get_client_info,
    get_leaderboard_service,
    get_submission_service,
    page_params,
    require_leaderboard,
    require_public_stats,
    require_submissions,
)
from friday.schemas import (
    ErrorResponse,
    LeaderboardResponse,
    StatsResponse,
    SubmissionRequest,
    SubmissionResponse,
)
from friday.services import ClientInfo, LeaderboardService, SubmissionService

router = APIRouter(prefix="/api/leaderboard", tags=["Leaderboard"])

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100

SUBMIT_ERRORS = {
    400: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.get(
    "",
    response_model=LeaderboardResponse,
    responses={503: {"model": ErrorResponse}},
    dependencies=[Depends(require_leaderboard)],
)
def get_leaderboard(
    page: PageParams = Depends(page_params(DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """Paginated leaderboard, highest score first."""
    return service.list_leaderboard(page.limit, page.offset)


@router.get(
    "/stats",
    response_model=StatsResponse,
    responses={503: {"model": ErrorResponse}},
    dependencies=[Depends(require_public_stats)],
)
def get_stats(service: LeaderboardService = Depends(get_leaderboard_service)):
    """Aggregate statistics and score distribution."""
    return service.get_stats()


@router.post("/submit", response_model=SubmissionResponse, responses=SUBMIT_ERRORS)
def submit_score(
    payload: SubmissionRequest,
    request: Request,
    client: ClientInfo = Depends(get_client_info),
    service: SubmissionService = Depends(get_submission_service),
):
    """
    Submit or update a score.

    A repeat submission for a known handle or instance id updates that
    row in place; the response carries the ranking after the write.
    """
    enforce_submission_limit(request, payload.instance_id)
    require_submissions(request.app.state.settings)

    result = service.submit(payload, client)
    return SubmissionResponse(
        updated=result.updated,
        rank=result.rank,
        total_participants=result.total_participants,
        percentile=result.percentile,
        instance_id=result.instance_id,
        handle=result.handle,
    )
