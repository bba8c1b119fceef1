"""Instance lookup route."""

from fastapi import APIRouter, Depends

from friday.api.dependencies import get_leaderboard_service
from friday.schemas import ErrorResponse, InstanceResponse
from friday.services import LeaderboardService

router = APIRouter(prefix="/api/instance", tags=["Instances"])


@router.get(
    "/{instance_id}",
    response_model=InstanceResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_instance(
    instance_id: str,
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """One participant's submission and current standing."""
    return service.get_instance(instance_id)
