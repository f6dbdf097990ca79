"""Role-scoped dashboard summary."""

from fastapi import APIRouter

from src.app.api.dependencies import CurrentPrincipal, ProjectServiceDep
from src.app.schemas.project import DashboardRead

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardRead)
async def get_dashboard(principal: CurrentPrincipal, service: ProjectServiceDep) -> DashboardRead:
    """Five most recent visible projects and counts per status."""
    return await service.dashboard(principal)
