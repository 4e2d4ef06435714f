from __future__ import annotations

from fastapi import APIRouter, Depends

from app.models.bootstrap import BootstrapResponse
from app.services.dependencies import get_database_setup_service
from app.services.setup.database_setup_service import DatabaseSetupService

router = APIRouter(tags=["bootstrap"])


@router.post("/bootstrap", response_model=BootstrapResponse)
async def run_bootstrap(
    setup: DatabaseSetupService = Depends(get_database_setup_service),
) -> BootstrapResponse:
    return await setup.setup_database_environment()
