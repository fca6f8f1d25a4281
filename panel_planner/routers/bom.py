"""BOM router — calculate and apply pin allocation plans."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from panel_planner.db.session import get_db
from panel_planner.services.bom_service import BomService
from panel_planner.schemas.bom import (
    BomApplyResult,
    BomCalculateRequest,
    BomCalculationResult,
)

router = APIRouter()


def _get_service(db: AsyncSession = Depends(get_db)) -> BomService:
    return BomService(db)


@router.post("/calculate", response_model=BomCalculationResult)
async def calculate_bom(
    data: BomCalculateRequest,
    service: BomService = Depends(_get_service),
):
    """Calculate pin allocations for a panel section. Writes nothing."""
    return await service.calculate(data.section_id)


@router.post("/apply", response_model=BomApplyResult, status_code=201)
async def apply_bom(
    data: BomCalculationResult,
    service: BomService = Depends(_get_service),
):
    """Create the pin assignments of a calculated plan. 409 if a pin was taken."""
    return await service.apply(data)
