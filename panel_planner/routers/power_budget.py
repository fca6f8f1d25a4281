"""Power budget router — scenario-based PSU demand."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from panel_planner.db.session import get_db
from panel_planner.power.scenarios import SCENARIOS, PowerScenario, ScenarioName
from panel_planner.services.power_budget_service import PowerBudgetService
from panel_planner.schemas.power import PowerBudgetRequest, PowerBudgetResponse

router = APIRouter()


def _get_service(db: AsyncSession = Depends(get_db)) -> PowerBudgetService:
    return PowerBudgetService(db)


@router.get("/scenarios", response_model=list[PowerScenario])
async def list_scenarios():
    """Return the built-in scenarios and their activation rules."""
    return SCENARIOS


@router.get("/", response_model=PowerBudgetResponse)
async def get_power_budget(
    scenario: ScenarioName = Query(ScenarioName.WORST_CASE),
    service: PowerBudgetService = Depends(_get_service),
):
    """Power budget for a named scenario."""
    return await service.get_power_budget(scenario)


@router.post("/", response_model=PowerBudgetResponse)
async def calculate_power_budget(
    data: PowerBudgetRequest,
    service: PowerBudgetService = Depends(_get_service),
):
    """Power budget with per-section toggles for the custom scenario."""
    return await service.get_power_budget(data.scenario, data.custom_toggles)
