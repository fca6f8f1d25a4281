"""Pydantic schemas for the power budget endpoints."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field

from panel_planner.power.budget import PsuDemandResult, UtilizationLevel
from panel_planner.power.scenarios import ScenarioName


# ─── Request Schemas ───


class PowerBudgetRequest(BaseModel):
    scenario: ScenarioName = ScenarioName.WORST_CASE
    # Panel section id → on/off, only read by the custom scenario
    custom_toggles: dict[uuid.UUID, bool] | None = None


# ─── Response Schemas ───


class SectionConnectionCount(BaseModel):
    section_id: uuid.UUID
    section_name: str
    count: int


class RailBreakdown(BaseModel):
    rail: str
    label: str
    total_connections: int = 0
    by_section: list[SectionConnectionCount] = Field(default_factory=list)


class MosfetChannelUsage(BaseModel):
    channel_number: int
    pin_number: str | None = None
    component_name: str | None = None


class MosfetBoardUsage(BaseModel):
    id: uuid.UUID
    name: str
    channel_count: int
    used_channels: int
    free_channels: int
    channels: list[MosfetChannelUsage] = Field(default_factory=list)


class PowerBudgetResponse(BaseModel):
    scenario: ScenarioName
    scenario_label: str
    rail_currents: dict[str, float] = Field(default_factory=dict)
    psu_demand: PsuDemandResult
    utilization_level: UtilizationLevel
    utilization_ratio: float | None = None
    capacity_watts: float
    converter_efficiency: float
    infrastructure_current_ma: float = 0.0
    rails: list[RailBreakdown] = Field(default_factory=list)
    mosfet_boards: list[MosfetBoardUsage] = Field(default_factory=list)
