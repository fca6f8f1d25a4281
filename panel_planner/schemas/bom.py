"""Pydantic schemas for BOM calculation and apply."""

from __future__ import annotations

import uuid
from typing import Annotated

from pydantic import BaseModel, Field

from panel_planner.schemas.enums import PinMode, PinType, PowerRail

# D0, D1, ... A0, A1, ... without leading zeros
PIN_NUMBER_PATTERN = r"^[DA](0|[1-9]\d*)$"

PinNumber = Annotated[str, Field(pattern=PIN_NUMBER_PATTERN)]


# ─── Request Schemas ───


class BomCalculateRequest(BaseModel):
    section_id: uuid.UUID


# ─── Calculation Result ───


class PinAllocation(BaseModel):
    board_id: uuid.UUID
    board_name: str
    pins: list[PinNumber] = Field(..., min_length=1)


class ComponentAllocation(BaseModel):
    component_instance_id: uuid.UUID
    name: str
    type_name: str
    pins_needed: int = Field(..., ge=0)
    pin_mode: PinMode
    pin_type: PinType
    pwm_required: bool = False
    power_rail: PowerRail
    allocations: list[PinAllocation] = Field(default_factory=list)


class BomCalculationResult(BaseModel):
    """Allocation plan for one panel section.

    Returned by calculate and posted back unchanged to apply.
    """

    section_id: uuid.UUID
    section_name: str
    components: list[ComponentAllocation] = Field(default_factory=list)
    new_boards_needed: int = Field(default=0, ge=0)
    mosfet_channels_needed: int = Field(default=0, ge=0)
    mosfet_channels_available: int = Field(default=0, ge=0)


# ─── Apply Result ───


class CreatedPinAssignment(BaseModel):
    component_instance_id: uuid.UUID
    component_name: str
    board_id: uuid.UUID
    board_name: str
    pin_number: str


class BomApplyResult(BaseModel):
    section_id: uuid.UUID
    section_name: str
    total_pins_created: int = 0
    assignments: list[CreatedPinAssignment] = Field(default_factory=list)
