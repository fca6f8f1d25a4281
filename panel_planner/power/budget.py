"""Power Budget Calculator — rail currents, PSU demand and utilization.

Pure functions. Currents are milliamps, power is watts.

    P_rail = I_rail · V_rail / 1000
    P_psu  = P_rail                 (27V rail, wired straight from the PSU)
    P_psu  = P_rail / η             (every rail behind the step-down converter)
"""

from __future__ import annotations

import uuid
from enum import Enum

from pydantic import BaseModel, Field

from panel_planner.power.scenarios import (
    PowerComponent,
    PowerScenario,
    get_activation,
)
from panel_planner.schemas.enums import PowerRail

# Actual supply voltages; the 27V rail runs at 28V
RAIL_VOLTAGES: dict[str, float] = {
    PowerRail.FIVE_V.value: 5,
    PowerRail.NINE_V.value: 9,
    PowerRail.TWENTY_SEVEN_V.value: 28,
}

DIRECT_RAIL = max(RAIL_VOLTAGES, key=RAIL_VOLTAGES.get)
INFRASTRUCTURE_RAIL = min(RAIL_VOLTAGES, key=RAIL_VOLTAGES.get)

AMBER_THRESHOLD = 0.7
RED_THRESHOLD = 0.9


class UtilizationLevel(str, Enum):
    GREEN = "green"
    AMBER = "amber"
    RED = "red"


class RailPowerDetail(BaseModel):
    watts: float
    current_ma: float
    voltage: float
    psu_draw_watts: float


class PsuDemandResult(BaseModel):
    total_watts: float = 0.0
    infrastructure_watts: float = 0.0
    per_rail: dict[str, RailPowerDetail] = Field(default_factory=dict)


def calculate_rail_current_ma(
    components: list[PowerComponent],
    scenario: PowerScenario,
    custom_toggles: dict[uuid.UUID, bool] | None = None,
) -> dict[str, float]:
    """Sum activated current per rail.

    Components with no rail or no typical current are skipped; rails
    nothing draws from are absent from the result.
    """
    rail_currents: dict[str, float] = {}

    for comp in components:
        if comp.power_rail == PowerRail.NONE.value or comp.typical_current_ma == 0:
            continue

        activation = get_activation(comp, scenario, custom_toggles)
        rail_currents[comp.power_rail] = (
            rail_currents.get(comp.power_rail, 0) + comp.typical_current_ma * activation
        )

    return rail_currents


def calculate_psu_demand_watts(
    rail_currents: dict[str, float],
    efficiency: float,
    infrastructure_current_ma: float = 0,
) -> PsuDemandResult:
    """Convert rail currents to PSU-side watts including converter losses.

    ``infrastructure_current_ma`` is the always-on logic load of the
    boards themselves, drawn from the lowest rail through the converter.
    ``total_watts`` is what gets compared against the PSU capacity.
    """
    if not 0 < efficiency <= 1:
        raise ValueError(f"Converter efficiency must be in (0, 1], got {efficiency!r}")

    result = PsuDemandResult()

    for rail, current_ma in rail_currents.items():
        voltage = RAIL_VOLTAGES.get(rail, 0)
        watts = current_ma * voltage / 1000
        psu_draw = watts if rail == DIRECT_RAIL else watts / efficiency

        result.per_rail[rail] = RailPowerDetail(
            watts=watts,
            current_ma=current_ma,
            voltage=voltage,
            psu_draw_watts=psu_draw,
        )
        result.total_watts += psu_draw

    if infrastructure_current_ma > 0:
        infra_watts = infrastructure_current_ma * RAIL_VOLTAGES[INFRASTRUCTURE_RAIL] / 1000
        result.infrastructure_watts = infra_watts / efficiency
        result.total_watts += result.infrastructure_watts

    return result


def get_utilization_level(demand_watts: float, capacity_watts: float) -> UtilizationLevel:
    """green below 70 %, amber 70–90 % inclusive, red above 90 %.

    A PSU with no capacity is always red.
    """
    if capacity_watts <= 0:
        return UtilizationLevel.RED
    ratio = demand_watts / capacity_watts
    if ratio > RED_THRESHOLD:
        return UtilizationLevel.RED
    if ratio >= AMBER_THRESHOLD:
        return UtilizationLevel.AMBER
    return UtilizationLevel.GREEN
