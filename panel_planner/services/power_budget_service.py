"""Power budget service — builds the demand report from the inventory."""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from panel_planner.config import get_settings
from panel_planner.models.inventory import (
    Board,
    ComponentInstance,
    MosfetBoard,
    MosfetChannel,
    PinAssignment,
    PsuConfig,
)
from panel_planner.power.budget import (
    calculate_psu_demand_watts,
    calculate_rail_current_ma,
    get_utilization_level,
)
from panel_planner.power.scenarios import PowerComponent, ScenarioName, get_scenario
from panel_planner.schemas.enums import PowerRail
from panel_planner.schemas.power import (
    MosfetBoardUsage,
    MosfetChannelUsage,
    PowerBudgetResponse,
    RailBreakdown,
    SectionConnectionCount,
)

logger = logging.getLogger(__name__)

RAIL_LABELS: dict[str, str] = {
    PowerRail.FIVE_V.value: "5V",
    PowerRail.NINE_V.value: "9V",
    PowerRail.TWENTY_SEVEN_V.value: "27V",
    PowerRail.NONE.value: "None / Unassigned",
}


def _normalize_toggles(
    custom_toggles: dict[uuid.UUID | str, bool] | None,
) -> dict[uuid.UUID, bool] | None:
    """Key toggles by UUID so any spelling of a section id matches.

    Raises ValueError for a key that is not a UUID.
    """
    if custom_toggles is None:
        return None
    return {
        key if isinstance(key, uuid.UUID) else uuid.UUID(key): on
        for key, on in custom_toggles.items()
    }


class PowerBudgetService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_psu_config(self) -> tuple[float, float]:
        """Return (capacity_watts, converter_efficiency)."""
        result = await self.db.execute(select(PsuConfig).order_by(PsuConfig.id).limit(1))
        psu = result.scalar_one_or_none()
        if psu is None:
            settings = get_settings()
            logger.warning("No PSU config stored, using defaults")
            return settings.default_psu_capacity_watts, settings.default_converter_efficiency
        return psu.capacity_watts, psu.converter_efficiency

    async def load_power_components(self) -> list[PowerComponent]:
        stmt = (
            select(ComponentInstance)
            .options(
                selectinload(ComponentInstance.component_type),
                selectinload(ComponentInstance.panel_section),
            )
            .order_by(ComponentInstance.sort_order, ComponentInstance.name)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return [
            PowerComponent(
                instance_id=str(ci.id),
                instance_name=ci.name,
                component_type_name=ci.component_type.name,
                panel_section_id=ci.panel_section_id,
                panel_section_name=ci.panel_section.name,
                power_rail=ci.effective_power_rail,
                typical_current_ma=ci.component_type.typical_current_ma,
                standby_current_ma=ci.component_type.standby_current_ma,
            )
            for ci in result.scalars().all()
        ]

    async def infrastructure_current_ma(self) -> float:
        settings = get_settings()
        boards = (await self.db.execute(select(func.count(Board.id)))).scalar() or 0
        mosfet_boards = (
            await self.db.execute(select(func.count(MosfetBoard.id)))
        ).scalar() or 0
        return (
            boards * settings.board_logic_current_ma
            + mosfet_boards * settings.mosfet_board_logic_current_ma
        )

    async def rail_breakdown(self) -> list[RailBreakdown]:
        """Count wired pin connections per rail, split by panel section."""
        stmt = (
            select(PinAssignment)
            .where(PinAssignment.component_instance_id.is_not(None))
            .options(
                selectinload(PinAssignment.component_instance).selectinload(
                    ComponentInstance.panel_section
                )
            )
            .execution_options(populate_existing=True)
        )
        pins = (await self.db.execute(stmt)).scalars().all()

        counts: dict[str, dict] = {rail.value: defaultdict(int) for rail in PowerRail}
        names: dict = {}
        for pin in pins:
            section = pin.component_instance.panel_section
            counts.setdefault(pin.power_rail, defaultdict(int))[section.id] += 1
            names[section.id] = section.name

        return [
            RailBreakdown(
                rail=rail,
                label=RAIL_LABELS.get(rail, rail),
                total_connections=sum(by_section.values()),
                by_section=sorted(
                    (
                        SectionConnectionCount(
                            section_id=sid, section_name=names[sid], count=n
                        )
                        for sid, n in by_section.items()
                    ),
                    key=lambda s: s.section_name,
                ),
            )
            for rail, by_section in counts.items()
        ]

    async def mosfet_usage(self) -> list[MosfetBoardUsage]:
        stmt = (
            select(MosfetBoard)
            .options(
                selectinload(MosfetBoard.channels)
                .selectinload(MosfetChannel.pin_assignment)
                .selectinload(PinAssignment.component_instance)
            )
            .order_by(MosfetBoard.name)
            .execution_options(populate_existing=True)
        )
        boards = (await self.db.execute(stmt)).scalars().all()

        usage = []
        for board in boards:
            used = sum(1 for ch in board.channels if ch.pin_assignment is not None)
            usage.append(
                MosfetBoardUsage(
                    id=board.id,
                    name=board.name,
                    channel_count=board.channel_count,
                    used_channels=used,
                    free_channels=board.channel_count - used,
                    channels=[
                        MosfetChannelUsage(
                            channel_number=ch.channel_number,
                            pin_number=ch.pin_assignment.pin_number
                            if ch.pin_assignment
                            else None,
                            component_name=ch.pin_assignment.component_instance.name
                            if ch.pin_assignment and ch.pin_assignment.component_instance
                            else None,
                        )
                        for ch in board.channels
                    ],
                )
            )
        return usage

    async def get_power_budget(
        self,
        scenario_name: ScenarioName | str = ScenarioName.WORST_CASE,
        custom_toggles: dict[uuid.UUID | str, bool] | None = None,
    ) -> PowerBudgetResponse:
        scenario = get_scenario(scenario_name)
        toggles = _normalize_toggles(custom_toggles)
        capacity, efficiency = await self.get_psu_config()
        components = await self.load_power_components()
        infrastructure_ma = await self.infrastructure_current_ma()

        rail_currents = calculate_rail_current_ma(components, scenario, toggles)
        demand = calculate_psu_demand_watts(rail_currents, efficiency, infrastructure_ma)
        level = get_utilization_level(demand.total_watts, capacity)

        logger.info(
            "Power budget [%s]: %.2f W of %.0f W (%s)",
            scenario.name.value,
            demand.total_watts,
            capacity,
            level.value,
        )

        return PowerBudgetResponse(
            scenario=scenario.name,
            scenario_label=scenario.label,
            rail_currents=rail_currents,
            psu_demand=demand,
            utilization_level=level,
            utilization_ratio=demand.total_watts / capacity if capacity > 0 else None,
            capacity_watts=capacity,
            converter_efficiency=efficiency,
            infrastructure_current_ma=infrastructure_ma,
            rails=await self.rail_breakdown(),
            mosfet_boards=await self.mosfet_usage(),
        )
