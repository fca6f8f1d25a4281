"""Integration tests for the power budget and board availability services."""

import pytest

from panel_planner.models.inventory import (
    Board,
    ComponentInstance,
    ComponentType,
    MosfetBoard,
    MosfetChannel,
    PanelSection,
    PinAssignment,
    PsuConfig,
)
from panel_planner.power.budget import UtilizationLevel
from panel_planner.services.board_service import BoardService
from panel_planner.services.power_budget_service import PowerBudgetService


# ─── Fixtures ───


async def _seed(db) -> dict:
    air = PanelSection(name="Air Supply", slug="air-supply", sort_order=0)
    lights = PanelSection(name="Lights", slug="lights", sort_order=1)
    gauge = ComponentType(
        name="Gauge", default_power_rail="NINE_V", typical_current_ma=20, pin_types=["DIGITAL"]
    )
    annunciator = ComponentType(
        name="Annunciator",
        default_power_rail="TWENTY_SEVEN_V",
        typical_current_ma=80,
        pin_types=["DIGITAL"],
    )
    switch = ComponentType(name="Toggle Switch", default_pin_mode="INPUT", pin_types=["DIGITAL"])
    alpha = Board(name="Alpha", pwm_pins=[2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13])
    mosfet = MosfetBoard(name="MOSFET 1", channel_count=2)
    ch1 = MosfetChannel(mosfet_board=mosfet, channel_number=1)
    ch2 = MosfetChannel(mosfet_board=mosfet, channel_number=2)
    db.add_all([air, lights, gauge, annunciator, switch, alpha, mosfet, ch1, ch2])
    await db.flush()

    duct = ComponentInstance(name="Duct Pressure", component_type=gauge, panel_section=air)
    bleed = ComponentInstance(name="Bleed Fault", component_type=annunciator, panel_section=lights)
    pack = ComponentInstance(name="Pack Switch", component_type=switch, panel_section=air)
    db.add_all([duct, bleed, pack])
    await db.flush()

    db.add_all(
        [
            PinAssignment(
                board=alpha, pin_number="D1", component_instance=duct, power_rail="NINE_V"
            ),
            PinAssignment(
                board=alpha,
                pin_number="D5",
                pin_mode="OUTPUT",
                component_instance=bleed,
                mosfet_channel=ch1,
                power_rail="TWENTY_SEVEN_V",
            ),
            PinAssignment(board=alpha, pin_number="D0", component_instance=pack),
            # Reserved, not wired to anything
            PinAssignment(board=alpha, pin_number="D9", power_rail="FIVE_V"),
        ]
    )
    await db.commit()
    return {"air": air, "lights": lights}


# ═══════════════════════════════════════════════════════════
# Power budget
# ═══════════════════════════════════════════════════════════


class TestPowerBudgetService:
    async def test_empty_inventory(self, db):
        result = await PowerBudgetService(db).get_power_budget()

        assert result.rail_currents == {}
        assert result.psu_demand.total_watts == 0
        assert result.infrastructure_current_ma == 0
        assert result.utilization_level == UtilizationLevel.GREEN
        assert result.mosfet_boards == []

    async def test_defaults_without_psu_row(self, db):
        await _seed(db)
        result = await PowerBudgetService(db).get_power_budget()

        assert result.capacity_watts == 350
        assert result.converter_efficiency == 0.87

    async def test_worst_case(self, db):
        await _seed(db)
        result = await PowerBudgetService(db).get_power_budget("worst-case")

        assert result.scenario_label == "Worst Case"
        assert result.rail_currents == {"NINE_V": 20, "TWENTY_SEVEN_V": 80}
        # One board at 100mA plus one MOSFET board at 30mA
        assert result.infrastructure_current_ma == 130
        expected = 0.18 / 0.87 + 2.24 + 0.65 / 0.87
        assert result.psu_demand.total_watts == pytest.approx(expected)
        assert result.utilization_ratio == pytest.approx(expected / 350)
        assert result.utilization_level == UtilizationLevel.GREEN

    async def test_cruise_dims_annunciators(self, db):
        await _seed(db)
        result = await PowerBudgetService(db).get_power_budget("cruise")

        assert result.rail_currents["NINE_V"] == 20
        assert result.rail_currents["TWENTY_SEVEN_V"] == pytest.approx(8)

    async def test_custom_toggles_by_section_id(self, db):
        seeded = await _seed(db)
        toggles = {str(seeded["air"].id): True, str(seeded["lights"].id): False}
        result = await PowerBudgetService(db).get_power_budget("custom", toggles)

        assert result.rail_currents["NINE_V"] == 20
        assert result.rail_currents.get("TWENTY_SEVEN_V", 0) == 0

    async def test_custom_toggle_keys_in_any_uuid_spelling(self, db):
        seeded = await _seed(db)
        toggles = {
            str(seeded["air"].id).upper(): True,
            seeded["lights"].id.hex: True,
        }
        result = await PowerBudgetService(db).get_power_budget("custom", toggles)

        assert result.rail_currents["NINE_V"] == 20
        assert result.rail_currents["TWENTY_SEVEN_V"] == 80

    async def test_custom_toggle_key_not_a_uuid(self, db):
        with pytest.raises(ValueError):
            await PowerBudgetService(db).get_power_budget("custom", {"air-supply": True})

    async def test_stored_psu_config_wins(self, db):
        await _seed(db)
        db.add(PsuConfig(capacity_watts=3, converter_efficiency=0.5))
        await db.commit()

        result = await PowerBudgetService(db).get_power_budget()

        assert result.capacity_watts == 3
        assert result.psu_demand.total_watts == pytest.approx(0.36 + 2.24 + 1.3)
        assert result.utilization_level == UtilizationLevel.RED

    async def test_unknown_scenario(self, db):
        with pytest.raises(ValueError):
            await PowerBudgetService(db).get_power_budget("take-off")

    async def test_rail_breakdown(self, db):
        await _seed(db)
        rails = {r.rail: r for r in await PowerBudgetService(db).rail_breakdown()}

        assert list(rails) == ["FIVE_V", "NINE_V", "TWENTY_SEVEN_V", "NONE"]
        # D9 has no component and is not a connection
        assert rails["FIVE_V"].total_connections == 0
        assert rails["NINE_V"].total_connections == 1
        assert rails["NINE_V"].by_section[0].section_name == "Air Supply"
        assert rails["TWENTY_SEVEN_V"].label == "27V"
        assert rails["TWENTY_SEVEN_V"].by_section[0].section_name == "Lights"
        assert rails["NONE"].total_connections == 1

    async def test_mosfet_usage(self, db):
        await _seed(db)
        [board] = await PowerBudgetService(db).mosfet_usage()

        assert board.name == "MOSFET 1"
        assert (board.used_channels, board.free_channels) == (1, 1)
        assert board.channels[0].pin_number == "D5"
        assert board.channels[0].component_name == "Bleed Fault"
        assert board.channels[1].pin_number is None


# ═══════════════════════════════════════════════════════════
# Board availability
# ═══════════════════════════════════════════════════════════


class TestBoardService:
    async def test_availability(self, db):
        await _seed(db)
        [alpha] = await BoardService(db).list_availability()

        avail = alpha.pin_availability
        assert alpha.name == "Alpha"
        assert (avail.digital_used, avail.digital_free) == (4, 50)
        assert (avail.analog_used, avail.analog_free) == (0, 16)
        # D5 and D9 sit on PWM-capable pins
        assert (avail.pwm_used, avail.pwm_free) == (2, 10)

    async def test_no_boards(self, db):
        assert await BoardService(db).list_availability() == []
