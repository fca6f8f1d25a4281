"""Integration tests for BOM calculate/apply against an in-memory database."""

import uuid

import pytest
from sqlalchemy import func, select

from panel_planner.errors import ConflictError, NotFoundError
from panel_planner.models.inventory import (
    Board,
    ComponentInstance,
    ComponentType,
    MosfetBoard,
    MosfetChannel,
    PanelSection,
    PinAssignment,
)
from panel_planner.services.bom_service import BomService

MEGA_PWM_PINS = [2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13]


# ─── Fixtures ───


def _type(name, pins=1, pin_types=("DIGITAL",), rail="NONE", pwm=False, mode="INPUT"):
    return ComponentType(
        name=name,
        default_pin_count=pins,
        pin_types=list(pin_types),
        default_pin_mode=mode,
        default_power_rail=rail,
        pwm_required=pwm,
    )


def _board(name="Alpha", digital=54, analog=16):
    return Board(
        name=name,
        board_type="Arduino Mega 2560",
        digital_pin_count=digital,
        analog_pin_count=analog,
        pwm_pins=list(MEGA_PWM_PINS),
    )


async def _seed(db) -> dict:
    section = PanelSection(name="Air Supply", slug="air-supply", sort_order=0)
    gauge = _type("Gauge", pins=2, rail="NINE_V", mode="OUTPUT")
    annunciator = _type("Annunciator", rail="TWENTY_SEVEN_V", mode="OUTPUT")
    dimmer = _type("Panel Dimmer", pwm=True, rail="FIVE_V", mode="OUTPUT")
    pot = _type("Potentiometer", pin_types=("ANALOG",))
    switch = _type("Toggle Switch")

    alpha = _board("Alpha")
    db.add_all([section, gauge, annunciator, dimmer, pot, switch, alpha])
    await db.flush()

    instances = {
        "gauge": ComponentInstance(
            name="Duct Pressure", component_type=gauge, panel_section=section, sort_order=1
        ),
        "annunciator": ComponentInstance(
            name="Bleed Fault", component_type=annunciator, panel_section=section, sort_order=2
        ),
        "dimmer": ComponentInstance(
            name="Flood Dimmer", component_type=dimmer, panel_section=section, sort_order=3
        ),
        "pot": ComponentInstance(
            name="Temp Select", component_type=pot, panel_section=section, sort_order=4
        ),
        "wired": ComponentInstance(
            name="Pack Switch", component_type=switch, panel_section=section, sort_order=0
        ),
    }
    db.add_all(instances.values())
    await db.flush()

    # Pack Switch already has its single pin; D0 is taken
    db.add(
        PinAssignment(
            board=alpha,
            pin_number="D0",
            pin_type="DIGITAL",
            pin_mode="INPUT",
            component_instance=instances["wired"],
            power_rail="NONE",
        )
    )

    mosfet = MosfetBoard(name="MOSFET 1", channel_count=2)
    ch1 = MosfetChannel(mosfet_board=mosfet, channel_number=1)
    ch2 = MosfetChannel(mosfet_board=mosfet, channel_number=2)
    db.add_all([mosfet, ch1, ch2])
    await db.flush()
    db.add(
        PinAssignment(
            board=alpha,
            pin_number="D40",
            pin_type="DIGITAL",
            pin_mode="OUTPUT",
            mosfet_channel=ch1,
            power_rail="TWENTY_SEVEN_V",
        )
    )
    await db.commit()

    return {"section": section, "alpha": alpha, **instances}


async def _pin_count(db) -> int:
    return (await db.execute(select(func.count(PinAssignment.id)))).scalar()


def _by_name(result, name):
    return next(c for c in result.components if c.name == name)


# ═══════════════════════════════════════════════════════════
# calculate
# ═══════════════════════════════════════════════════════════


class TestCalculate:
    async def test_unknown_section(self, db):
        with pytest.raises(NotFoundError):
            await BomService(db).calculate(uuid.uuid4())

    async def test_plan_for_section(self, db):
        seeded = await _seed(db)
        result = await BomService(db).calculate(seeded["section"].id)

        assert result.section_name == "Air Supply"
        assert [c.name for c in result.components] == [
            "Pack Switch",
            "Duct Pressure",
            "Bleed Fault",
            "Flood Dimmer",
            "Temp Select",
        ]

        wired = _by_name(result, "Pack Switch")
        assert wired.pins_needed == 0
        assert wired.allocations == []

        assert _by_name(result, "Duct Pressure").allocations[0].pins == ["D1", "D2"]
        assert _by_name(result, "Bleed Fault").allocations[0].pins == ["D3"]
        # D2 and D3 were taken by earlier components
        assert _by_name(result, "Flood Dimmer").allocations[0].pins == ["D4"]
        assert _by_name(result, "Temp Select").allocations[0].pins == ["A0"]

        assert result.new_boards_needed == 0
        assert result.mosfet_channels_needed == 1
        assert result.mosfet_channels_available == 1

    async def test_boards_searched_by_name(self, db):
        seeded = await _seed(db)
        db.add(_board("Aardvark", digital=1, analog=0))
        await db.commit()

        result = await BomService(db).calculate(seeded["section"].id)
        gauge = _by_name(result, "Duct Pressure")
        assert [(a.board_name, a.pins) for a in gauge.allocations] == [
            ("Aardvark", ["D0"]),
            ("Alpha", ["D1"]),
        ]

    async def test_overflow_estimates_new_board(self, db):
        section = PanelSection(name="Fan", slug="fan")
        big = _type("Big Display", pins=55)
        db.add_all([section, big])
        await db.flush()
        db.add(ComponentInstance(name="EICAS", component_type=big, panel_section=section))
        db.add(_board("Alpha"))
        await db.commit()

        result = await BomService(db).calculate(section.id)
        assert result.new_boards_needed == 1

    async def test_calculate_is_repeatable_and_read_only(self, db):
        seeded = await _seed(db)
        service = BomService(db)
        before = await _pin_count(db)

        first = await service.calculate(seeded["section"].id)
        second = await service.calculate(seeded["section"].id)

        assert first == second
        assert await _pin_count(db) == before


# ═══════════════════════════════════════════════════════════
# apply
# ═══════════════════════════════════════════════════════════


class TestApply:
    async def test_creates_one_row_per_planned_pin(self, db):
        seeded = await _seed(db)
        service = BomService(db)
        plan = await service.calculate(seeded["section"].id)
        before = await _pin_count(db)

        applied = await service.apply(plan)
        await db.commit()

        planned = sum(len(a.pins) for c in plan.components for a in c.allocations)
        assert applied.total_pins_created == planned == 5
        assert len(applied.assignments) == 5
        assert await _pin_count(db) == before + 5

    async def test_written_rows(self, db):
        seeded = await _seed(db)
        service = BomService(db)
        await service.apply(await service.calculate(seeded["section"].id))
        await db.commit()

        rows = {
            p.pin_number: p
            for p in (
                await db.execute(
                    select(PinAssignment).where(PinAssignment.wiring_status == "PLANNED")
                )
            ).scalars()
        }
        assert set(rows) == {"D1", "D2", "D3", "D4", "A0"}
        assert rows["D4"].pin_mode == "PWM"
        assert rows["D1"].pin_mode == "OUTPUT"
        assert rows["A0"].pin_type == "ANALOG"
        assert rows["D3"].power_rail == "TWENTY_SEVEN_V"
        assert rows["D3"].description == "Auto-assigned for Bleed Fault"
        assert rows["D3"].component_instance_id == seeded["annunciator"].id

    async def test_recalculate_after_apply_needs_nothing(self, db):
        seeded = await _seed(db)
        section_id = seeded["section"].id
        service = BomService(db)
        await service.apply(await service.calculate(section_id))
        await db.commit()
        db.expire_all()

        result = await service.calculate(section_id)
        assert all(c.pins_needed == 0 for c in result.components)

    async def test_conflict_rolls_back_everything(self, db):
        seeded = await _seed(db)
        service = BomService(db)
        plan = await service.calculate(seeded["section"].id)

        # Another writer takes D2 between calculate and apply
        db.add(
            PinAssignment(
                board_id=seeded["alpha"].id,
                pin_number="D2",
                pin_type="DIGITAL",
                pin_mode="INPUT",
            )
        )
        await db.commit()
        before = await _pin_count(db)

        with pytest.raises(ConflictError) as exc_info:
            await service.apply(plan)

        assert exc_info.value.status_code == 409
        assert "D2" in exc_info.value.detail
        assert "Alpha" in exc_info.value.detail
        # D1 was written before D2 was checked, and must be gone too
        assert await _pin_count(db) == before

    async def test_duplicate_pin_within_plan_conflicts(self, db):
        seeded = await _seed(db)
        service = BomService(db)
        plan = await service.calculate(seeded["section"].id)
        _by_name(plan, "Bleed Fault").allocations[0].pins = ["D1"]
        before = await _pin_count(db)

        with pytest.raises(ConflictError):
            await service.apply(plan)
        assert await _pin_count(db) == before

    async def test_deleted_component(self, db):
        seeded = await _seed(db)
        service = BomService(db)
        plan = await service.calculate(seeded["section"].id)

        await db.delete(seeded["pot"])
        await db.commit()

        with pytest.raises(NotFoundError) as exc_info:
            await service.apply(plan)
        assert "Temp Select" in exc_info.value.detail

    async def test_deleted_board(self, db):
        seeded = await _seed(db)
        service = BomService(db)
        plan = await service.calculate(seeded["section"].id)
        _by_name(plan, "Temp Select").allocations[0].board_id = uuid.uuid4()

        with pytest.raises(NotFoundError):
            await service.apply(plan)

    async def test_deleted_section(self, db):
        seeded = await _seed(db)
        service = BomService(db)
        plan = await service.calculate(seeded["section"].id)
        plan.section_id = uuid.uuid4()

        with pytest.raises(NotFoundError):
            await service.apply(plan)

    async def test_satisfied_components_skipped(self, db):
        seeded = await _seed(db)
        service = BomService(db)
        plan = await service.calculate(seeded["section"].id)
        plan.components = [c for c in plan.components if c.pins_needed == 0]

        applied = await service.apply(plan)
        assert applied.total_pins_created == 0
        assert applied.assignments == []

    @pytest.mark.parametrize("pin", ["D999", "A16", "BOGUS", "D01"])
    async def test_pin_not_on_board_rolls_back(self, db, pin):
        seeded = await _seed(db)
        service = BomService(db)
        plan = await service.calculate(seeded["section"].id)
        _by_name(plan, "Temp Select").allocations[0].pins = [pin]
        before = await _pin_count(db)

        with pytest.raises(NotFoundError) as exc_info:
            await service.apply(plan)

        assert pin in exc_info.value.detail
        assert "Alpha" in exc_info.value.detail
        assert await _pin_count(db) == before

    async def test_board_shrunk_since_calculate(self, db):
        seeded = await _seed(db)
        service = BomService(db)
        plan = await service.calculate(seeded["section"].id)

        # D3 and D4 no longer exist
        seeded["alpha"].digital_pin_count = 3
        await db.commit()
        before = await _pin_count(db)

        with pytest.raises(NotFoundError) as exc_info:
            await service.apply(plan)

        assert "D3" in exc_info.value.detail
        assert await _pin_count(db) == before
