"""BOM Allocator — pin allocation plan for one panel section.

Walks the section's components in order and claims free pins for each
one from the boards, in board-name order, spilling over to the next
board when one runs out. Whatever cannot be placed is reported as an
estimate of new boards to buy. Components on the 27V rail also count
towards the MOSFET channels the section needs.

First-come-first-served, not globally optimal. Pure Python.
Deterministic: the same snapshot always yields the same plan.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from panel_planner.allocation.capacity import BoardCapacity, get_free_pins
from panel_planner.schemas.bom import (
    BomCalculationResult,
    ComponentAllocation,
    PinAllocation,
)
from panel_planner.schemas.enums import PinMode, PinType, PowerRail

DEFAULT_BOARD_DIGITAL_PINS = 54
DEFAULT_BOARD_ANALOG_PINS = 16

# Every pin on this rail is switched by one MOSFET channel
MOSFET_RAIL = PowerRail.TWENTY_SEVEN_V


@dataclass
class ComponentAllocationRequest:
    component_instance_id: object
    name: str
    type_name: str
    pins_needed: int
    pin_type: PinType = PinType.DIGITAL
    pin_mode: PinMode = PinMode.OUTPUT
    pwm_required: bool = False
    power_rail: PowerRail = PowerRail.NONE

    @classmethod
    def from_instance(cls, instance) -> ComponentAllocationRequest:
        """Build from an ORM ComponentInstance with type and pins loaded."""
        ct = instance.component_type
        pin_type = ct.pin_types[0] if ct.pin_types else PinType.DIGITAL.value
        return cls(
            component_instance_id=instance.id,
            name=instance.name,
            type_name=ct.name,
            pins_needed=max(ct.default_pin_count - len(instance.pin_assignments), 0),
            pin_type=PinType(pin_type),
            pin_mode=PinMode(ct.default_pin_mode),
            pwm_required=ct.pwm_required,
            power_rail=PowerRail(instance.effective_power_rail),
        )


@dataclass
class AllocationContext:
    """Mutable state of one allocation run."""

    boards: list[BoardCapacity]
    digital_board_size: int = DEFAULT_BOARD_DIGITAL_PINS
    analog_board_size: int = DEFAULT_BOARD_ANALOG_PINS
    new_boards_needed: int = 0
    mosfet_channels_needed: int = 0
    allocations: list[ComponentAllocation] = field(default_factory=list)


def _allocate_component(
    request: ComponentAllocationRequest, ctx: AllocationContext
) -> ComponentAllocation:
    pins_needed = max(request.pins_needed, 0)
    allocation = ComponentAllocation(
        component_instance_id=request.component_instance_id,
        name=request.name,
        type_name=request.type_name,
        pins_needed=pins_needed,
        pin_mode=request.pin_mode,
        pin_type=request.pin_type,
        pwm_required=request.pwm_required,
        power_rail=request.power_rail,
    )

    # Fully pinned: no board is consulted
    if pins_needed == 0:
        return allocation

    if request.power_rail == MOSFET_RAIL:
        ctx.mosfet_channels_needed += pins_needed

    remaining = pins_needed
    for board in ctx.boards:
        if remaining <= 0:
            break

        free_pins = get_free_pins(
            board, request.pin_type, request.pwm_required, remaining
        )
        if not free_pins:
            continue

        board.claim(free_pins, request.pwm_required)
        allocation.allocations.append(
            PinAllocation(board_id=board.id, board_name=board.name, pins=free_pins)
        )
        remaining -= len(free_pins)

    if remaining > 0:
        board_size = (
            ctx.analog_board_size
            if request.pin_type == PinType.ANALOG
            else ctx.digital_board_size
        )
        ctx.new_boards_needed += math.ceil(remaining / board_size)

    return allocation


def allocate_section(
    section_id,
    section_name: str,
    requests: list[ComponentAllocationRequest],
    boards: list[BoardCapacity],
    mosfet_channels_available: int = 0,
    digital_board_size: int = DEFAULT_BOARD_DIGITAL_PINS,
    analog_board_size: int = DEFAULT_BOARD_ANALOG_PINS,
) -> BomCalculationResult:
    """Compute the allocation plan for a section's components.

    ``requests`` are processed in the given order and ``boards`` are
    searched in the given order; callers pass boards sorted by name.
    The BoardCapacity objects are mutated as pins are claimed.
    """
    ctx = AllocationContext(
        boards=boards,
        digital_board_size=digital_board_size,
        analog_board_size=analog_board_size,
    )

    for request in requests:
        ctx.allocations.append(_allocate_component(request, ctx))

    return BomCalculationResult(
        section_id=section_id,
        section_name=section_name,
        components=ctx.allocations,
        new_boards_needed=ctx.new_boards_needed,
        mosfet_channels_needed=ctx.mosfet_channels_needed,
        mosfet_channels_available=mosfet_channels_available,
    )
