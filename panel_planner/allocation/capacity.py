"""Board Capacity Model — in-memory pin inventory of one microcontroller board.

Built fresh from a database snapshot for every allocation run, mutated as
the allocator claims pins, then discarded. The database stays the source
of truth.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from panel_planner.schemas.bom import PIN_NUMBER_PATTERN
from panel_planner.schemas.enums import PinMode, PinType

_PIN_NUMBER_RE = re.compile(PIN_NUMBER_PATTERN)


@dataclass
class BoardCapacity:
    id: object
    name: str
    digital_pin_count: int
    analog_pin_count: int
    pwm_pins: list[int] = field(default_factory=list)
    used_digital_pins: set[str] = field(default_factory=set)
    used_analog_pins: set[str] = field(default_factory=set)
    used_pwm_pins: set[str] = field(default_factory=set)

    @classmethod
    def from_board(cls, board) -> BoardCapacity:
        """Build from an ORM Board with its pin_assignments loaded."""
        capacity = cls(
            id=board.id,
            name=board.name,
            digital_pin_count=board.digital_pin_count,
            analog_pin_count=board.analog_pin_count,
            pwm_pins=list(board.pwm_pins or []),
        )
        for pin in board.pin_assignments:
            if pin.pin_type == PinType.DIGITAL.value:
                capacity.used_digital_pins.add(pin.pin_number)
            if pin.pin_type == PinType.ANALOG.value:
                capacity.used_analog_pins.add(pin.pin_number)
            if pin.pin_mode == PinMode.PWM.value:
                capacity.used_pwm_pins.add(pin.pin_number)
        return capacity

    def usable_pwm_pins(self) -> list[int]:
        """Declared PWM pins that exist on the board, in declared order."""
        return [n for n in self.pwm_pins if 0 <= n < self.digital_pin_count]

    def claim(self, pins: list[str], pwm_required: bool) -> None:
        """Mark pins as used so later requests in the same run skip them."""
        for pin in pins:
            if pwm_required:
                self.used_pwm_pins.add(pin)
                self.used_digital_pins.add(pin)
            elif pin.startswith("A"):
                self.used_analog_pins.add(pin)
            else:
                self.used_digital_pins.add(pin)

    def availability(self) -> dict[str, int]:
        usable_pwm = self.usable_pwm_pins()
        digital_used = len(self.used_digital_pins)
        analog_used = len(self.used_analog_pins)
        # A PWM pin is gone once anything occupies it, PWM or not
        pwm_used = sum(
            1
            for n in usable_pwm
            if f"D{n}" in self.used_digital_pins or f"D{n}" in self.used_pwm_pins
        )
        return {
            "digital_used": digital_used,
            "digital_free": self.digital_pin_count - digital_used,
            "analog_used": analog_used,
            "analog_free": self.analog_pin_count - analog_used,
            "pwm_used": pwm_used,
            "pwm_free": len(usable_pwm) - pwm_used,
        }


def get_free_pins(
    board: BoardCapacity,
    pin_type: PinType | str,
    pwm_required: bool,
    count: int,
) -> list[str]:
    """Return up to ``count`` unused pin identifiers on ``board``.

    PWM needs are served from the declared PWM pin list in order. Analog
    needs scan A0 upwards, plain digital needs scan D0 upwards. Plain
    digital scans do not skip PWM-capable pins.

    A short list means the board is exhausted; no error is raised.
    """
    result: list[str] = []
    if count <= 0:
        return result

    if pwm_required:
        for pwm_pin in board.usable_pwm_pins():
            if len(result) >= count:
                break
            pin = f"D{pwm_pin}"
            if pin not in board.used_digital_pins and pin not in board.used_pwm_pins:
                result.append(pin)
    elif PinType(pin_type) == PinType.ANALOG:
        for i in range(board.analog_pin_count):
            if len(result) >= count:
                break
            pin = f"A{i}"
            if pin not in board.used_analog_pins:
                result.append(pin)
    else:
        for i in range(board.digital_pin_count):
            if len(result) >= count:
                break
            pin = f"D{i}"
            if pin not in board.used_digital_pins:
                result.append(pin)

    return result


def pin_exists(pin_number: str, digital_pin_count: int, analog_pin_count: int) -> bool:
    """True if ``pin_number`` names a physical pin on a board of this size."""
    if not _PIN_NUMBER_RE.match(pin_number):
        return False
    index = int(pin_number[1:])
    if pin_number.startswith("A"):
        return index < analog_pin_count
    return index < digital_pin_count
