from __future__ import annotations

import uuid

from pydantic import BaseModel


class PinAvailability(BaseModel):
    digital_used: int
    digital_free: int
    analog_used: int
    analog_free: int
    pwm_used: int
    pwm_free: int


class BoardAvailability(BaseModel):
    id: uuid.UUID
    name: str
    board_type: str
    digital_pin_count: int
    analog_pin_count: int
    pwm_pins: list[int]
    pin_availability: PinAvailability
