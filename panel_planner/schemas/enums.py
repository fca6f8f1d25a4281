from __future__ import annotations

from enum import Enum


class PinType(str, Enum):
    DIGITAL = "DIGITAL"
    ANALOG = "ANALOG"


class PinMode(str, Enum):
    INPUT = "INPUT"
    OUTPUT = "OUTPUT"
    PWM = "PWM"


class PowerRail(str, Enum):
    FIVE_V = "FIVE_V"
    NINE_V = "NINE_V"
    TWENTY_SEVEN_V = "TWENTY_SEVEN_V"
    NONE = "NONE"


class WiringStatus(str, Enum):
    UNASSIGNED = "UNASSIGNED"
    PLANNED = "PLANNED"
    WIRED = "WIRED"
    TESTED = "TESTED"
    COMPLETE = "COMPLETE"


class BuildStatus(str, Enum):
    NOT_ONBOARDED = "NOT_ONBOARDED"
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETE = "COMPLETE"
    HAS_ISSUES = "HAS_ISSUES"
