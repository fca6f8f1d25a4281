"""Power Scenario Model — named activation policies for the power budget.

A scenario says what fraction of each component's typical current is
drawn while the aircraft is in a given state. Rules are an ordered
decision table evaluated first-match: component type name, then power
rail, then the scenario default.

The ``custom`` scenario ignores its rules and switches whole panel
sections on or off from a caller-supplied toggle map.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from pydantic import BaseModel, Field, model_validator


class ScenarioName(str, Enum):
    WORST_CASE = "worst-case"
    COLD_DARK = "cold-dark"
    CRUISE = "cruise"
    EMERGENCY = "emergency"
    CUSTOM = "custom"


class ActivationRules(BaseModel):
    default: float = Field(..., ge=0, le=1)
    by_type_name: dict[str, float] = Field(default_factory=dict)
    by_rail: dict[str, float] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_fractions(self) -> ActivationRules:
        for key, value in {**self.by_type_name, **self.by_rail}.items():
            if not 0 <= value <= 1:
                raise ValueError(f"Activation for {key} must be in [0, 1], got {value}")
        return self


class PowerScenario(BaseModel):
    name: ScenarioName
    label: str
    activation_rules: ActivationRules


@dataclass
class PowerComponent:
    instance_id: str
    instance_name: str
    component_type_name: str
    panel_section_id: uuid.UUID
    panel_section_name: str
    power_rail: str
    typical_current_ma: float
    standby_current_ma: float = 0.0


# ─── Built-in Scenarios ───

SCENARIOS: list[PowerScenario] = [
    PowerScenario(
        name=ScenarioName.WORST_CASE,
        label="Worst Case",
        activation_rules=ActivationRules(default=1.0),
    ),
    PowerScenario(
        name=ScenarioName.COLD_DARK,
        label="Cold & Dark",
        activation_rules=ActivationRules(
            default=0,
            by_rail={"FIVE_V": 1.0, "NINE_V": 0, "TWENTY_SEVEN_V": 0},
        ),
    ),
    PowerScenario(
        name=ScenarioName.CRUISE,
        label="Cruise",
        activation_rules=ActivationRules(
            default=0,
            by_type_name={
                "Gauge": 1.0,
                "Annunciator": 0.1,
                "Illuminated Pushbutton": 1.0,
            },
        ),
    ),
    PowerScenario(
        name=ScenarioName.EMERGENCY,
        label="Emergency",
        activation_rules=ActivationRules(
            default=0,
            by_type_name={
                "Gauge": 1.0,
                "Annunciator": 0.8,
                "Illuminated Pushbutton": 1.0,
            },
        ),
    ),
    PowerScenario(
        name=ScenarioName.CUSTOM,
        label="Custom",
        activation_rules=ActivationRules(default=0),
    ),
]

_SCENARIOS_BY_NAME = {s.name: s for s in SCENARIOS}


def get_scenario(name: ScenarioName | str) -> PowerScenario:
    """Look up a built-in scenario. Raises ValueError for unknown names."""
    return _SCENARIOS_BY_NAME[ScenarioName(name)]


# ─── Rule Evaluation ───


@dataclass
class ActivationRule:
    source: str
    matches: Callable[[PowerComponent], bool]
    fraction: Callable[[PowerComponent], float]


@dataclass
class DecisionTable:
    rules: list[ActivationRule] = field(default_factory=list)

    def resolve(self, component: PowerComponent) -> tuple[str, float]:
        for rule in self.rules:
            if rule.matches(component):
                return rule.source, rule.fraction(component)
        raise LookupError("decision table has no fallback rule")


def build_decision_table(rules: ActivationRules) -> DecisionTable:
    """Ordered rules: type name, then rail, then default."""
    return DecisionTable(
        rules=[
            ActivationRule(
                source="type",
                matches=lambda c: c.component_type_name in rules.by_type_name,
                fraction=lambda c: rules.by_type_name[c.component_type_name],
            ),
            ActivationRule(
                source="rail",
                matches=lambda c: c.power_rail in rules.by_rail,
                fraction=lambda c: rules.by_rail[c.power_rail],
            ),
            ActivationRule(
                source="default",
                matches=lambda c: True,
                fraction=lambda c: rules.default,
            ),
        ]
    )


def get_activation(
    component: PowerComponent,
    scenario: PowerScenario,
    custom_toggles: dict[uuid.UUID, bool] | None = None,
) -> float:
    """Fraction of typical current drawn by ``component`` in ``scenario``."""
    if scenario.name == ScenarioName.CUSTOM:
        toggles = custom_toggles or {}
        return 1.0 if toggles.get(component.panel_section_id) else 0.0

    _, fraction = build_decision_table(scenario.activation_rules).resolve(component)
    return fraction
