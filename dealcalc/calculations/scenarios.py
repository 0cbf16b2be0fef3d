"""
Three-slot FLIP scenario store.

A calculator instance owns three independent copies of a scenario template
and a cursor naming the slot that updates and calculations apply to.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Union

from dealcalc.calculations import flip
from dealcalc.calculations.errors import InvalidInputError, InvalidScenarioError
from dealcalc.calculations.flip_model import (
    FlipScenario,
    ProfitabilityAnalysis,
    SECTION_NAMES,
)

logger = logging.getLogger(__name__)

SCENARIO_NUMBERS = (1, 2, 3)


def merge_scenario(scenario: FlipScenario, updates: Mapping[str, Any]) -> FlipScenario:
    """
    Apply a partial update to a scenario.

    Fields given for a section replace those fields; the section's other
    fields are kept. The result is validated and all derived values are
    cleared.

    Raises:
        InvalidInputError: if an update names an unknown section
        pydantic.ValidationError: if a merged section is invalid
    """
    data = scenario.model_dump()
    for name, values in updates.items():
        if name not in SECTION_NAMES:
            raise InvalidInputError(name, values, "Unknown scenario section")
        if hasattr(values, "model_dump"):
            values = values.model_dump(exclude_unset=True)
        data[name] = {**data[name], **dict(values)}
    return FlipScenario.model_validate(data).cleared()


class ScenarioStore:
    """Three independent scenario slots and a current-slot cursor."""

    def __init__(self, template: Union[FlipScenario, Mapping, None] = None):
        if template is None:
            template = FlipScenario()
        elif not isinstance(template, FlipScenario):
            template = FlipScenario.model_validate(template)

        self._slots: Dict[int, FlipScenario] = {}
        for number in SCENARIO_NUMBERS:
            slot = template.model_copy(deep=True)
            slot.general_info.scenario = number
            self._slots[number] = slot.cleared()
        self._current = 1

    @property
    def current_scenario(self) -> int:
        return self._current

    def set_scenario(self, number: int) -> "ScenarioStore":
        """Select the slot subsequent calls operate on."""
        if isinstance(number, bool) or number not in SCENARIO_NUMBERS:
            raise InvalidScenarioError(number)
        self._current = number
        return self

    def get_scenario(self, number: int) -> FlipScenario:
        if isinstance(number, bool) or number not in SCENARIO_NUMBERS:
            raise InvalidScenarioError(number)
        return self._slots[number].model_copy(deep=True)

    def get_current_scenario_data(self) -> FlipScenario:
        """Copy of the selected scenario."""
        return self.get_scenario(self._current)

    def update_current_scenario(self, updates: Mapping[str, Any]) -> "ScenarioStore":
        """Merge a partial update into the selected scenario."""
        self._slots[self._current] = merge_scenario(self._slots[self._current], updates)
        logger.debug(
            f"Scenario {self._current} updated: sections {sorted(updates.keys())}"
        )
        return self

    def _replace_current(self, scenario: FlipScenario) -> "ScenarioStore":
        self._slots[self._current] = scenario
        return self


class FlipDetailedCalculator(ScenarioStore):
    """
    Detailed FLIP calculator over three scenarios.

    Step methods compute one part of the selected scenario and return the
    calculator, so calls can be chained:

        calc.set_scenario(2).update_current_scenario({...}).calculate_all()
    """

    def _apply(self, step) -> "FlipDetailedCalculator":
        return self._replace_current(step(self._slots[self._current]))

    def calculate_acquisition_costs(self) -> "FlipDetailedCalculator":
        return self._apply(flip.calculate_acquisition_costs)

    def calculate_renovation_costs(self) -> "FlipDetailedCalculator":
        return self._apply(flip.calculate_renovation_costs)

    def calculate_selling_costs(self) -> "FlipDetailedCalculator":
        return self._apply(flip.calculate_selling_costs)

    def calculate_revenues(self) -> "FlipDetailedCalculator":
        return self._apply(flip.calculate_revenues)

    def calculate_holding_costs(self) -> "FlipDetailedCalculator":
        return self._apply(flip.calculate_holding_costs)

    def calculate_maintenance_costs(self) -> "FlipDetailedCalculator":
        return self._apply(flip.calculate_maintenance_costs)

    def calculate_property_financing(self) -> "FlipDetailedCalculator":
        return self._apply(flip.calculate_property_financing)

    def calculate_renovation_financing(self) -> "FlipDetailedCalculator":
        return self._apply(flip.calculate_renovation_financing)

    def calculate_profitability_analysis(self) -> "FlipDetailedCalculator":
        return self._apply(flip.calculate_profitability_analysis)

    def calculate_all(self) -> "FlipDetailedCalculator":
        """Run every calculation step on the selected scenario."""
        return self._apply(flip.compute_scenario)

    def get_results(self) -> Optional[ProfitabilityAnalysis]:
        """Profitability of the selected scenario, None until calculated."""
        return self._slots[self._current].profitability_analysis

    def compare_scenarios(self) -> flip.ScenarioComparison:
        """Calculate all three slots and compare them."""
        result = flip.compare_scenarios(*(self._slots[n] for n in SCENARIO_NUMBERS))
        for number in SCENARIO_NUMBERS:
            self._slots[number] = getattr(result, f"scenario{number}")
        return result
