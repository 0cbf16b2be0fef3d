"""
Exceptions raised by the calculation engine.

All of them derive from ValueError so API handlers that map ValueError to
HTTP 400 cover them without special cases.
"""


class CalculationError(ValueError):
    """Base class for calculation failures.

    Attributes:
        message -- explanation of the error
    """

    def __init__(self, message: str = "Calculation failed"):
        self.message = message
        super().__init__(self.message)


class InvalidInputError(CalculationError):
    """Raised when an input value is outside its allowed domain.

    Attributes:
        field -- name of the offending input
        value -- the rejected value
        message -- explanation of the error
    """

    def __init__(self, field: str, value, message: str = "Invalid input"):
        self.field = field
        self.value = value
        super().__init__(f"{message}: {field}={value!r}")


class InvalidScenarioError(CalculationError):
    """Raised when a scenario selector is not 1, 2 or 3.

    Attributes:
        scenario -- the rejected selector
        message -- explanation of the error
    """

    def __init__(self, scenario, message: str = "Invalid scenario number"):
        self.scenario = scenario
        super().__init__(f"{message}: {scenario!r} (expected 1, 2 or 3)")
