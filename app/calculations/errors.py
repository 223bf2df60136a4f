"""
Calculation Errors

Exceptions raised by the calculation engine when inputs cannot be used.
"""


class CalculationError(ValueError):
    """Base class for invalid calculation inputs."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class InvalidMortgageInput(CalculationError):
    """Raised when mortgage terms cannot produce a schedule."""


class InvalidPropertyInput(CalculationError):
    """Raised when a property snapshot or assumption set is malformed."""
