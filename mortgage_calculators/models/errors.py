"""Errors raised by the calculation engine."""


class InvalidInputError(ValueError):
    """Raised when loan parameters are outside the valid domain.

    Invalid input aborts the calculation; no partial result is produced.
    """


class UnknownCalculatorError(LookupError):
    """Raised when a calculator name is not registered."""
