"""Exceptions raised for data-integrity and programmer errors.

Expected infeasibility (missing items, insufficient resources, disabled
techniques) is never an exception: evaluation functions return ``None``.
"""


class LogicError(Exception):
    """Base class for all reachlogic errors."""


class UnknownElementError(LogicError, KeyError):
    """A referenced element does not exist in the model."""

    def __str__(self) -> str:
        # KeyError quotes its message; keep it readable
        return str(self.args[0]) if self.args else ""


class InvalidTraversalError(LogicError):
    """A state change that is inconsistent with the model topology."""


class ModelValidationError(LogicError, ValueError):
    """Malformed input while building a model."""


class OptionsError(LogicError):
    """Logical options could not be loaded or contain unknown names."""
