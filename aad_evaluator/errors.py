# errors.py
"""
Exception types raised by the evaluator.

All of them derive from ADError so callers can catch the whole family at once.
Each also derives from the closest built-in exception, so code written against
plain numpy/scipy conventions (ValueError, ArithmeticError, ...) keeps working.
"""


class ADError(Exception):
    """Base class for every error raised by aad_evaluator."""


class ConversionError(ADError, ValueError):
    """A host value cannot be mapped to a parameter/result vector."""


class NumericalError(ADError, ArithmeticError):
    """Division by zero, log of zero, or a non-finite value where one is not allowed."""


class RecordingError(ADError, RuntimeError):
    """The recorder state machine was used out of order, or a tape query is malformed."""
