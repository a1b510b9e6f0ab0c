# barfem/errors.py
"""Exceptions raised by the element helpers and the static solver."""


class InvalidArgumentError(ValueError):
    """Raised when a caller passes a value outside an operation's contract."""
    pass


class OutOfRangeError(InvalidArgumentError):
    """Raised when an iso coordinate lies outside [-1, 1]."""
    pass


class NotSupportedError(InvalidArgumentError):
    """Raised for a load type the element helper cannot process."""
    pass


class UnsupportedConfigurationError(ValueError):
    """Raised when an element layout or release state cannot be represented."""
    pass


class MechanismError(RuntimeError):
    """Raised when structure is unstable or ill-conditioned."""
    pass
