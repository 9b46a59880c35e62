"""
Exception types raised by network assembly, physics evaluation and the solver adapter.
"""


class DHGError(Exception):
    """Base class for all errors raised by dhg."""


class NetworkConstructionError(DHGError, ValueError):
    """Network or component could not be assembled (reported at assembly time)."""


class UndefinedTemperatureError(DHGError, ArithmeticError):
    """
    A mixing or outlet temperature is undefined because no mass flows through it.

    Raised instead of returning NaN, which would otherwise propagate silently
    through the whole DAE.
    """

    def __init__(self, message: str, kind: str = None, index: int = None):
        super().__init__(message)
        self.kind = kind
        self.index = index


class SolverError(DHGError, RuntimeError):
    """The time integrator or nonlinear solver returned a non-success status."""

    def __init__(self, message: str, status=None):
        super().__init__(message)
        self.status = status
