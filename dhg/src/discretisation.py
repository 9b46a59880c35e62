"""
Finite-volume discretisation of pipe edges.
"""

import math
from dataclasses import dataclass
from typing import Callable, Union

from .convection import get_scheme
from .errors import NetworkConstructionError


@dataclass(frozen=True)
class FVM:
    """
    Uniform finite-volume discretisation shared by all pipes of a network.

    Cell-centered finite volumes along each pipe:
    - dx: Requested cell width [m]; the actual number of cells in a pipe is
      round(length / dx) and the cell width is taken as dx
    - convection: Convection scheme, callable (phi, phi_W, phi_E, u) -> rate
      or its registry name
    """
    dx: float
    convection: Union[Callable, str] = 'upwind'

    def __post_init__(self):
        if not (math.isfinite(self.dx) and self.dx > 0):
            raise NetworkConstructionError(f"Cell width must be finite and positive, got dx = {self.dx}")
        if isinstance(self.convection, str):
            # frozen dataclass: bypass __setattr__ to resolve the name once
            object.__setattr__(self, 'convection', get_scheme(self.convection))

    def cell_count(self, length: float) -> int:
        """
        Number of finite-volume cells in a pipe of the given length.

        Raises:
            NetworkConstructionError: If the derived count is not a positive finite integer
        """
        if not (math.isfinite(length) and length > 0):
            raise NetworkConstructionError(f"Pipe length must be finite and positive, got {length}")
        ratio = length / self.dx
        if not math.isfinite(ratio):
            raise NetworkConstructionError(f"Calculated cell count is not finite: {ratio}")
        n_cells = int(round(ratio))
        if n_cells <= 0:
            raise NetworkConstructionError(
                f"Calculated cell count: {n_cells} (length = {length}, dx = {self.dx})")
        return n_cells

    @property
    def scheme_name(self) -> str:
        """Name of the convection scheme."""
        return getattr(self.convection, '__name__', repr(self.convection))
