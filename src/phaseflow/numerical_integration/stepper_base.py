# Copyright (C) 2025 Gil Benezer
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Stepper Base - Abstract Interface for Runge-Kutta Steppers

Provides the interface every single-step scheme implements, fixed-order or
embedded. A stepper owns one vector field and its own evaluation counters;
the trajectory driver creates a fresh stepper per call so that no state is
shared between trajectories.

This module defines the abstract base class along with the StepMode enum.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict

import numpy as np

from phaseflow.fields.vector_fields import as_vector_field, evaluate_field
from phaseflow.types.core import StateVector, VectorFieldFunction
from phaseflow.types.trajectories import StepResult


class StepMode(Enum):
    """
    Integration step mode.

    Attributes
    ----------
    FIXED : str
        Step size chosen from outside (heuristic), no error estimate
    ADAPTIVE : str
        Embedded error estimate drives step acceptance and size
    """

    FIXED = "fixed"
    ADAPTIVE = "adaptive"


class StepperBase(ABC):
    """
    Abstract base class for single-step integration schemes.

    All steppers must implement:
    - step(): one step x(t) → x(t + h), h signed
    - name: display name
    - order: convergence order of the propagated solution
    - step_mode: FIXED or ADAPTIVE

    Examples
    --------
    >>> stepper = RK4Stepper(LinearVectorField(0, 1, -1, 0))
    >>> result = stepper.step(np.array([1.0, 0.0]), t=0.0, h=0.01)
    >>> result["state"]  # ≈ (cos h, -sin h)
    """

    def __init__(self, field: VectorFieldFunction, **options):
        """
        Initialize stepper.

        Parameters
        ----------
        field : VectorFieldFunction
            (x, y, t) → (dx, dy)
        **options : dict
            Scheme-specific options (rtol, atol for embedded pairs)

        Raises
        ------
        TypeError
            If field is not callable
        """
        self.field = as_vector_field(field)
        self.options = options

        self._stats = {
            "total_steps": 0,
            "total_fev": 0,
        }

    @abstractmethod
    def step(self, state: StateVector, t: float, h: float) -> StepResult:
        """
        Take one step of signed size h.

        Parameters
        ----------
        state : StateVector
            Current point (2,)
        t : float
            Current integration time
        h : float
            Signed step (negative integrates backward)

        Returns
        -------
        StepResult
            Candidate state, new time, error estimate (None if unavailable)
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def order(self) -> int:
        pass

    @property
    @abstractmethod
    def step_mode(self) -> StepMode:
        pass

    @property
    def is_adaptive(self) -> bool:
        return self.step_mode == StepMode.ADAPTIVE

    # ========================================================================
    # Common Utilities
    # ========================================================================

    def _evaluate_field(self, state: StateVector, t: float) -> np.ndarray:
        """Evaluate the field, counting evaluations."""
        self._stats["total_fev"] += 1
        return evaluate_field(self.field, state, t)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get stepping statistics.

        Returns
        -------
        dict
            'total_steps', 'total_fev' and 'avg_fev_per_step'
        """
        avg_fev = self._stats["total_fev"] / max(1, self._stats["total_steps"])
        return {
            **self._stats,
            "avg_fev_per_step": avg_fev,
        }

    def reset_stats(self):
        self._stats["total_steps"] = 0
        self._stats["total_fev"] = 0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(mode={self.step_mode.value}, order={self.order})"

    def __str__(self) -> str:
        return self.name


__all__ = [
    "StepMode",
    "StepperBase",
]
