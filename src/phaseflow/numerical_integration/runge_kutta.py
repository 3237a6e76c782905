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
Runge-Kutta Steppers

Implements the two schemes behind every trajectory:
- RK4 (classic 4th order, 4 evaluations, no error estimate)
- Dormand-Prince 5(4) (embedded pair, 7 stages with FSAL, local error
  estimate for adaptive step control)

Plus a small method registry that normalizes user-facing names
('rk45', 'dormand_prince', 'classic_rk4', ...) to the canonical ones.

Error Norm
----------
The embedded estimate is reported as a scaled RMS norm, as in
scipy.integrate.RK45:

    sc_i  = atol + rtol * max(|y_i|, |y_new_i|)
    error = sqrt(mean((e_i / sc_i)²))

A step is acceptable when error <= 1.
"""

from typing import Dict, Optional, Tuple

import numpy as np

from phaseflow.numerical_integration.stepper_base import StepMode, StepperBase
from phaseflow.types.core import StateVector, VectorFieldFunction
from phaseflow.types.trajectories import StepResult


class RK4Stepper(StepperBase):
    """
    Classic 4th-order Runge-Kutta stepper.

    Algorithm:
        k1 = f(t, x)
        k2 = f(t + h/2, x + h/2*k1)
        k3 = f(t + h/2, x + h/2*k2)
        k4 = f(t + h, x + h*k3)
        x_next = x + (h/6) * (k1 + 2*k2 + 2*k3 + k4)

    Characteristics:
    - Order: 4 (local error ∝ h⁵)
    - Function evaluations: 4 per step
    - No error estimate: step size comes from the step heuristic

    Examples
    --------
    >>> stepper = RK4Stepper(lambda x, y, t: (y, -x))
    >>> result = stepper.step(np.array([1.0, 0.0]), 0.0, 0.1)
    >>> result["error"] is None
    True
    """

    def step(self, state: StateVector, t: float, h: float) -> StepResult:
        k1 = self._evaluate_field(state, t)
        k2 = self._evaluate_field(state + 0.5 * h * k1, t + 0.5 * h)
        k3 = self._evaluate_field(state + 0.5 * h * k2, t + 0.5 * h)
        k4 = self._evaluate_field(state + h * k3, t + h)

        with np.errstate(all="ignore"):
            state_next = state + (h / 6.0) * (k1 + 2 * k2 + 2 * k3 + k4)

        self._stats["total_steps"] += 1

        return {
            "state": state_next,
            "t": t + h,
            "h": h,
            "error": None,
            "nfev": 4,
        }

    @property
    def name(self) -> str:
        return "RK4 (Classic)"

    @property
    def order(self) -> int:
        return 4

    @property
    def step_mode(self) -> StepMode:
        return StepMode.FIXED


def _same_point(cached: Tuple[float, StateVector, np.ndarray], state: StateVector, t: float) -> bool:
    return cached[0] == t and np.array_equal(cached[1], state)


class DormandPrinceStepper(StepperBase):
    """
    Dormand-Prince 5(4) embedded Runge-Kutta stepper.

    Propagates the 5th-order solution and estimates the local error from
    the difference with the embedded 4th-order one. The last stage is
    evaluated at the new point (First Same As Last), so an accepted step
    hands its final derivative to the next step for free.

    Parameters
    ----------
    field : VectorFieldFunction
        (x, y, t) → (dx, dy)
    rtol : float
        Relative tolerance (default: 1e-6)
    atol : float
        Absolute tolerance (default: 1e-9)

    Examples
    --------
    >>> stepper = DormandPrinceStepper(field, rtol=1e-8, atol=1e-10)
    >>> result = stepper.step(np.array([1.0, 0.0]), 0.0, 0.1)
    >>> accepted = result["error"] <= 1.0
    """

    C = np.array([0.0, 1 / 5, 3 / 10, 4 / 5, 8 / 9, 1.0, 1.0])
    A = (
        (),
        (1 / 5,),
        (3 / 40, 9 / 40),
        (44 / 45, -56 / 15, 32 / 9),
        (19372 / 6561, -25360 / 2187, 64448 / 6561, -212 / 729),
        (9017 / 3168, -355 / 33, 46732 / 5247, 49 / 176, -5103 / 18656),
        (35 / 384, 0.0, 500 / 1113, 125 / 192, -2187 / 6784, 11 / 84),
    )
    # 5th-order weights (equal to the last row of A) and their difference
    # with the embedded 4th-order weights.
    B = np.array([35 / 384, 0.0, 500 / 1113, 125 / 192, -2187 / 6784, 11 / 84, 0.0])
    E = np.array(
        [
            71 / 57600,
            0.0,
            -71 / 16695,
            71 / 1920,
            -17253 / 339200,
            22 / 525,
            -1 / 40,
        ]
    )

    def __init__(self, field: VectorFieldFunction, rtol: float = 1e-6, atol: float = 1e-9, **options):
        super().__init__(field, **options)
        self.rtol = rtol
        self.atol = atol
        self._fsal: Optional[Tuple[float, StateVector, np.ndarray]] = None
        self._fsal_next: Optional[Tuple[float, StateVector, np.ndarray]] = None

    def _first_stage(self, state: StateVector, t: float) -> Tuple[np.ndarray, int]:
        # The step ending here was accepted: its last stage becomes the new start
        if self._fsal_next is not None and _same_point(self._fsal_next, state, t):
            self._fsal = self._fsal_next
            self._fsal_next = None
            return self._fsal[2], 0
        if self._fsal is not None and _same_point(self._fsal, state, t):
            return self._fsal[2], 0
        k1 = self._evaluate_field(state, t)
        self._fsal = (t, state.copy(), k1)
        return k1, 1

    def step(self, state: StateVector, t: float, h: float) -> StepResult:
        k = np.empty((7, 2))
        k[0], nfev = self._first_stage(state, t)

        with np.errstate(all="ignore"):
            for i in range(1, 7):
                increment = np.zeros(2)
                for j, a_ij in enumerate(self.A[i]):
                    if a_ij != 0.0:
                        increment = increment + a_ij * k[j]
                k[i] = self._evaluate_field(state + h * increment, t + self.C[i] * h)
                nfev += 1

            state_next = state + h * (self.B @ k)
            error_vector = h * (self.E @ k)
            scale = self.atol + self.rtol * np.maximum(np.abs(state), np.abs(state_next))
            error = float(np.sqrt(np.mean((error_vector / scale) ** 2)))

        # The last stage sits at (t + h, state_next). It is only used if the next
        # step starts there; a retry from the old point keeps the start cache.
        self._fsal_next = (t + h, state_next.copy(), k[6].copy())
        self._stats["total_steps"] += 1

        return {
            "state": state_next,
            "t": t + h,
            "h": h,
            "error": error,
            "nfev": nfev,
        }

    @property
    def name(self) -> str:
        return "Dormand-Prince 5(4)"

    @property
    def order(self) -> int:
        return 5

    @property
    def step_mode(self) -> StepMode:
        return StepMode.ADAPTIVE


# ============================================================================
# Method Registry
# ============================================================================

STEPPER_CLASSES: Dict[str, type] = {
    "rk4": RK4Stepper,
    "dopri5": DormandPrinceStepper,
}

METHOD_ALIASES: Dict[str, str] = {
    "rk4": "rk4",
    "classic_rk4": "rk4",
    "runge_kutta": "rk4",
    "dopri5": "dopri5",
    "dopri": "dopri5",
    "rk45": "dopri5",
    "dormand_prince": "dopri5",
}


def normalize_method_name(method: str) -> str:
    """
    Map a user-facing method name to its canonical form.

    Matching is case-insensitive and treats '-' like '_'.

    Examples
    --------
    >>> normalize_method_name("RK45")
    'dopri5'
    >>> normalize_method_name("classic-rk4")
    'rk4'

    Raises
    ------
    ValueError
        If the method is unknown
    """
    if not isinstance(method, str):
        raise ValueError(f"Method must be a string, got {type(method).__name__}")
    key = method.strip().lower().replace("-", "_")
    if key not in METHOD_ALIASES:
        raise ValueError(f"Unknown method '{method}'. Choose from: {sorted(METHOD_ALIASES)}")
    return METHOD_ALIASES[key]


def create_stepper(method: str, field: VectorFieldFunction, **options) -> StepperBase:
    """
    Quick factory for steppers.

    Parameters
    ----------
    method : str
        'rk4', 'dopri5' or an alias
    field : VectorFieldFunction
        Field to integrate
    **options
        Passed to the stepper (rtol, atol for 'dopri5'; ignored by 'rk4')

    Examples
    --------
    >>> stepper = create_stepper("rk45", field, rtol=1e-8)
    >>> stepper.name
    'Dormand-Prince 5(4)'
    """
    stepper_class = STEPPER_CLASSES[normalize_method_name(method)]
    return stepper_class(field, **options)


__all__ = [
    "RK4Stepper",
    "DormandPrinceStepper",
    "STEPPER_CLASSES",
    "METHOD_ALIASES",
    "normalize_method_name",
    "create_stepper",
]
