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
Step-Size Heuristics

Strategies that choose a step size from the local flow. They drive every
step of fixed-order schemes and the first step of adaptive ones.

A heuristic is any callable ``heuristic(field, state, t, config) -> h``
returning a positive step; the result is clamped to
[config.min_step, config.max_step] by the caller as well.

Available strategies:
- SpiralAwareStepHeuristic (default): small fixed step where the local
  flow is rotation-dominated, speed-scaled step elsewhere
- SpeedScaledStepHeuristic: h = step_length / |v|
- ConstantStepHeuristic: always the same h
"""

import math
from typing import TYPE_CHECKING, Optional

from phaseflow.fields.vector_fields import evaluate_field, is_rotation_dominated, jacobian_at
from phaseflow.types.core import StateVector, VectorFieldFunction

if TYPE_CHECKING:
    from phaseflow.numerical_integration.config import IntegrationConfig


class ConstantStepHeuristic:
    """
    Always propose the same step.

    Examples
    --------
    >>> config = IntegrationConfig(method="rk4", step_heuristic=ConstantStepHeuristic(0.01))
    """

    def __init__(self, step: float):
        if not (isinstance(step, (int, float)) and math.isfinite(step) and step > 0):
            raise ValueError(f"step must be a positive finite number, got {step}")
        self.step = float(step)

    def __call__(
        self, field: VectorFieldFunction, state: StateVector, t: float, config: "IntegrationConfig"
    ) -> float:
        return config.clamp_step(self.step)

    def __repr__(self) -> str:
        return f"ConstantStepHeuristic(step={self.step})"


class SpeedScaledStepHeuristic:
    """
    Scale the step inversely with local speed.

    Each step then covers roughly the same arc length, so slow regions near
    equilibria are not oversampled and fast regions are not skipped.

    Parameters
    ----------
    step_length : Optional[float]
        Target arc length per step. None derives it from the viewport:
        length_fraction × bounds diagonal.
    length_fraction : float
        Fraction of the viewport diagonal used when step_length is None
    """

    def __init__(self, step_length: Optional[float] = None, length_fraction: float = 0.0025):
        if step_length is not None and not (math.isfinite(step_length) and step_length > 0):
            raise ValueError(f"step_length must be positive, got {step_length}")
        if not (math.isfinite(length_fraction) and length_fraction > 0):
            raise ValueError(f"length_fraction must be positive, got {length_fraction}")
        self.step_length = step_length
        self.length_fraction = length_fraction

    def target_length(self, config: "IntegrationConfig") -> float:
        if self.step_length is not None:
            return self.step_length
        return self.length_fraction * config.bounds.diagonal

    def __call__(
        self, field: VectorFieldFunction, state: StateVector, t: float, config: "IntegrationConfig"
    ) -> float:
        velocity = evaluate_field(field, state, t)
        speed = math.hypot(velocity[0], velocity[1])
        if not math.isfinite(speed) or speed == 0.0:
            return config.max_step
        return config.clamp_step(self.target_length(config) / speed)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(step_length={self.step_length}, "
            f"length_fraction={self.length_fraction})"
        )


class SpiralAwareStepHeuristic(SpeedScaledStepHeuristic):
    """
    Speed-scaled step with a fixed small step on spirals.

    Where the local Jacobian is rotation-dominated (complex eigenvalues
    with |Im λ| > |Re λ|), speed scaling lets the step grow as a spiral
    tightens towards its focus and the polyline turns into visible
    polygons; a fixed spiral_step keeps the curve smooth instead.

    Parameters
    ----------
    spiral_step : float
        Step used on rotation-dominated flow (default: 0.01)
    step_length, length_fraction
        As for SpeedScaledStepHeuristic

    Examples
    --------
    >>> heuristic = SpiralAwareStepHeuristic(spiral_step=0.005)
    >>> h = heuristic(LinearVectorField(0, 1, -1, 0), np.array([1.0, 0.0]), 0.0, config)
    >>> h
    0.005
    """

    def __init__(
        self,
        spiral_step: float = 0.01,
        step_length: Optional[float] = None,
        length_fraction: float = 0.0025,
    ):
        super().__init__(step_length, length_fraction)
        if not (math.isfinite(spiral_step) and spiral_step > 0):
            raise ValueError(f"spiral_step must be positive, got {spiral_step}")
        self.spiral_step = spiral_step

    def __call__(
        self, field: VectorFieldFunction, state: StateVector, t: float, config: "IntegrationConfig"
    ) -> float:
        jacobian = jacobian_at(field, float(state[0]), float(state[1]), t)
        if is_rotation_dominated(jacobian):
            return config.clamp_step(self.spiral_step)
        return super().__call__(field, state, t, config)

    def __repr__(self) -> str:
        return f"SpiralAwareStepHeuristic(spiral_step={self.spiral_step})"


__all__ = [
    "ConstantStepHeuristic",
    "SpeedScaledStepHeuristic",
    "SpiralAwareStepHeuristic",
]
