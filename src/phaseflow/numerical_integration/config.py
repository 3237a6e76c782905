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
Integration Configuration

Validated, immutable configuration for trajectory integration:
- Bounds: rectangular viewport in phase space
- IntegrationConfig: step budget, step-size limits, tolerances, method

Every field has a default, so callers may omit any of them. Invalid
values raise ValueError when the configuration is built, before any
stepping begins.

Examples
--------
>>> config = IntegrationConfig(max_steps=500, bounds=Bounds(-2, 2, -2, 2))
>>> tighter = config.with_overrides(rtol=1e-9)
>>> IntegrationConfig(max_steps=0)
Traceback (most recent call last):
    ...
ValueError: max_steps must be a positive integer, got 0
"""

import math
import warnings
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Tuple

import numpy as np

from phaseflow.numerical_integration.runge_kutta import normalize_method_name
from phaseflow.types.core import StepHeuristicFunction


def _require_finite(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
        raise ValueError(f"{name} must be a real number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}")
    return float(value)


def _require_positive(name: str, value: Any) -> float:
    value = _require_finite(name, value)
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _require_int(name: str, value: Any, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < minimum:
        qualifier = "a positive integer" if minimum == 1 else f"an integer >= {minimum}"
        raise ValueError(f"{name} must be {qualifier}, got {value}")
    return int(value)


@dataclass(frozen=True)
class Bounds:
    """
    Axis-aligned rectangle in phase space (the viewport).

    Points on the edge are inside. A trajectory "exits" when a coordinate
    is strictly outside; infinite coordinates count as outside, NaN does not
    (NaN is reported separately as a non-finite step).

    Parameters
    ----------
    xmin, xmax, ymin, ymax : float
        Finite limits with xmin < xmax and ymin < ymax
    """

    xmin: float = -10.0
    xmax: float = 10.0
    ymin: float = -10.0
    ymax: float = 10.0

    def __post_init__(self):
        for name in ("xmin", "xmax", "ymin", "ymax"):
            object.__setattr__(self, name, _require_finite(name, getattr(self, name)))
        if not self.xmin < self.xmax:
            raise ValueError(f"Empty bounds: xmin={self.xmin} must be < xmax={self.xmax}")
        if not self.ymin < self.ymax:
            raise ValueError(f"Empty bounds: ymin={self.ymin} must be < ymax={self.ymax}")

    @classmethod
    def from_limits(cls, xlim: Tuple[float, float], ylim: Tuple[float, float]) -> "Bounds":
        return cls(xlim[0], xlim[1], ylim[0], ylim[1])

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    @property
    def diagonal(self) -> float:
        return math.hypot(self.width, self.height)

    def exits(self, point) -> bool:
        """True if the point lies strictly outside (NaN coordinates never exit)."""
        x, y = float(point[0]), float(point[1])
        return x < self.xmin or x > self.xmax or y < self.ymin or y > self.ymax

    def contains(self, point) -> bool:
        """True if the point is finite and inside or on the edge."""
        x, y = float(point[0]), float(point[1])
        return self.xmin <= x <= self.xmax and self.ymin <= y <= self.ymax


@dataclass(frozen=True)
class IntegrationConfig:
    """
    Configuration record for ``integrate``.

    Attributes
    ----------
    max_steps : int
        Step budget; a trajectory holds at most max_steps + 1 points
    min_step : float
        Smallest step size; adaptive shrinking stops here
    max_step : float
        Largest step size
    initial_step : Optional[float]
        First step size (both methods); None lets the step heuristic choose
    bounds : Bounds
        Viewport; leaving it ends the trajectory
    convergence_tolerance : float
        Fixed-point detection threshold on the coordinate span of the last
        convergence_window points (0 disables the check)
    convergence_window : int
        Number of trailing points inspected for convergence
    method : str
        'dopri5' (adaptive Dormand-Prince 5(4)) or 'rk4' (classic RK4)
    rtol, atol : float
        Relative and absolute error tolerances (adaptive only)
    max_retries : int
        Step-halving retries before a step is accepted as degraded
    t0 : float
        Integration time of the seed
    step_heuristic : Optional[StepHeuristicFunction]
        Step-size strategy; None selects SpiralAwareStepHeuristic()
    """

    max_steps: int = 2000
    min_step: float = 1e-4
    max_step: float = 0.1
    initial_step: Optional[float] = None
    bounds: Bounds = field(default_factory=Bounds)
    convergence_tolerance: float = 1e-6
    convergence_window: int = 5
    method: str = "dopri5"
    rtol: float = 1e-6
    atol: float = 1e-9
    max_retries: int = 30
    t0: float = 0.0
    step_heuristic: Optional[StepHeuristicFunction] = None

    def __post_init__(self):
        _require_int("max_steps", self.max_steps, minimum=1)
        min_step = _require_positive("min_step", self.min_step)
        max_step = _require_positive("max_step", self.max_step)
        if min_step > max_step:
            raise ValueError(f"min_step ({min_step}) must not exceed max_step ({max_step})")

        if self.initial_step is not None:
            initial = _require_positive("initial_step", self.initial_step)
            clamped = min(max(initial, min_step), max_step)
            if clamped != initial:
                warnings.warn(
                    f"initial_step={initial} outside [{min_step}, {max_step}]; using {clamped}",
                    UserWarning,
                )
            object.__setattr__(self, "initial_step", clamped)

        if not isinstance(self.bounds, Bounds):
            raise ValueError(f"bounds must be a Bounds instance, got {type(self.bounds).__name__}")

        tol = _require_finite("convergence_tolerance", self.convergence_tolerance)
        if tol < 0:
            raise ValueError(f"convergence_tolerance must be >= 0, got {tol}")
        _require_int("convergence_window", self.convergence_window, minimum=2)
        _require_positive("rtol", self.rtol)
        _require_positive("atol", self.atol)
        _require_int("max_retries", self.max_retries, minimum=0)
        _require_finite("t0", self.t0)

        if self.step_heuristic is not None and not callable(self.step_heuristic):
            raise ValueError("step_heuristic must be callable")

        object.__setattr__(self, "method", normalize_method_name(self.method))

    def with_overrides(self, **overrides) -> "IntegrationConfig":
        """
        Copy with some fields replaced (validated again).

        Raises
        ------
        ValueError
            For unknown field names or invalid values
        """
        unknown = set(overrides) - set(self.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown configuration options: {sorted(unknown)}")
        return replace(self, **overrides)

    def clamp_step(self, h: float) -> float:
        """Clamp a step size into [min_step, max_step]; NaN maps to max_step."""
        if math.isnan(h) or h == math.inf:
            return self.max_step
        return min(max(h, self.min_step), self.max_step)


def resolve_config(config: Optional[IntegrationConfig] = None, **options) -> IntegrationConfig:
    """
    Combine an optional config with keyword overrides.

    Examples
    --------
    >>> resolve_config(max_steps=100).max_steps
    100
    """
    if config is None:
        config = IntegrationConfig()
    elif not isinstance(config, IntegrationConfig):
        raise ValueError(f"config must be an IntegrationConfig, got {type(config).__name__}")
    if options:
        config = config.with_overrides(**options)
    return config


__all__ = [
    "Bounds",
    "IntegrationConfig",
    "resolve_config",
]
