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
Trajectory Integrator - Bounded Polylines from a Seed

Turns a planar vector field and a seed point into a trajectory, forward or
backward in time, until one of the termination conditions fires. This is
the single integrator shared by every phase-portrait and ODE-solver caller;
the vector field and the step-size strategy are passed in, never
re-implemented per caller.

Termination (checked after each accepted step, first match wins):
1. step budget reached           -> MAX_STEPS
2. point leaves the bounds       -> OUT_OF_BOUNDS
3. NaN coordinate                -> NON_FINITE
4. last K points span < tol      -> CONVERGED

Degenerate input never raises: non-finite steps truncate the trajectory
(quality TRUNCATED) and step-size underflow is accepted with quality
DEGRADED. Only invalid configuration or an invalid seed/direction raise,
before any stepping.

Usage
-----
>>> from phaseflow import integrate, integrate_bidirectional, LinearVectorField
>>> field = LinearVectorField(-1, 2, -2, -1)
>>> traj = integrate(field, (1.0, 1.0))
>>> traj["termination"], traj["quality"]
(<TerminationReason.CONVERGED: 'converged'>, <TrajectoryQuality.OK: 'ok'>)
>>>
>>> # Full solution curve through a clicked point
>>> curve = integrate_bidirectional(field, (1.0, 1.0))
>>> curve["x"][curve["seed_index"]]
array([1., 1.])
"""

import math
import time
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np

from phaseflow.fields.vector_fields import as_vector_field
from phaseflow.numerical_integration.config import IntegrationConfig, resolve_config
from phaseflow.numerical_integration.runge_kutta import create_stepper
from phaseflow.numerical_integration.step_heuristics import SpiralAwareStepHeuristic
from phaseflow.numerical_integration.stepper_base import StepperBase
from phaseflow.types.core import ArrayLike, StateVector, VectorFieldFunction
from phaseflow.types.trajectories import (
    BidirectionalTrajectory,
    StepResult,
    TerminationReason,
    Trajectory,
    TrajectoryQuality,
)

# Step growth limits for accepted adaptive steps
_SAFETY = 0.9
_MIN_FACTOR = 0.2
_MAX_FACTOR = 5.0
_ERROR_EXPONENT = -1.0 / 5.0

_TERMINATION_MESSAGES = {
    TerminationReason.MAX_STEPS: "Step budget exhausted",
    TerminationReason.OUT_OF_BOUNDS: "Trajectory left the bounds",
    TerminationReason.NON_FINITE: "Trajectory truncated: numerical instability",
    TerminationReason.CONVERGED: "Trajectory converged to a fixed point",
}


def validate_seed(seed: ArrayLike) -> StateVector:
    """
    Convert a seed to a finite (2,) float array.

    Raises
    ------
    ValueError
        If the seed is not a pair of finite real numbers
    """
    try:
        state = np.array(seed, dtype=float).reshape(-1)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Seed must be a pair of real numbers, got {seed!r}") from e
    if state.shape != (2,):
        raise ValueError(f"Seed must have exactly two coordinates, got shape {state.shape}")
    if not np.all(np.isfinite(state)):
        raise ValueError(f"Seed must be finite, got {tuple(state)}")
    return state


def validate_direction(direction: int) -> int:
    if isinstance(direction, bool) or direction not in (1, -1):
        raise ValueError(f"direction must be +1 (forward) or -1 (backward), got {direction!r}")
    return int(direction)


def read_only_array(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


class TrajectoryIntegrator:
    """
    Integrates trajectories of one field under one configuration.

    Holds no per-trajectory state: every call to ``run`` creates its own
    stepper, so repeated or interleaved calls are independent and
    reproducible.

    Parameters
    ----------
    field : VectorFieldFunction
        (x, y, t) → (dx, dy)
    config : Optional[IntegrationConfig]
        Defaults to IntegrationConfig()

    Examples
    --------
    >>> integrator = TrajectoryIntegrator(field, IntegrationConfig(method="rk4"))
    >>> forward = integrator.run((0.5, 0.0), direction=1)
    >>> backward = integrator.run((0.5, 0.0), direction=-1)
    """

    def __init__(self, field: VectorFieldFunction, config: Optional[IntegrationConfig] = None):
        self.field = as_vector_field(field)
        self.config = resolve_config(config)
        self.heuristic = self.config.step_heuristic or SpiralAwareStepHeuristic()

    def create_stepper(self) -> StepperBase:
        return create_stepper(
            self.config.method, self.field, rtol=self.config.rtol, atol=self.config.atol
        )

    def run(self, seed: ArrayLike, direction: int = 1) -> Trajectory:
        """
        Integrate from a seed in one direction.

        Parameters
        ----------
        seed : ArrayLike
            Finite starting point (x, y)
        direction : int
            +1 forward in time, -1 backward

        Returns
        -------
        Trajectory
            Non-empty, all points finite, ``x[0]`` is the seed

        Raises
        ------
        ValueError
            If the seed is non-finite or direction is not ±1
        """
        start_time = time.time()
        config = self.config
        state = validate_seed(seed)
        direction = validate_direction(direction)
        stepper = self.create_stepper()

        t = config.t0
        points = [state]
        times = [t]
        quality = TrajectoryQuality.OK
        termination = None
        steps_taken = 0
        nrejected = 0

        if config.bounds.exits(state):
            termination = TerminationReason.OUT_OF_BOUNDS
        else:
            h = config.initial_step or config.clamp_step(
                self.heuristic(self.field, state, t, config)
            )

        while termination is None:
            if stepper.is_adaptive:
                result, h, rejected, degraded = self._adaptive_step(
                    stepper, state, t, h, direction
                )
                nrejected += rejected
                if degraded:
                    quality = TrajectoryQuality.worst(quality, TrajectoryQuality.DEGRADED)
            else:
                # The first step uses initial_step (or the heuristic at the seed)
                if steps_taken:
                    h = config.clamp_step(self.heuristic(self.field, state, t, config))
                result = stepper.step(state, t, direction * h)

            candidate = result["state"]
            finite = bool(np.all(np.isfinite(candidate)))
            steps_taken += 1
            if finite:
                points.append(candidate)
                times.append(result["t"])
            else:
                quality = TrajectoryQuality.TRUNCATED

            termination = self._check_termination(candidate, finite, steps_taken, points)
            state, t = candidate, result["t"]

        elapsed = time.time() - start_time
        message = _TERMINATION_MESSAGES[termination]
        if quality is TrajectoryQuality.DEGRADED:
            message += " (degraded accuracy: step size underflow)"
        elif quality is TrajectoryQuality.TRUNCATED and termination is not TerminationReason.NON_FINITE:
            message += " (truncated: non-finite step discarded)"

        stats = stepper.get_stats()
        trajectory: Trajectory = {
            "t": read_only_array(np.array(times, dtype=float)),
            "x": read_only_array(np.array(points, dtype=float).reshape(-1, 2)),
            "termination": termination,
            "quality": quality,
            "message": message,
            "direction": direction,
            "nsteps": len(points) - 1,
            "nrejected": nrejected,
            "nfev": stats["total_fev"],
            "solver": stepper.name,
            "integration_time": elapsed,
        }
        return trajectory

    def _adaptive_step(
        self, stepper: StepperBase, state: StateVector, t: float, h: float, direction: int
    ) -> Tuple[StepResult, float, int, bool]:
        """
        Take one error-controlled step.

        Halves the step until the scaled error is <= 1. When the step
        cannot shrink further (min_step) or the retry budget is spent, the
        last attempt is accepted anyway and flagged degraded.

        Returns
        -------
        (result, next_h, rejected_attempts, degraded)
        """
        config = self.config
        rejected = 0
        while True:
            result = stepper.step(state, t, direction * h)
            error = result["error"]
            if error is not None and math.isfinite(error) and error <= 1.0:
                if error == 0.0:
                    factor = _MAX_FACTOR
                else:
                    factor = min(_MAX_FACTOR, max(_MIN_FACTOR, _SAFETY * error**_ERROR_EXPONENT))
                return result, config.clamp_step(h * factor), rejected, False

            if h <= config.min_step or rejected >= config.max_retries:
                return result, h, rejected, True

            rejected += 1
            h = max(0.5 * h, config.min_step)

    def _check_termination(
        self, candidate: StateVector, finite: bool, steps_taken: int, points: List[StateVector]
    ) -> Optional[TerminationReason]:
        config = self.config
        if steps_taken >= config.max_steps:
            return TerminationReason.MAX_STEPS
        if config.bounds.exits(candidate):
            return TerminationReason.OUT_OF_BOUNDS
        if not finite:
            return TerminationReason.NON_FINITE

        window = config.convergence_window
        if config.convergence_tolerance > 0 and len(points) >= window:
            recent = np.asarray(points[-window:])
            if np.all(np.ptp(recent, axis=0) < config.convergence_tolerance):
                return TerminationReason.CONVERGED
        return None

    def run_bidirectional(self, seed: ArrayLike) -> BidirectionalTrajectory:
        """
        Integrate both ways and join the halves through the seed.

        The backward half is reversed and placed before the forward half;
        the seed appears once.
        """
        forward = self.run(seed, direction=1)
        backward = self.run(seed, direction=-1)

        seed_index = len(backward["x"]) - 1
        x = np.concatenate([backward["x"][::-1], forward["x"][1:]], axis=0)
        t = np.concatenate([backward["t"][::-1], forward["t"][1:]])

        result: BidirectionalTrajectory = {
            "t": read_only_array(t),
            "x": read_only_array(x),
            "seed_index": seed_index,
            "quality": TrajectoryQuality.worst(forward["quality"], backward["quality"]),
            "forward": forward,
            "backward": backward,
        }
        return result


# ============================================================================
# Functional Interface
# ============================================================================


def integrate(
    field: VectorFieldFunction,
    seed: ArrayLike,
    direction: int = 1,
    config: Optional[IntegrationConfig] = None,
    **options,
) -> Trajectory:
    """
    Integrate a trajectory from a seed.

    Parameters
    ----------
    field : VectorFieldFunction
        Pure function (x, y, t) → (dx, dy)
    seed : ArrayLike
        Finite starting point (x, y)
    direction : int
        +1 forward, -1 backward
    config : Optional[IntegrationConfig]
        Configuration (defaults for every field)
    **options
        Overrides applied on top of config, e.g. ``max_steps=500``

    Returns
    -------
    Trajectory
        Read-only points and times plus termination and quality flags

    Raises
    ------
    ValueError
        Invalid configuration, non-finite seed, or bad direction
    TypeError
        Field is not callable

    Examples
    --------
    >>> traj = integrate(lambda x, y, t: (y, -x), (1.0, 0.0), max_steps=100)
    >>> len(traj["x"]) <= 101
    True
    """
    config = resolve_config(config, **options)
    return TrajectoryIntegrator(field, config).run(seed, direction)


def integrate_bidirectional(
    field: VectorFieldFunction,
    seed: ArrayLike,
    config: Optional[IntegrationConfig] = None,
    **options,
) -> BidirectionalTrajectory:
    """
    Solution curve through a seed: backward half, seed, forward half.

    Examples
    --------
    >>> curve = integrate_bidirectional(LinearVectorField(1, 0, 0, -1), (1.0, 1.0))
    >>> curve["quality"]
    <TrajectoryQuality.OK: 'ok'>
    """
    config = resolve_config(config, **options)
    return TrajectoryIntegrator(field, config).run_bidirectional(seed)


def integrate_seeds(
    field: VectorFieldFunction,
    seeds: Iterable[ArrayLike],
    config: Optional[IntegrationConfig] = None,
    bidirectional: bool = True,
    **options,
) -> List[Union[Trajectory, BidirectionalTrajectory]]:
    """
    Integrate several seeds, one after the other.

    Trajectories are independent: computing one never observes or changes
    another. All seeds are validated before the first one is integrated.

    Parameters
    ----------
    field : VectorFieldFunction
        (x, y, t) → (dx, dy)
    seeds : Iterable[ArrayLike]
        Starting points
    config : Optional[IntegrationConfig]
        Shared configuration
    bidirectional : bool
        If True, return BidirectionalTrajectory per seed; else forward only

    Returns
    -------
    list
        One trajectory per seed, in seed order
    """
    config = resolve_config(config, **options)
    integrator = TrajectoryIntegrator(field, config)
    validated = [validate_seed(seed) for seed in seeds]
    if bidirectional:
        return [integrator.run_bidirectional(seed) for seed in validated]
    return [integrator.run(seed, direction=1) for seed in validated]


__all__ = [
    "TrajectoryIntegrator",
    "integrate",
    "integrate_bidirectional",
    "integrate_seeds",
    "validate_seed",
    "validate_direction",
]
