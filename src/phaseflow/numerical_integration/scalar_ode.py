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
Scalar ODE Solver

Solves dy/dt = f(t, y) on [t0, t_end] with the same trajectory integrator
used for phase portraits, by embedding the equation as the planar field

    (t, y) → (1, f(t, y))

whose trajectories are the graphs of the solutions. Points are stored as
(t, y) pairs. The last step is redone with the exact remaining length so
the solution ends on t = t_end.

Examples
--------
>>> sol = solve_scalar_ode(lambda t, y: -2 * y, t0=0.0, y0=1.0, t_end=1.0)
>>> t_final, y_final = sol["x"][-1]
>>> abs(y_final - np.exp(-2.0)) < 1e-5
True
"""

import math
from typing import Optional, Tuple

import numpy as np

from phaseflow.numerical_integration.config import Bounds, IntegrationConfig, resolve_config
from phaseflow.numerical_integration.trajectory_integrator import TrajectoryIntegrator, read_only_array
from phaseflow.types.core import ScalarODEFunction
from phaseflow.types.trajectories import TerminationReason, Trajectory, TrajectoryQuality


def _as_planar_field(f: ScalarODEFunction):
    if not callable(f):
        raise TypeError(f"ODE right-hand side must be callable f(t, y), got {type(f).__name__}")

    def planar_field(t: float, y: float, _time: float = 0.0) -> Tuple[float, float]:
        return (1.0, f(t, y))

    return planar_field


def solve_scalar_ode(
    f: ScalarODEFunction,
    t0: float,
    y0: float,
    t_end: float,
    config: Optional[IntegrationConfig] = None,
    y_bounds: Tuple[float, float] = (-1e6, 1e6),
    **options,
) -> Trajectory:
    """
    Solve the initial value problem y' = f(t, y), y(t0) = y0.

    Parameters
    ----------
    f : ScalarODEFunction
        Right-hand side (t, y) → dy/dt
    t0, y0 : float
        Initial condition
    t_end : float
        Final time; t_end < t0 integrates backward
    config : Optional[IntegrationConfig]
        Step limits, tolerances and method; its bounds, t0 and convergence
        settings are replaced for the (t, y) plane
    y_bounds : Tuple[float, float]
        The solution is stopped when y leaves this range (blow-up)
    **options
        Configuration overrides

    Returns
    -------
    Trajectory
        ``x[:, 0]`` are times, ``x[:, 1]`` the solution values. The last
        point lies on t_end unless y left y_bounds, a NaN appeared, or the
        step budget ran out first.

    Raises
    ------
    ValueError
        Non-finite t0, y0, t_end, t_end == t0, or invalid configuration
    """
    for name, value in (("t0", t0), ("y0", y0), ("t_end", t_end)):
        if not math.isfinite(value):
            raise ValueError(f"{name} must be finite, got {value}")
    if t_end == t0:
        raise ValueError("t_end must differ from t0")

    direction = 1 if t_end > t0 else -1
    bounds = Bounds(min(t0, t_end), max(t0, t_end), y_bounds[0], y_bounds[1])
    config = resolve_config(config, **options).with_overrides(
        bounds=bounds, t0=float(t0), convergence_tolerance=0.0
    )

    integrator = TrajectoryIntegrator(_as_planar_field(f), config)
    trajectory = integrator.run((t0, y0), direction=direction)

    overshot = trajectory["x"][-1, 0] * direction > t_end * direction
    if trajectory["termination"] is TerminationReason.OUT_OF_BOUNDS and overshot:
        trajectory = _land_on_final_time(integrator, trajectory, t_end)
    return trajectory


def _land_on_final_time(
    integrator: TrajectoryIntegrator, trajectory: Trajectory, t_end: float
) -> Trajectory:
    """Replace the overshooting last point by an exact step onto t_end."""
    previous = np.array(trajectory["x"][-2])
    remaining = t_end - previous[0]
    if remaining == 0.0:
        # The previous step already landed on t_end
        return _with_points(
            trajectory,
            trajectory["x"][:-1],
            trajectory["t"][:-1],
            trajectory["quality"],
            "Reached t_end",
        )

    stepper = integrator.create_stepper()
    result = stepper.step(previous, float(trajectory["t"][-2]), remaining)
    final = result["state"]

    x = np.array(trajectory["x"])
    t = np.array(trajectory["t"])
    quality = trajectory["quality"]
    message = "Reached t_end"
    if np.all(np.isfinite(final)):
        final[0] = t_end
        x[-1] = final
        t[-1] = t_end
        if integrator.config.bounds.exits(final):
            message = trajectory["message"]
    else:
        x, t = x[:-1], t[:-1]
        quality = TrajectoryQuality.TRUNCATED
        message = "Trajectory truncated: numerical instability"

    return _with_points(
        trajectory, x, t, quality, message, extra_fev=stepper.get_stats()["total_fev"]
    )


def _with_points(
    trajectory: Trajectory,
    x: np.ndarray,
    t: np.ndarray,
    quality: TrajectoryQuality,
    message: str,
    extra_fev: int = 0,
) -> Trajectory:
    landed: Trajectory = {
        **trajectory,
        "x": read_only_array(np.array(x)),
        "t": read_only_array(np.array(t)),
        "quality": quality,
        "message": message,
        "nsteps": len(x) - 1,
        "nfev": trajectory["nfev"] + extra_fev,
    }
    return landed


__all__ = [
    "solve_scalar_ode",
]
