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
Trajectory and Step Types

Defines the result types produced by the integrator:
- Termination reasons and trajectory quality flags
- Single-step results (StepResult)
- Trajectories, one direction (Trajectory) or both (BidirectionalTrajectory)

Shape Conventions
-----------------
Time-major ordering, as for any other time series:
- t: (N,) - integration time of each stored point
- x: (N, 2) - stored points, ``x[0]`` is the seed

Result arrays are returned read-only. A caller that wants to edit a
trajectory copies it first (``np.array(traj["x"])``).

Usage
-----
>>> from phaseflow import integrate, LinearVectorField
>>> traj = integrate(LinearVectorField(0, 1, -1, 0), (1.0, 0.0))
>>> traj["termination"]
<TerminationReason.MAX_STEPS: 'max_steps'>
>>> traj["x"].shape[1]
2
"""

from enum import Enum
from typing import List, Optional

import numpy as np
from typing_extensions import TypedDict

from .core import StateVector

# ============================================================================
# Enumerations
# ============================================================================


class TerminationReason(Enum):
    """
    Why a trajectory stopped.

    Attributes
    ----------
    MAX_STEPS : str
        Step budget exhausted (normal)
    OUT_OF_BOUNDS : str
        Trajectory left the viewport rectangle (normal)
    NON_FINITE : str
        A computed coordinate was NaN (degenerate step)
    CONVERGED : str
        Trajectory reached a fixed point (early stop)
    """

    MAX_STEPS = "max_steps"
    OUT_OF_BOUNDS = "out_of_bounds"
    NON_FINITE = "non_finite"
    CONVERGED = "converged"


class TrajectoryQuality(Enum):
    """
    Quality flag the caller may surface to the user.

    Attributes
    ----------
    OK : str
        Every step met the requested accuracy
    DEGRADED : str
        At least one step was accepted at the minimum step size (or after
        the retry budget) without meeting the error tolerance
    TRUNCATED : str
        A non-finite step was discarded and the trajectory cut short
    """

    OK = "ok"
    DEGRADED = "degraded"
    TRUNCATED = "truncated"

    @property
    def severity(self) -> int:
        return _QUALITY_SEVERITY[self]

    @staticmethod
    def worst(*qualities: "TrajectoryQuality") -> "TrajectoryQuality":
        """Return the most severe of the given flags."""
        return max(qualities, key=lambda q: q.severity)


_QUALITY_SEVERITY = {
    TrajectoryQuality.OK: 0,
    TrajectoryQuality.DEGRADED: 1,
    TrajectoryQuality.TRUNCATED: 2,
}


# ============================================================================
# Result Types
# ============================================================================

TimePoints = np.ndarray
"""Integration times, shape (N,)."""

StateTrajectory = np.ndarray
"""Stored points, shape (N, 2)."""


class StepResult(TypedDict):
    """
    Result of a single Runge-Kutta step.

    Attributes
    ----------
    state : StateVector
        Candidate next state, shape (2,); may be non-finite
    t : float
        Integration time after the step
    h : float
        Signed step actually taken (negative when integrating backward)
    error : Optional[float]
        Scaled error norm (accept when <= 1); None for schemes without an
        embedded error estimate
    nfev : int
        Field evaluations spent on this step
    """

    state: StateVector
    t: float
    h: float
    error: Optional[float]
    nfev: int


class Trajectory(TypedDict):
    """
    One-directional trajectory from a seed.

    Attributes
    ----------
    t : TimePoints
        Time of each point (N,), read-only
    x : StateTrajectory
        Points (N, 2), read-only, all finite, ``x[0]`` is the seed
    termination : TerminationReason
        Why integration stopped
    quality : TrajectoryQuality
        OK, DEGRADED or TRUNCATED
    message : str
        Human-readable status
    direction : int
        +1 forward, -1 backward
    nsteps : int
        Accepted steps
    nrejected : int
        Rejected adaptive step attempts
    nfev : int
        Field evaluations
    solver : str
        Stepper name
    integration_time : float
        Wall-clock seconds

    Examples
    --------
    >>> traj = integrate(field, (0.5, 0.5))
    >>> if traj["quality"] is not TrajectoryQuality.OK:
    ...     print(traj["message"])
    """

    t: TimePoints
    x: StateTrajectory
    termination: TerminationReason
    quality: TrajectoryQuality
    message: str
    direction: int
    nsteps: int
    nrejected: int
    nfev: int
    solver: str
    integration_time: float


class BidirectionalTrajectory(TypedDict):
    """
    Trajectory through a seed, integrated both ways.

    ``x`` is the reversed backward half followed by the forward half with
    the seed stored once, at ``x[seed_index]``. Times before the seed are
    below ``t[seed_index]``.

    Attributes
    ----------
    t : TimePoints
        Times (N,), increasing
    x : StateTrajectory
        Points (N, 2)
    seed_index : int
        Index of the seed in ``x``
    quality : TrajectoryQuality
        Worst quality of the two halves
    forward : Trajectory
        Forward half as returned by ``integrate``
    backward : Trajectory
        Backward half as returned by ``integrate``
    """

    t: TimePoints
    x: StateTrajectory
    seed_index: int
    quality: TrajectoryQuality
    forward: Trajectory
    backward: Trajectory


TrajectoryList = List[Trajectory]


__all__ = [
    "TerminationReason",
    "TrajectoryQuality",
    "TimePoints",
    "StateTrajectory",
    "StepResult",
    "Trajectory",
    "BidirectionalTrajectory",
    "TrajectoryList",
]
