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
phaseflow - Trajectory Integration for Phase Portraits
======================================================

Adaptive-step integration of planar vector fields into bounded
trajectories, forward and backward from a seed, for phase-portrait and
ODE-solver teaching pages.

Quick Start
-----------
>>> from phaseflow import LinearVectorField, integrate, integrate_bidirectional
>>>
>>> field = LinearVectorField(a=0, b=1, c=-1, d=0)     # pure rotation
>>> traj = integrate(field, seed=(1.0, 0.0))           # forward
>>> curve = integrate_bidirectional(field, (1.0, 0.0))  # both ways
>>> traj["x"].shape, traj["termination"], traj["quality"]

User-typed fields:

>>> from phaseflow import SymbolicVectorField
>>> pendulum = SymbolicVectorField.from_expressions("y", "-sin(x) - b*y", {"b": 0.25})
>>> traj = integrate(pendulum, (2.0, 0.0), max_steps=3000)

Scalar ODEs:

>>> from phaseflow import solve_scalar_ode
>>> sol = solve_scalar_ode(lambda t, y: -2 * y, t0=0.0, y0=1.0, t_end=2.0)

Authors
-------
Gil Benezer

License
-------
GNU Affero General Public License v3.0
"""

from .fields import (
    EquilibriumType,
    LinearVectorField,
    SymbolicVectorField,
    classify_linear,
    evaluate_field,
    is_rotation_dominated,
    numerical_jacobian,
    time_independent,
)
from .numerical_integration import (
    Bounds,
    ConstantStepHeuristic,
    DormandPrinceStepper,
    IntegrationConfig,
    RK4Stepper,
    SpeedScaledStepHeuristic,
    SpiralAwareStepHeuristic,
    TrajectoryIntegrator,
    create_stepper,
    integrate,
    integrate_bidirectional,
    integrate_seeds,
    solve_scalar_ode,
)
from .types import (
    BidirectionalTrajectory,
    StepResult,
    TerminationReason,
    Trajectory,
    TrajectoryQuality,
)

__version__ = "0.1.0"

__all__ = [
    # Fields
    "EquilibriumType",
    "LinearVectorField",
    "SymbolicVectorField",
    "classify_linear",
    "evaluate_field",
    "is_rotation_dominated",
    "numerical_jacobian",
    "time_independent",
    # Integration
    "Bounds",
    "IntegrationConfig",
    "RK4Stepper",
    "DormandPrinceStepper",
    "create_stepper",
    "ConstantStepHeuristic",
    "SpeedScaledStepHeuristic",
    "SpiralAwareStepHeuristic",
    "TrajectoryIntegrator",
    "integrate",
    "integrate_bidirectional",
    "integrate_seeds",
    "solve_scalar_ode",
    # Types
    "BidirectionalTrajectory",
    "StepResult",
    "TerminationReason",
    "Trajectory",
    "TrajectoryQuality",
]
