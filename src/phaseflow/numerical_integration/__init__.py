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
Numerical Integration
=====================

Runge-Kutta steppers, step-size heuristics, configuration, and the
trajectory driver built on them.

>>> from phaseflow.numerical_integration import integrate, IntegrationConfig
>>> traj = integrate(field, (1.0, 0.0), config=IntegrationConfig(method="rk4"))
"""

from .config import Bounds, IntegrationConfig, resolve_config
from .runge_kutta import (
    METHOD_ALIASES,
    DormandPrinceStepper,
    RK4Stepper,
    create_stepper,
    normalize_method_name,
)
from .scalar_ode import solve_scalar_ode
from .step_heuristics import (
    ConstantStepHeuristic,
    SpeedScaledStepHeuristic,
    SpiralAwareStepHeuristic,
)
from .stepper_base import StepMode, StepperBase
from .trajectory_integrator import (
    TrajectoryIntegrator,
    integrate,
    integrate_bidirectional,
    integrate_seeds,
)

__all__ = [
    # Configuration
    "Bounds",
    "IntegrationConfig",
    "resolve_config",
    # Steppers
    "StepMode",
    "StepperBase",
    "RK4Stepper",
    "DormandPrinceStepper",
    "METHOD_ALIASES",
    "create_stepper",
    "normalize_method_name",
    # Heuristics
    "ConstantStepHeuristic",
    "SpeedScaledStepHeuristic",
    "SpiralAwareStepHeuristic",
    # Trajectories
    "TrajectoryIntegrator",
    "integrate",
    "integrate_bidirectional",
    "integrate_seeds",
    "solve_scalar_ode",
]
