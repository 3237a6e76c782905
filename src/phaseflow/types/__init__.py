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
Types Module - Type Definitions for phaseflow

Central import point for type aliases and result types.

Usage
-----
>>> from phaseflow.types import Trajectory, TerminationReason, Point2D
"""

from .core import (
    ArrayLike,
    JacobianMatrix,
    Point2D,
    ScalarLike,
    ScalarODEFunction,
    StateVector,
    StepHeuristicFunction,
    VectorFieldFunction,
)
from .trajectories import (
    BidirectionalTrajectory,
    StateTrajectory,
    StepResult,
    TerminationReason,
    TimePoints,
    Trajectory,
    TrajectoryList,
    TrajectoryQuality,
)

__all__ = [
    # Core
    "ArrayLike",
    "ScalarLike",
    "Point2D",
    "StateVector",
    "JacobianMatrix",
    "VectorFieldFunction",
    "ScalarODEFunction",
    "StepHeuristicFunction",
    # Trajectories
    "TerminationReason",
    "TrajectoryQuality",
    "TimePoints",
    "StateTrajectory",
    "StepResult",
    "Trajectory",
    "BidirectionalTrajectory",
    "TrajectoryList",
]
