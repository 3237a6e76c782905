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
Core Types - Fundamental Building Blocks

Defines the basic types used throughout phaseflow:
- Array and scalar aliases
- Planar points and state vectors
- Vector field and step-size strategy signatures

Usage
-----
>>> from phaseflow.types.core import Point2D, VectorFieldFunction
>>>
>>> def rotation(x: float, y: float, t: float) -> Point2D:
...     return (y, -x)
"""

from typing import Callable, Sequence, Tuple, Union

import numpy as np

# ============================================================================
# Basic Array Types
# ============================================================================

ArrayLike = Union[np.ndarray, Sequence[float]]
"""
Array-like input accepted at the public API.

Anything ``np.asarray`` turns into a float array: NumPy arrays, lists,
tuples.
"""

ScalarLike = Union[float, int, np.number]
"""
Real scalar value (Python or NumPy number).
"""

# ============================================================================
# Planar State Types
# ============================================================================

Point2D = Tuple[float, float]
"""
A point in the phase plane, ``(x, y)``.

For scalar ODEs the same pair is read as ``(t, y)``.
"""

StateVector = np.ndarray
"""
Planar state as a float array of shape (2,).

Internally every state is carried as a length-2 NumPy array so that
Runge-Kutta stage arithmetic is vectorized.
"""

JacobianMatrix = np.ndarray
"""
Local Jacobian of a vector field, shape (2, 2).

    J = [[∂f₁/∂x, ∂f₁/∂y],
         [∂f₂/∂x, ∂f₂/∂y]]

Its eigenvalues decide whether the local flow is rotation-dominated.
"""

# ============================================================================
# Function Signatures
# ============================================================================

VectorFieldFunction = Callable[[float, float, float], Sequence[float]]
"""
Planar vector field: (x, y, t) → (dx, dy).

Must be pure. Non-finite outputs are tolerated and treated as degenerate
by the integrator; they never raise.

Examples
--------
>>> def damped(x, y, t):
...     return (y, -x - 0.1 * y)
"""

ScalarODEFunction = Callable[[float, float], float]
"""
Right-hand side of a scalar ODE: (t, y) → dy/dt.
"""

StepHeuristicFunction = Callable[..., float]
"""
Step-size strategy: called as ``heuristic(field, state, t, config)`` and
returning a positive step size.
"""


__all__ = [
    "ArrayLike",
    "ScalarLike",
    "Point2D",
    "StateVector",
    "JacobianMatrix",
    "VectorFieldFunction",
    "ScalarODEFunction",
    "StepHeuristicFunction",
]
