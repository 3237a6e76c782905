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
Vector Fields - Planar Dynamics for Phase Portraits

Defines the vector fields the integrator consumes and the local analysis
used to pick step sizes:
- evaluate_field(): safe evaluation returning a finite-or-NaN (2,) array
- LinearVectorField: dx = a·x + b·y, dy = c·x + d·y
- numerical_jacobian(), jacobian_at(): local linearization
- is_rotation_dominated(): spiral test on a Jacobian
- EquilibriumType, classify_linear(): trace-determinant classification

Any callable ``f(x, y, t) -> (dx, dy)`` is a valid field. Objects that also
expose ``jacobian(x, y, t)`` (LinearVectorField, SymbolicVectorField) are
linearized exactly; plain callables by central differences.

Examples
--------
>>> field = LinearVectorField(a=-1, b=2, c=-2, d=-1)
>>> field.classify()
<EquilibriumType.STABLE_SPIRAL: 'stable_spiral'>
>>> evaluate_field(field, np.array([1.0, 0.0]), 0.0)
array([-1., -2.])
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Tuple

import numpy as np

from phaseflow.types.core import JacobianMatrix, StateVector, VectorFieldFunction

_NAN_STATE = np.array([np.nan, np.nan])


def evaluate_field(field: VectorFieldFunction, state: StateVector, t: float) -> np.ndarray:
    """
    Evaluate a planar field at a state.

    Degenerate evaluations never raise: arithmetic errors inside the field
    (division by zero, overflow) come back as NaN, and NumPy floating-point
    warnings are silenced.

    Parameters
    ----------
    field : VectorFieldFunction
        (x, y, t) → (dx, dy)
    state : StateVector
        Point (2,)
    t : float
        Integration time

    Returns
    -------
    np.ndarray
        Velocity, shape (2,); may contain NaN/inf

    Raises
    ------
    ValueError
        If the field does not return exactly two components
    """
    try:
        with np.errstate(all="ignore"):
            value = field(float(state[0]), float(state[1]), float(t))
    except ArithmeticError:
        return _NAN_STATE.copy()

    velocity = np.asarray(value, dtype=float).reshape(-1)
    if velocity.shape != (2,):
        raise ValueError(
            f"Vector field must return two components (dx, dy), got shape {velocity.shape}"
        )
    return velocity


class EquilibriumType(Enum):
    """
    Type of the equilibrium at the origin of a linear planar system.

    Follows the trace-determinant plane (τ = tr A, Δ = det A):
    saddle for Δ < 0, center for τ = 0 < Δ, spiral for τ² < 4Δ,
    node otherwise, degenerate for Δ = 0.
    """

    SADDLE = "saddle"
    STABLE_NODE = "stable_node"
    UNSTABLE_NODE = "unstable_node"
    STABLE_SPIRAL = "stable_spiral"
    UNSTABLE_SPIRAL = "unstable_spiral"
    CENTER = "center"
    DEGENERATE = "degenerate"

    @property
    def is_spiral(self) -> bool:
        return self in (
            EquilibriumType.STABLE_SPIRAL,
            EquilibriumType.UNSTABLE_SPIRAL,
            EquilibriumType.CENTER,
        )


def classify_linear(matrix: JacobianMatrix, tol: float = 1e-12) -> EquilibriumType:
    """
    Classify a 2×2 system matrix on the trace-determinant plane.

    Parameters
    ----------
    matrix : JacobianMatrix
        System (or Jacobian) matrix, shape (2, 2)
    tol : float
        Values with magnitude below tol are treated as zero

    Returns
    -------
    EquilibriumType
    """
    A = np.asarray(matrix, dtype=float)
    tr = float(np.trace(A))
    det = float(np.linalg.det(A))

    if abs(det) <= tol:
        return EquilibriumType.DEGENERATE
    if det < 0:
        return EquilibriumType.SADDLE
    if abs(tr) <= tol:
        return EquilibriumType.CENTER

    discriminant = tr * tr - 4.0 * det
    if discriminant < 0:
        return EquilibriumType.STABLE_SPIRAL if tr < 0 else EquilibriumType.UNSTABLE_SPIRAL
    return EquilibriumType.STABLE_NODE if tr < 0 else EquilibriumType.UNSTABLE_NODE


def is_rotation_dominated(jacobian: JacobianMatrix) -> bool:
    """
    Spiral test used by the step-size heuristic.

    The local flow is rotation-dominated when the Jacobian has complex
    eigenvalues whose imaginary part exceeds the real part in magnitude,
    i.e. trajectories turn faster than they contract or expand.

    Parameters
    ----------
    jacobian : JacobianMatrix
        Local Jacobian, shape (2, 2)

    Returns
    -------
    bool
        False for any non-finite Jacobian

    Examples
    --------
    >>> is_rotation_dominated(np.array([[0.0, 1.0], [-1.0, 0.0]]))
    True
    >>> is_rotation_dominated(np.array([[-1.0, 0.0], [0.0, -1.0]]))
    False
    """
    J = np.asarray(jacobian, dtype=float)
    if not np.all(np.isfinite(J)):
        return False

    tr = J[0, 0] + J[1, 1]
    det = J[0, 0] * J[1, 1] - J[0, 1] * J[1, 0]
    discriminant = tr * tr - 4.0 * det
    if discriminant >= 0:
        return False

    # λ = tr/2 ± i·sqrt(-disc)/2
    return bool(np.sqrt(-discriminant) > abs(tr))


def numerical_jacobian(
    field: VectorFieldFunction, x: float, y: float, t: float = 0.0, eps: float = 1e-6
) -> JacobianMatrix:
    """
    Jacobian of a field by central differences.

    Parameters
    ----------
    field : VectorFieldFunction
        (x, y, t) → (dx, dy)
    x, y : float
        Linearization point
    t : float
        Time
    eps : float
        Relative perturbation; scaled by max(1, |coordinate|)

    Returns
    -------
    JacobianMatrix
        Shape (2, 2); may be non-finite for degenerate fields
    """
    J = np.empty((2, 2))
    point = np.array([x, y], dtype=float)
    for j in range(2):
        step = eps * max(1.0, abs(point[j]))
        forward = point.copy()
        backward = point.copy()
        forward[j] += step
        backward[j] -= step
        J[:, j] = (evaluate_field(field, forward, t) - evaluate_field(field, backward, t)) / (
            2.0 * step
        )
    return J


def jacobian_at(field: VectorFieldFunction, x: float, y: float, t: float = 0.0) -> JacobianMatrix:
    """
    Jacobian of a field, exact when the field provides one.

    Uses ``field.jacobian(x, y, t)`` when available and falls back to
    numerical_jacobian() for plain callables.
    """
    exact = getattr(field, "jacobian", None)
    if callable(exact):
        return np.asarray(exact(x, y, t), dtype=float)
    return numerical_jacobian(field, x, y, t)


@dataclass(frozen=True)
class LinearVectorField:
    """
    Linear planar field, the workhorse of the phase-portrait pages.

    Dynamics:
        dx/dt = a*x + b*y
        dy/dt = c*x + d*y

    Parameters
    ----------
    a, b, c, d : float
        Entries of the system matrix A = [[a, b], [c, d]]

    Examples
    --------
    >>> rotation = LinearVectorField(0, 1, -1, 0)
    >>> rotation(1.0, 0.0, 0.0)
    (0.0, -1.0)
    >>> rotation.classify()
    <EquilibriumType.CENTER: 'center'>
    """

    a: float
    b: float
    c: float
    d: float

    def __post_init__(self):
        for name in ("a", "b", "c", "d"):
            value = getattr(self, name)
            if not np.isfinite(value):
                raise ValueError(f"Coefficient {name} must be finite, got {value}")

    def __call__(self, x: float, y: float, t: float = 0.0) -> Tuple[float, float]:
        return (self.a * x + self.b * y, self.c * x + self.d * y)

    @property
    def matrix(self) -> np.ndarray:
        """System matrix A, shape (2, 2)."""
        return np.array([[self.a, self.b], [self.c, self.d]], dtype=float)

    @property
    def trace(self) -> float:
        return float(self.a + self.d)

    @property
    def determinant(self) -> float:
        return float(self.a * self.d - self.b * self.c)

    def jacobian(self, x: float = 0.0, y: float = 0.0, t: float = 0.0) -> JacobianMatrix:
        """Constant Jacobian (the system matrix)."""
        return self.matrix

    def eigenvalues(self) -> np.ndarray:
        return np.linalg.eigvals(self.matrix)

    def classify(self) -> EquilibriumType:
        return classify_linear(self.matrix)

    @classmethod
    def from_matrix(cls, matrix) -> "LinearVectorField":
        """Build from a 2×2 array-like."""
        A = np.asarray(matrix, dtype=float)
        if A.shape != (2, 2):
            raise ValueError(f"Expected a 2x2 matrix, got shape {A.shape}")
        return cls(float(A[0, 0]), float(A[0, 1]), float(A[1, 0]), float(A[1, 1]))


def as_vector_field(field) -> VectorFieldFunction:
    """
    Validate that ``field`` can be used as a vector field.

    Raises
    ------
    TypeError
        If the field is not callable
    """
    if not callable(field):
        raise TypeError(f"Vector field must be callable f(x, y, t), got {type(field).__name__}")
    return field


def time_independent(f: Callable[[float, float], Tuple[float, float]]) -> VectorFieldFunction:
    """
    Adapt an autonomous field f(x, y) to the (x, y, t) signature.

    Examples
    --------
    >>> field = time_independent(lambda x, y: (y, -x))
    >>> field(1.0, 0.0, 5.0)
    (0.0, -1.0)
    """

    def wrapped(x: float, y: float, t: float = 0.0):
        return f(x, y)

    wrapped.__name__ = getattr(f, "__name__", "autonomous_field")
    return wrapped


__all__ = [
    "evaluate_field",
    "EquilibriumType",
    "classify_linear",
    "is_rotation_dominated",
    "numerical_jacobian",
    "jacobian_at",
    "LinearVectorField",
    "as_vector_field",
    "time_independent",
]
