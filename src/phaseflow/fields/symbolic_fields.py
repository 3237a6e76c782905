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
Symbolic Vector Fields

Vector fields typed by the user as text (``"y"``, ``"-sin(x) - 0.2*y"``),
parsed with SymPy and compiled to NumPy. This is how the phase-portrait
pages accept arbitrary, non-linear systems.

Examples
--------
>>> field = SymbolicVectorField.from_expressions("y", "-sin(x) - mu*y", {"mu": 0.2})
>>> field(0.0, 1.0, 0.0)
(1.0, -0.2)
>>> field.jacobian(0.0, 0.0)
array([[ 0. ,  1. ],
       [-1. , -0.2]])

Accepted syntax includes ``^`` for powers and implicit multiplication
(``2x`` is ``2*x``).
"""

from tokenize import TokenError
from typing import Dict, Optional, Tuple

import numpy as np
import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    parse_expr,
    standard_transformations,
)

from phaseflow.fields.codegen_utils import generate_numpy_function
from phaseflow.fields.vector_fields import EquilibriumType, classify_linear

_TRANSFORMATIONS = standard_transformations + (
    implicit_multiplication_application,
    convert_xor,
)

X, Y, T = sp.symbols("x y t")


def parse_expression(text: str, local_symbols: Dict[str, sp.Symbol]) -> sp.Expr:
    """
    Parse one component of a field.

    Parameters
    ----------
    text : str
        Expression in x, y, t and the given parameters
    local_symbols : Dict[str, sp.Symbol]
        Names resolvable inside the expression

    Returns
    -------
    sp.Expr

    Raises
    ------
    ValueError
        If the text does not parse or uses unknown symbols
    """
    if not isinstance(text, str) or not text.strip():
        raise ValueError("Expression must be a non-empty string")

    try:
        expr = parse_expr(text, local_dict=dict(local_symbols), transformations=_TRANSFORMATIONS)
    except (SyntaxError, TokenError, TypeError, sp.SympifyError) as e:
        raise ValueError(f"Could not parse expression '{text}': {e}") from e

    expr = sp.sympify(expr)
    known = set(local_symbols.values())
    unknown = sorted(str(s) for s in expr.free_symbols if s not in known)
    if unknown:
        raise ValueError(
            f"Expression '{text}' uses unknown symbols {unknown}. "
            f"Allowed: {sorted(local_symbols)}"
        )
    return expr


class SymbolicVectorField:
    """
    Planar field defined by SymPy expressions in x, y and t.

    Parameters
    ----------
    dx_expr, dy_expr : sp.Expr
        Components of the field
    parameters : Optional[Dict[sp.Symbol, float]]
        Numerical values substituted before compilation

    Attributes
    ----------
    f_sym : sp.Matrix
        Field after parameter substitution, shape (2, 1)
    jacobian_sym : sp.Matrix
        ∂f/∂(x, y), shape (2, 2)
    """

    def __init__(
        self,
        dx_expr: sp.Expr,
        dy_expr: sp.Expr,
        parameters: Optional[Dict[sp.Symbol, float]] = None,
    ):
        self.parameters = dict(parameters or {})
        f = sp.Matrix([dx_expr, dy_expr]).subs(self.parameters)

        leftover = f.free_symbols - {X, Y, T}
        if leftover:
            raise ValueError(
                f"Field has unassigned symbols {sorted(str(s) for s in leftover)}"
            )

        self.f_sym = f
        self.jacobian_sym = f.jacobian([X, Y])
        self._f_numpy = generate_numpy_function(self.f_sym, [X, Y, T])
        self._jacobian_numpy = generate_numpy_function(self.jacobian_sym, [X, Y, T])

    @classmethod
    def from_expressions(
        cls,
        dx: str,
        dy: str,
        parameters: Optional[Dict[str, float]] = None,
    ) -> "SymbolicVectorField":
        """
        Parse a field from user-typed strings.

        Parameters
        ----------
        dx, dy : str
            Component expressions, e.g. ``"y"`` and ``"-x + mu*(1 - x^2)*y"``
        parameters : Optional[Dict[str, float]]
            Named constants used in the expressions

        Raises
        ------
        ValueError
            On parse errors, unknown symbols, or non-finite parameters
        """
        parameters = parameters or {}
        local_symbols = {"x": X, "y": Y, "t": T}
        values = {}
        for name, value in parameters.items():
            if name in local_symbols:
                raise ValueError(f"Parameter name '{name}' clashes with a state variable")
            if not np.isfinite(value):
                raise ValueError(f"Parameter '{name}' must be finite, got {value}")
            sym = sp.Symbol(name)
            local_symbols[name] = sym
            values[sym] = float(value)

        dx_expr = parse_expression(dx, local_symbols)
        dy_expr = parse_expression(dy, local_symbols)
        return cls(dx_expr, dy_expr, values)

    def __call__(self, x: float, y: float, t: float = 0.0) -> Tuple[float, float]:
        result = self._f_numpy(x, y, t)
        return (float(result[0]), float(result[1]))

    def jacobian(self, x: float, y: float, t: float = 0.0) -> np.ndarray:
        return self._jacobian_numpy(x, y, t).reshape(2, 2)

    @property
    def is_autonomous(self) -> bool:
        return T not in self.f_sym.free_symbols

    def classify_at(self, x: float, y: float, t: float = 0.0) -> EquilibriumType:
        """Classify the linearization at (x, y)."""
        return classify_linear(self.jacobian(x, y, t))

    def __repr__(self) -> str:
        return f"SymbolicVectorField(dx={self.f_sym[0]}, dy={self.f_sym[1]})"


__all__ = [
    "SymbolicVectorField",
    "parse_expression",
    "X",
    "Y",
    "T",
]
