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
Code Generation Utilities

Compiles SymPy expressions into NumPy callables for vector-field
evaluation.

All generated functions return 1D arrays, even for scalar expressions:
- Scalar expr: returns shape (1,)
- Vector expr: returns shape (n,)
"""

from typing import Callable, List, Union

import numpy as np
import sympy as sp


def _numpy_min(*args):
    result = args[0]
    for arg in args[1:]:
        result = np.minimum(result, arg)
    return result


def _numpy_max(*args):
    result = args[0]
    for arg in args[1:]:
        result = np.maximum(result, arg)
    return result


SYMPY_TO_NUMPY_LAMBDIFY = {
    "Min": _numpy_min,
    "Max": _numpy_max,
}


def generate_numpy_function(
    expr: Union[sp.Expr, List[sp.Expr], sp.Matrix],
    symbols: List[sp.Symbol],
) -> Callable:
    """
    Generate a NumPy function from SymPy expression(s).

    Args:
        expr: SymPy expression, list, or Matrix
        symbols: Input symbols in order

    Returns:
        Compiled NumPy function returning a flat float array

    Notes:
        Arguments are passed as ``np.float64`` so that domain errors
        (``sqrt(-1)``, ``1/0``) produce NaN/inf instead of raising or
        turning complex.
    """
    if isinstance(expr, list):
        expr = sp.Matrix(expr)
    elif not isinstance(expr, sp.MatrixBase):
        expr = sp.Matrix([expr])

    func = sp.lambdify(symbols, expr, modules=[SYMPY_TO_NUMPY_LAMBDIFY, "numpy"])

    def wrapped_func(*args):
        result = func(*[np.float64(arg) for arg in args])
        return np.asarray(result, dtype=float).flatten()

    return wrapped_func


__all__ = [
    "SYMPY_TO_NUMPY_LAMBDIFY",
    "generate_numpy_function",
]
