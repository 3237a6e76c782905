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
Tests for codegen_utils.py

Tests verify that SymPy expressions compile to NumPy functions returning
flat float arrays, with Min/Max support and NaN on domain errors.

Run with:
    pytest tests/unit/fields_unit_tests/codegen_utils_test.py -v
"""

import numpy as np
import pytest
import sympy as sp
from numpy.testing import assert_allclose

from phaseflow.fields.codegen_utils import _numpy_max, _numpy_min, generate_numpy_function


@pytest.fixture
def symbols():
    return sp.symbols("x y t")


class TestMinMax:
    """Test the Min/Max replacements"""

    def test_min(self):
        assert _numpy_min(3.0, 1.0, 2.0) == 1.0

    def test_max(self):
        assert _numpy_max(3.0, 1.0, 2.0) == 3.0

    def test_elementwise(self):
        assert_allclose(_numpy_min(np.array([1.0, 5.0]), np.array([2.0, 4.0])), [1.0, 4.0])


class TestGenerateNumpyFunction:
    """Test compiled functions"""

    def test_scalar_expression_is_flat(self, symbols):
        x, y, t = symbols
        func = generate_numpy_function(x * y + t, [x, y, t])
        result = func(2.0, 3.0, 1.0)
        assert result.shape == (1,)
        assert result[0] == pytest.approx(7.0)

    def test_vector_expression(self, symbols):
        x, y, t = symbols
        func = generate_numpy_function(sp.Matrix([y, -sp.sin(x)]), [x, y, t])
        assert_allclose(func(0.0, 1.0, 0.0), [1.0, 0.0])

    def test_list_expression(self, symbols):
        x, y, t = symbols
        func = generate_numpy_function([x, y], [x, y, t])
        assert_allclose(func(1.0, 2.0, 0.0), [1.0, 2.0])

    def test_matrix_is_flattened(self, symbols):
        x, y, t = symbols
        func = generate_numpy_function(sp.Matrix([[x, 1], [0, y]]), [x, y, t])
        result = func(2.0, 3.0, 0.0)
        assert result.shape == (4,)
        assert_allclose(result.reshape(2, 2), [[2.0, 1.0], [0.0, 3.0]])

    def test_min_max(self, symbols):
        x, y, t = symbols
        func = generate_numpy_function(sp.Matrix([sp.Min(x, y), sp.Max(x, y)]), [x, y, t])
        assert_allclose(func(1.0, 2.0, 0.0), [1.0, 2.0])

    def test_domain_error_is_nan(self, symbols):
        x, y, t = symbols
        func = generate_numpy_function(sp.sqrt(x), [x, y, t])
        with np.errstate(invalid="ignore"):
            result = func(-1.0, 0.0, 0.0)
        assert np.isnan(result[0])
        assert result.dtype == float
