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
Unit tests for vector fields and local flow analysis.

Tests cover:
1. Safe field evaluation (degenerate values never raise)
2. LinearVectorField evaluation, matrix, eigenvalues
3. Trace-determinant classification
4. Rotation-dominance (spiral) test
5. Numerical and exact Jacobians
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from phaseflow.fields.vector_fields import (
    EquilibriumType,
    LinearVectorField,
    as_vector_field,
    classify_linear,
    evaluate_field,
    is_rotation_dominated,
    jacobian_at,
    numerical_jacobian,
    time_independent,
)


# ============================================================================
# Test Class 1: evaluate_field
# ============================================================================


class TestEvaluateField:
    """Test safe evaluation of planar fields"""

    def test_returns_float_array(self):
        result = evaluate_field(lambda x, y, t: (y, -x), np.array([1.0, 2.0]), 0.0)
        assert isinstance(result, np.ndarray)
        assert result.shape == (2,)
        assert_allclose(result, [2.0, -1.0])

    def test_passes_time(self):
        result = evaluate_field(lambda x, y, t: (t, 2 * t), np.array([0.0, 0.0]), 3.0)
        assert_allclose(result, [3.0, 6.0])

    def test_division_by_zero_becomes_nan(self):
        result = evaluate_field(lambda x, y, t: (1.0 / x, 0.0), np.array([0.0, 1.0]), 0.0)
        assert np.all(np.isnan(result))

    def test_overflow_becomes_nan(self):
        import math

        result = evaluate_field(lambda x, y, t: (math.exp(x), 0.0), np.array([1e5, 0.0]), 0.0)
        assert np.all(np.isnan(result))

    def test_nan_output_passes_through(self):
        result = evaluate_field(lambda x, y, t: (np.nan, 1.0), np.array([0.0, 0.0]), 0.0)
        assert np.isnan(result[0])
        assert result[1] == 1.0

    def test_wrong_number_of_components_raises(self):
        with pytest.raises(ValueError, match="two components"):
            evaluate_field(lambda x, y, t: (x, y, t), np.array([0.0, 0.0]), 0.0)

    def test_non_callable_rejected(self):
        with pytest.raises(TypeError, match="callable"):
            as_vector_field(42)


# ============================================================================
# Test Class 2: LinearVectorField
# ============================================================================


class TestLinearVectorField:
    """Test the linear planar field"""

    def test_evaluation(self):
        field = LinearVectorField(1.0, 2.0, 3.0, 4.0)
        assert field(1.0, 1.0, 0.0) == (3.0, 7.0)

    def test_time_argument_optional(self):
        field = LinearVectorField(0, 1, -1, 0)
        assert field(1.0, 0.0) == (0.0, -1.0)

    def test_matrix_trace_determinant(self):
        field = LinearVectorField(1.0, 2.0, 3.0, 4.0)
        assert_allclose(field.matrix, [[1.0, 2.0], [3.0, 4.0]])
        assert field.trace == 5.0
        assert field.determinant == -2.0

    def test_jacobian_is_constant(self):
        field = LinearVectorField(1.0, 2.0, 3.0, 4.0)
        assert_allclose(field.jacobian(5.0, -3.0, 1.0), field.matrix)

    def test_eigenvalues_of_rotation(self):
        eigenvalues = LinearVectorField(0, 1, -1, 0).eigenvalues()
        assert_allclose(sorted(eigenvalues.imag), [-1.0, 1.0])
        assert_allclose(eigenvalues.real, [0.0, 0.0])

    def test_from_matrix(self):
        field = LinearVectorField.from_matrix([[1, 2], [3, 4]])
        assert (field.a, field.b, field.c, field.d) == (1.0, 2.0, 3.0, 4.0)

    def test_from_matrix_wrong_shape(self):
        with pytest.raises(ValueError, match="2x2"):
            LinearVectorField.from_matrix([1, 2, 3, 4])

    def test_non_finite_coefficient_rejected(self):
        with pytest.raises(ValueError, match="finite"):
            LinearVectorField(np.nan, 0, 0, 0)

    def test_frozen(self):
        field = LinearVectorField(0, 1, -1, 0)
        with pytest.raises(AttributeError):
            field.a = 2.0


# ============================================================================
# Test Class 3: Classification
# ============================================================================


class TestClassification:
    """Test trace-determinant classification"""

    @pytest.mark.parametrize(
        "coefficients, expected",
        [
            ((1, 0, 0, -1), EquilibriumType.SADDLE),
            ((-1, 0, 0, -2), EquilibriumType.STABLE_NODE),
            ((1, 0, 0, 2), EquilibriumType.UNSTABLE_NODE),
            ((-1, 2, -2, -1), EquilibriumType.STABLE_SPIRAL),
            ((1, 2, -2, 1), EquilibriumType.UNSTABLE_SPIRAL),
            ((0, 1, -1, 0), EquilibriumType.CENTER),
            ((1, 0, 0, 0), EquilibriumType.DEGENERATE),
        ],
    )
    def test_linear_classification(self, coefficients, expected):
        assert LinearVectorField(*coefficients).classify() is expected

    def test_classify_linear_on_array(self):
        assert classify_linear(np.array([[0.0, 1.0], [-4.0, 0.0]])) is EquilibriumType.CENTER

    def test_is_spiral_property(self):
        assert EquilibriumType.STABLE_SPIRAL.is_spiral
        assert EquilibriumType.CENTER.is_spiral
        assert not EquilibriumType.SADDLE.is_spiral
        assert not EquilibriumType.STABLE_NODE.is_spiral


# ============================================================================
# Test Class 4: Rotation dominance
# ============================================================================


class TestRotationDominated:
    """Test the spiral heuristic's classification rule"""

    @pytest.mark.parametrize(
        "matrix, expected",
        [
            ([[0.0, 1.0], [-1.0, 0.0]], True),  # center
            ([[-1.0, 2.0], [-2.0, -1.0]], True),  # -1 ± 2i
            ([[-3.0, 1.0], [-1.0, -3.0]], False),  # -3 ± i, contraction dominates
            ([[-1.0, 0.0], [0.0, -1.0]], False),  # node
            ([[1.0, 0.0], [0.0, -1.0]], False),  # saddle
            ([[0.0, 0.0], [0.0, 0.0]], False),
        ],
    )
    def test_rule(self, matrix, expected):
        assert is_rotation_dominated(np.array(matrix)) is expected

    def test_non_finite_jacobian(self):
        assert not is_rotation_dominated(np.full((2, 2), np.nan))


# ============================================================================
# Test Class 5: Jacobians
# ============================================================================


class TestJacobians:
    """Test numerical and exact Jacobians"""

    def test_numerical_jacobian_nonlinear(self):
        field = lambda x, y, t: (x * y, x**2)
        J = numerical_jacobian(field, 1.0, 2.0)
        assert_allclose(J, [[2.0, 1.0], [2.0, 0.0]], atol=1e-6)

    def test_numerical_jacobian_matches_linear(self):
        field = LinearVectorField(1.0, -2.0, 0.5, 3.0)
        J = numerical_jacobian(lambda x, y, t: field(x, y, t), 4.0, -7.0)
        assert_allclose(J, field.matrix, atol=1e-6)

    def test_jacobian_at_uses_exact_when_available(self):
        class CountingField:
            calls = 0

            def __call__(self, x, y, t=0.0):
                CountingField.calls += 1
                return (x, y)

            def jacobian(self, x, y, t=0.0):
                return np.eye(2)

        field = CountingField()
        J = jacobian_at(field, 1.0, 1.0)
        assert_allclose(J, np.eye(2))
        assert CountingField.calls == 0

    def test_jacobian_at_plain_callable(self):
        J = jacobian_at(lambda x, y, t: (y, -x), 0.3, 0.4)
        assert_allclose(J, [[0.0, 1.0], [-1.0, 0.0]], atol=1e-6)


class TestTimeIndependent:
    """Test the autonomous-field adapter"""

    def test_ignores_time(self):
        field = time_independent(lambda x, y: (y, -x))
        assert field(1.0, 2.0, 100.0) == (2.0, -1.0)
        assert field(1.0, 2.0) == (2.0, -1.0)
