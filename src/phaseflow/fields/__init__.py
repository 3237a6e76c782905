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
Vector fields: linear, symbolic and plain-callable planar dynamics.
"""

from .symbolic_fields import SymbolicVectorField, parse_expression
from .vector_fields import (
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

__all__ = [
    "EquilibriumType",
    "LinearVectorField",
    "SymbolicVectorField",
    "as_vector_field",
    "classify_linear",
    "evaluate_field",
    "is_rotation_dominated",
    "jacobian_at",
    "numerical_jacobian",
    "parse_expression",
    "time_independent",
]
