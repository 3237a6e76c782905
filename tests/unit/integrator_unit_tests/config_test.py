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
Unit tests for integration configuration.

Tests cover:
1. Defaults
2. Validation of every field (ValueError before stepping)
3. initial_step clamping with a warning
4. Copies with overrides
5. Bounds geometry and exit tests
"""

import math

import numpy as np
import pytest

from phaseflow.numerical_integration.config import Bounds, IntegrationConfig, resolve_config
from phaseflow.numerical_integration.step_heuristics import ConstantStepHeuristic


class TestDefaults:
    """Test default configuration"""

    def test_default_values(self):
        config = IntegrationConfig()
        assert config.max_steps == 2000
        assert config.min_step == 1e-4
        assert config.max_step == 0.1
        assert config.initial_step is None
        assert config.bounds == Bounds(-10, 10, -10, 10)
        assert config.convergence_tolerance == 1e-6
        assert config.convergence_window == 5
        assert config.method == "dopri5"
        assert config.step_heuristic is None

    def test_frozen(self):
        config = IntegrationConfig()
        with pytest.raises(AttributeError):
            config.max_steps = 10

    def test_method_normalized(self):
        assert IntegrationConfig(method="RK45").method == "dopri5"
        assert IntegrationConfig(method="classic_rk4").method == "rk4"


class TestValidation:
    """Test rejection of invalid configuration"""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"max_steps": 0},
            {"max_steps": -5},
            {"max_steps": 2.5},
            {"max_steps": True},
            {"min_step": 0.0},
            {"min_step": -1e-3},
            {"max_step": 0.0},
            {"max_step": math.inf},
            {"min_step": 0.5, "max_step": 0.1},
            {"initial_step": 0.0},
            {"initial_step": math.nan},
            {"convergence_tolerance": -1e-6},
            {"convergence_tolerance": math.nan},
            {"convergence_window": 1},
            {"rtol": 0.0},
            {"atol": -1.0},
            {"max_retries": -1},
            {"t0": math.inf},
            {"method": "euler"},
            {"bounds": (-1, 1, -1, 1)},
            {"step_heuristic": 0.01},
        ],
    )
    def test_invalid_value_raises(self, overrides):
        with pytest.raises(ValueError):
            IntegrationConfig(**overrides)

    def test_max_steps_message(self):
        with pytest.raises(ValueError, match="max_steps"):
            IntegrationConfig(max_steps=0)

    def test_zero_convergence_tolerance_allowed(self):
        assert IntegrationConfig(convergence_tolerance=0.0).convergence_tolerance == 0.0

    def test_equal_step_limits_allowed(self):
        config = IntegrationConfig(min_step=0.05, max_step=0.05)
        assert config.clamp_step(1.0) == 0.05

    def test_numpy_scalars_accepted(self):
        config = IntegrationConfig(max_steps=np.int64(10), max_step=np.float64(0.2))
        assert config.max_steps == 10


class TestInitialStep:
    """Test initial_step handling"""

    def test_in_range_kept(self):
        assert IntegrationConfig(initial_step=0.01).initial_step == 0.01

    def test_too_large_clamped_with_warning(self):
        with pytest.warns(UserWarning, match="initial_step"):
            config = IntegrationConfig(initial_step=1.0)
        assert config.initial_step == 0.1

    def test_too_small_clamped_with_warning(self):
        with pytest.warns(UserWarning):
            config = IntegrationConfig(initial_step=1e-8)
        assert config.initial_step == 1e-4


class TestOverrides:
    """Test with_overrides and resolve_config"""

    def test_with_overrides_copies(self):
        base = IntegrationConfig()
        tighter = base.with_overrides(rtol=1e-9, max_steps=10)
        assert tighter.rtol == 1e-9
        assert tighter.max_steps == 10
        assert base.rtol == 1e-6
        assert base.max_steps == 2000

    def test_with_overrides_validates(self):
        with pytest.raises(ValueError):
            IntegrationConfig().with_overrides(max_steps=0)

    def test_unknown_override_rejected(self):
        with pytest.raises(ValueError, match="Unknown configuration options"):
            IntegrationConfig().with_overrides(max_step_count=10)

    def test_resolve_defaults(self):
        assert resolve_config() == IntegrationConfig()

    def test_resolve_with_options(self):
        config = resolve_config(IntegrationConfig(method="rk4"), max_steps=7)
        assert config.method == "rk4"
        assert config.max_steps == 7

    def test_resolve_rejects_other_types(self):
        with pytest.raises(ValueError, match="IntegrationConfig"):
            resolve_config({"max_steps": 10})

    def test_heuristic_kept(self):
        heuristic = ConstantStepHeuristic(0.02)
        assert IntegrationConfig(step_heuristic=heuristic).step_heuristic is heuristic


class TestClampStep:
    """Test step clamping"""

    @pytest.mark.parametrize(
        "h, expected",
        [(0.05, 0.05), (1.0, 0.1), (1e-9, 1e-4), (math.nan, 0.1), (math.inf, 0.1)],
    )
    def test_clamp(self, h, expected):
        assert IntegrationConfig().clamp_step(h) == expected


class TestBounds:
    """Test the viewport rectangle"""

    def test_geometry(self):
        bounds = Bounds(-1, 2, 0, 4)
        assert bounds.width == 3
        assert bounds.height == 4
        assert bounds.diagonal == pytest.approx(5.0)

    def test_from_limits(self):
        assert Bounds.from_limits((-2, 2), (-1, 1)) == Bounds(-2, 2, -1, 1)

    @pytest.mark.parametrize(
        "limits",
        [(1, -1, -1, 1), (-1, 1, 1, 1), (-math.inf, 1, -1, 1), (math.nan, 1, -1, 1)],
    )
    def test_invalid_bounds(self, limits):
        with pytest.raises(ValueError):
            Bounds(*limits)

    @pytest.mark.parametrize(
        "point, exits",
        [
            ((0.0, 0.0), False),
            ((10.0, -10.0), False),  # on the edge
            ((10.000001, 0.0), True),
            ((0.0, -11.0), True),
            ((math.inf, 0.0), True),
            ((0.0, -math.inf), True),
            ((math.nan, 0.0), False),
        ],
    )
    def test_exits(self, point, exits):
        assert Bounds().exits(point) is exits

    def test_contains(self):
        bounds = Bounds()
        assert bounds.contains((10.0, 0.0))
        assert not bounds.contains((10.5, 0.0))
        assert not bounds.contains((math.nan, 0.0))
