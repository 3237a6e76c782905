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
Unit tests for trajectory result types.

Tests cover:
1. TerminationReason values
2. TrajectoryQuality severity ordering and worst()
"""

import pytest

from phaseflow.types.trajectories import TerminationReason, TrajectoryQuality


class TestTerminationReason:
    """Test TerminationReason enumeration"""

    def test_values(self):
        assert TerminationReason.MAX_STEPS.value == "max_steps"
        assert TerminationReason.OUT_OF_BOUNDS.value == "out_of_bounds"
        assert TerminationReason.NON_FINITE.value == "non_finite"
        assert TerminationReason.CONVERGED.value == "converged"

    def test_members_distinct(self):
        assert len(set(TerminationReason)) == 4


class TestTrajectoryQuality:
    """Test TrajectoryQuality flags"""

    def test_severity_ordering(self):
        assert TrajectoryQuality.OK.severity < TrajectoryQuality.DEGRADED.severity
        assert TrajectoryQuality.DEGRADED.severity < TrajectoryQuality.TRUNCATED.severity

    @pytest.mark.parametrize(
        "qualities, expected",
        [
            ((TrajectoryQuality.OK, TrajectoryQuality.OK), TrajectoryQuality.OK),
            ((TrajectoryQuality.OK, TrajectoryQuality.DEGRADED), TrajectoryQuality.DEGRADED),
            ((TrajectoryQuality.TRUNCATED, TrajectoryQuality.DEGRADED), TrajectoryQuality.TRUNCATED),
            ((TrajectoryQuality.DEGRADED,), TrajectoryQuality.DEGRADED),
        ],
    )
    def test_worst(self, qualities, expected):
        assert TrajectoryQuality.worst(*qualities) is expected

    def test_worst_is_not_a_member(self):
        assert len(list(TrajectoryQuality)) == 3
