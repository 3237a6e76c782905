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
Phase Portrait Plotter - Phase Plane Visualization

Interactive Plotly-based rendering of integrated trajectories.

Key Features
------------
- Trajectories: one line per seed, dashed when truncated or degraded
- Direction field: normalized arrows on a grid over the viewport
- Equilibrium markers
- Direction arrows along each trajectory
- One-call linear portraits: seeds → trajectories → figure

Main Class
----------
PhasePortraitPlotter : Phase plane visualization
    plot_trajectories() : Draw integrated trajectories
    plot_linear_portrait() : Integrate and draw a linear system

Usage
-----
>>> from phaseflow import LinearVectorField, integrate_seeds
>>> from phaseflow.visualization import PhasePortraitPlotter
>>>
>>> field = LinearVectorField(-1, 2, -2, -1)
>>> trajectories = integrate_seeds(field, [(1, 1), (-1, 2)])
>>> fig = PhasePortraitPlotter().plot_trajectories(
...     trajectories, field=field, equilibria=[np.zeros(2)]
... )
>>> fig.show()
"""

import warnings
from typing import List, Optional, Sequence, Tuple

import numpy as np
import plotly.graph_objects as go

from phaseflow.fields.vector_fields import LinearVectorField, evaluate_field
from phaseflow.numerical_integration.config import Bounds, IntegrationConfig, resolve_config
from phaseflow.numerical_integration.trajectory_integrator import integrate_seeds
from phaseflow.types.core import ArrayLike, VectorFieldFunction
from phaseflow.types.trajectories import TrajectoryQuality

PLOTLY_COLORS = [
    "#636EFA",
    "#EF553B",
    "#00CC96",
    "#AB63FA",
    "#FFA15A",
    "#19D3F3",
    "#FF6692",
    "#B6E880",
    "#FF97FF",
    "#FECB52",
]


class PhasePortraitPlotter:
    """
    Phase plane visualization for planar vector fields.

    Accepts anything trajectory-like: Trajectory and BidirectionalTrajectory
    dictionaries, or plain (T, 2) arrays.

    Examples
    --------
    >>> plotter = PhasePortraitPlotter()
    >>> fig = plotter.plot_trajectories([traj], field=field, bounds=Bounds(-2, 2, -2, 2))
    """

    def __init__(self, width: int = 700, height: int = 600):
        self.width = width
        self.height = height

    # =========================================================================
    # Main Plotting Methods
    # =========================================================================

    def plot_trajectories(
        self,
        trajectories: Sequence,
        field: Optional[VectorFieldFunction] = None,
        bounds: Optional[Bounds] = None,
        equilibria: Optional[List[np.ndarray]] = None,
        state_names: Tuple[str, str] = ("x", "y"),
        show_direction: bool = True,
        show_start: bool = True,
        grid_density: int = 15,
        title: str = "Phase Portrait",
    ) -> go.Figure:
        """
        Draw trajectories in the phase plane.

        Parameters
        ----------
        trajectories : Sequence
            Trajectory dicts (unidirectional or bidirectional) or (T, 2) arrays
        field : Optional[VectorFieldFunction]
            If provided, overlays a normalized direction field
        bounds : Optional[Bounds]
            Axis ranges and direction-field grid; defaults to the extent of
            the trajectories
        equilibria : Optional[List[np.ndarray]]
            Points to mark, each shape (2,)
        state_names : Tuple[str, str]
            Axis titles
        show_direction : bool
            Add arrows along each trajectory
        show_start : bool
            Mark each seed (or first point)
        grid_density : int
            Arrows per axis in the direction field
        title : str
            Plot title

        Returns
        -------
        go.Figure

        Notes
        -----
        - Trajectories whose quality is not OK are drawn dashed
        - Seeds of bidirectional trajectories are taken at ``seed_index``
        """
        paths = [self._as_path(item) for item in trajectories]
        if bounds is None:
            bounds = self._bounds_from_paths(paths)

        colors = self._get_colors(len(paths))
        fig = go.Figure()

        if field is not None:
            self._add_vector_field_2d(fig, field, bounds, grid_density=grid_density)

        if equilibria:
            self._add_equilibria_markers(fig, equilibria)

        for idx, (points, seed_index, quality) in enumerate(paths):
            dashed = quality is not None and quality is not TrajectoryQuality.OK
            fig.add_trace(
                go.Scatter(
                    x=points[:, 0],
                    y=points[:, 1],
                    mode="lines",
                    name=f"Trajectory {idx + 1}" + (f" ({quality.value})" if dashed else ""),
                    line=dict(color=colors[idx], width=2, dash="dash" if dashed else "solid"),
                    showlegend=True,
                )
            )

            if show_start:
                fig.add_trace(
                    go.Scatter(
                        x=[points[seed_index, 0]],
                        y=[points[seed_index, 1]],
                        mode="markers",
                        name="Seed" if idx == 0 else None,
                        marker=dict(color=colors[idx], size=9, symbol="circle"),
                        showlegend=(idx == 0),
                    )
                )

            if show_direction and len(points) > 10:
                self._add_direction_arrows_2d(fig, points, colors[idx], n_arrows=5)

        fig.update_layout(
            title=title,
            xaxis_title=state_names[0],
            yaxis_title=state_names[1],
            template="plotly_white",
            width=self.width,
            height=self.height,
            showlegend=True,
        )
        fig.update_xaxes(range=[bounds.xmin, bounds.xmax])
        fig.update_yaxes(range=[bounds.ymin, bounds.ymax], scaleanchor="x", scaleratio=1)

        return fig

    def plot_linear_portrait(
        self,
        field: LinearVectorField,
        seeds: Sequence[ArrayLike],
        config: Optional[IntegrationConfig] = None,
        title: Optional[str] = None,
        **kwargs,
    ) -> go.Figure:
        """
        Integrate seeds of a linear system and draw its portrait.

        The origin is marked as the equilibrium and the title names its
        type (saddle, spiral, ...).

        Examples
        --------
        >>> fig = plotter.plot_linear_portrait(
        ...     LinearVectorField(1, 0, 0, -1),
        ...     seeds=[(1, 1), (-1, 1), (1, -1), (-1, -1)],
        ... )
        """
        config = resolve_config(config)
        trajectories = integrate_seeds(field, seeds, config=config, bidirectional=True)
        kind = field.classify().value.replace("_", " ")
        if title is None:
            title = f"dx/dt = {field.a:g}x + {field.b:g}y, dy/dt = {field.c:g}x + {field.d:g}y ({kind})"
        return self.plot_trajectories(
            trajectories,
            field=field,
            bounds=config.bounds,
            equilibria=[np.zeros(2)],
            title=title,
            **kwargs,
        )

    # =========================================================================
    # Helper Methods (Internal)
    # =========================================================================

    def _as_path(self, item) -> Tuple[np.ndarray, int, Optional[TrajectoryQuality]]:
        """Extract (points, seed index, quality) from a trajectory-like item."""
        if isinstance(item, dict):
            points = np.asarray(item["x"], dtype=float)
            return points, int(item.get("seed_index", 0)), item.get("quality")

        points = np.asarray(item, dtype=float)
        if points.ndim != 2 or points.shape[1] != 2:
            raise ValueError(f"Trajectory arrays must have shape (T, 2), got {points.shape}")
        return points, 0, None

    def _bounds_from_paths(self, paths) -> Bounds:
        if not paths:
            return Bounds()
        stacked = np.concatenate([points for points, _, _ in paths], axis=0)
        lo = stacked.min(axis=0)
        hi = stacked.max(axis=0)
        pad = np.maximum(0.1 * (hi - lo), 1e-3)
        return Bounds(lo[0] - pad[0], hi[0] + pad[0], lo[1] - pad[1], hi[1] + pad[1])

    def _get_colors(self, n_colors: int) -> List[str]:
        return [PLOTLY_COLORS[i % len(PLOTLY_COLORS)] for i in range(n_colors)]

    def _add_vector_field_2d(
        self,
        fig: go.Figure,
        field: VectorFieldFunction,
        bounds: Bounds,
        grid_density: int = 15,
    ) -> None:
        """
        Add a normalized direction field on a grid over the bounds.

        Grid points where the field is zero or non-finite get no arrow.
        """
        scale = 0.03 * min(bounds.width, bounds.height)
        skipped = 0

        for x1 in np.linspace(bounds.xmin, bounds.xmax, grid_density):
            for x2 in np.linspace(bounds.ymin, bounds.ymax, grid_density):
                dx1, dx2 = evaluate_field(field, np.array([x1, x2]), 0.0)
                mag = np.hypot(dx1, dx2)
                if not np.isfinite(mag):
                    skipped += 1
                    continue
                if mag <= 1e-10:
                    continue

                fig.add_annotation(
                    x=x1 + dx1 / mag * scale,
                    y=x2 + dx2 / mag * scale,
                    ax=x1,
                    ay=x2,
                    xref="x",
                    yref="y",
                    axref="x",
                    ayref="y",
                    showarrow=True,
                    arrowhead=2,
                    arrowsize=1,
                    arrowwidth=1,
                    arrowcolor="rgba(128, 128, 128, 0.4)",
                )

        if skipped:
            warnings.warn(
                f"Vector field was non-finite at {skipped} grid point(s); no arrows drawn there",
                UserWarning,
            )

    def _add_equilibria_markers(self, fig: go.Figure, equilibria: List[np.ndarray]) -> None:
        x_eq = [float(eq[0]) for eq in equilibria]
        y_eq = [float(eq[1]) for eq in equilibria]

        fig.add_trace(
            go.Scatter(
                x=x_eq,
                y=y_eq,
                mode="markers",
                name="Equilibria",
                marker=dict(
                    color="black",
                    size=12,
                    symbol="x",
                    line=dict(color="black", width=2),
                ),
                showlegend=True,
            )
        )

    def _add_direction_arrows_2d(
        self, fig: go.Figure, points: np.ndarray, color: str, n_arrows: int = 5
    ) -> None:
        T = points.shape[0]
        indices = np.linspace(0, T - 2, n_arrows, dtype=int)

        for idx in indices:
            x1_start, x2_start = points[idx]
            x1_end, x2_end = points[idx + 1]

            fig.add_annotation(
                x=x1_end,
                y=x2_end,
                ax=x1_start,
                ay=x2_start,
                xref="x",
                yref="y",
                axref="x",
                ayref="y",
                showarrow=True,
                arrowhead=2,
                arrowsize=1.5,
                arrowwidth=2,
                arrowcolor=color,
            )


__all__ = [
    "PhasePortraitPlotter",
    "PLOTLY_COLORS",
]
