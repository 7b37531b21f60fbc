"""Plotly chart builders for the Exam Seat Allocation console."""

import plotly.express as px
import plotly.graph_objects as go
import pandas as pd
from typing import Dict, List

from config.defaults import UNASSIGNED_GROUP

CLASS_PALETTE = px.colors.qualitative.Set3


def seat_grid_heatmap(
    grid: List[List[dict]],
    hall_name: str,
    conflict_positions: List[tuple] = None,
) -> go.Figure:
    """Seat map of one hall, colored by class group. Row 1 (front) is drawn at the top."""
    conflict_set = set(conflict_positions or [])

    classes = []
    for row in grid:
        for cell in row:
            key = cell["class_group"] or (UNASSIGNED_GROUP if cell["student_id"] else None)
            if key and key not in classes:
                classes.append(key)
    code_of = {c: i + 1 for i, c in enumerate(classes)}

    z, text, hover = [], [], []
    for row in grid:
        z_row, text_row, hover_row = [], [], []
        for cell in row:
            key = cell["class_group"] or (UNASSIGNED_GROUP if cell["student_id"] else None)
            z_row.append(code_of.get(key, 0))
            marker = " ⚠" if (cell["row"], cell["column"]) in conflict_set else ""
            text_row.append(f"{cell['seat_number']}{marker}")
            hover_row.append(
                f"Seat {cell['seat_number']} (R{cell['row']}, C{cell['column']})<br>"
                f"Student: {cell['student_id'] or 'empty'}<br>Class: {key or '—'}"
            )
        z.append(z_row)
        text.append(text_row)
        hover.append(hover_row)

    # Discrete colorscale: 0 = empty seat, then one band per class
    n = len(classes) + 1
    colorscale = []
    for i in range(n):
        color = "#EEEEEE" if i == 0 else CLASS_PALETTE[(i - 1) % len(CLASS_PALETTE)]
        colorscale.append([i / n, color])
        colorscale.append([(i + 1) / n, color])

    fig = go.Figure(data=go.Heatmap(
        z=z,
        x=[f"C{c}" for c in range(1, len(grid[0]) + 1)] if grid else [],
        y=[f"R{r}" for r in range(1, len(grid) + 1)],
        text=text,
        texttemplate="%{text}",
        customdata=hover,
        hovertemplate="%{customdata}<extra></extra>",
        colorscale=colorscale,
        zmin=0,
        zmax=n,
        showscale=False,
        xgap=2,
        ygap=2,
    ))
    fig.update_layout(
        title=f"Seat Map — {hall_name}",
        yaxis_autorange="reversed",
        height=max(300, len(grid) * 45),
    )
    return fig


def class_distribution_bar(distribution: Dict[str, int], title: str = "Students per Class Group") -> go.Figure:
    df = pd.DataFrame(
        [{"class_group": k, "students": v} for k, v in distribution.items()]
    )
    fig = px.bar(
        df, x="class_group", y="students",
        labels={"class_group": "Class Group", "students": "Students"},
        title=title,
        color="class_group",
        color_discrete_sequence=CLASS_PALETTE,
    )
    fig.update_layout(showlegend=False, height=350)
    return fig


def utilization_donut(used: int, total: int, title: str = "Seat Utilization") -> go.Figure:
    """Donut chart showing seats used across active halls."""
    available = total - used
    fig = go.Figure(data=[go.Pie(
        labels=["Used", "Available"],
        values=[used, available],
        hole=0.6,
        marker_colors=["#E8734A", "#4A90D9"],
        textinfo="percent+label",
    )])
    fig.update_layout(
        title=title,
        height=350,
        showlegend=True,
        annotations=[dict(text=f"{used}/{total}", x=0.5, y=0.5, font_size=16, showarrow=False)],
    )
    return fig


def hall_utilization_bar(utilization_data: List[dict]) -> go.Figure:
    """Horizontal bars of seat utilization per hall."""
    df = pd.DataFrame(utilization_data)
    fig = px.bar(
        df, x="utilization_pct", y="hall_name",
        orientation="h",
        title="Hall Utilization",
        labels={"utilization_pct": "Utilization %", "hall_name": "Hall"},
        color="utilization_pct",
        color_continuous_scale=["#4A90D9", "#F5C542", "#E8734A"],
        range_color=[0, 1],
    )
    fig.update_layout(height=max(300, len(df) * 40), yaxis_type="category")
    fig.update_traces(texttemplate="%{x:.0%}", textposition="auto")
    return fig
