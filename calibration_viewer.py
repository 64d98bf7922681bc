"""
Plotly views of a calibration attempt.

- Device box rotated by the correction
- Candidate axes (dashed) against their projected cardinal axes (solid)
- Optional roll/pitch/yaw of a calibrated trajectory
"""

from typing import List, Optional
import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from attitude.rotations import to_scipy
from calibrators.calibration_data import CalibrationResult

AXIS_COLORS = {'X': 'red', 'Y': 'green', 'Z': 'blue'}

BOX_I = [7, 0, 0, 0, 4, 4, 6, 6, 4, 0, 3, 2]
BOX_J = [3, 4, 1, 2, 5, 6, 5, 2, 0, 1, 6, 3]
BOX_K = [0, 7, 2, 3, 6, 7, 1, 1, 5, 5, 7, 6]


def get_device_mesh(q: np.ndarray) -> List[go.Mesh3d]:
    """Device body and screen at orientation q (w, x, y, z)."""
    width, height, depth = 1.0, 2.0, 0.2
    x = np.array([-1, 1, 1, -1, -1, 1, 1, -1]) * (width / 2)
    y = np.array([-1, -1, 1, 1, -1, -1, 1, 1]) * (height / 2)
    z = np.array([1, 1, 1, 1, -1, -1, -1, -1]) * (depth / 2)
    r = to_scipy(q)
    verts_rot = r.apply(np.stack([x, y, z], axis=1))

    trace_body = go.Mesh3d(
        x=verts_rot[:, 0], y=verts_rot[:, 1], z=verts_rot[:, 2],
        i=BOX_I, j=BOX_J, k=BOX_K,
        color='#333333', name='Device Body', showscale=False,
        lighting=dict(ambient=0.6, diffuse=0.5, specular=0.2)
    )

    # Screen (Blue) - Offset slightly along the device normal
    offset = 0.02 * r.apply(np.array([0, 0, 1]))
    screen = verts_rot[[0, 1, 2, 3]] + offset
    trace_screen = go.Mesh3d(
        x=screen[:, 0], y=screen[:, 1], z=screen[:, 2],
        i=[0, 0], j=[1, 2], k=[2, 3],
        color='#00AAFF', opacity=0.9, name='Screen', showscale=False
    )
    return [trace_body, trace_screen]


def _axis_trace(vec: np.ndarray, color: str, name: str, dashed: bool = False,
                length: float = 1.5) -> go.Scatter3d:
    end = np.asarray(vec, dtype=float) * length
    return go.Scatter3d(
        x=[0, end[0]], y=[0, end[1]], z=[0, end[2]],
        mode='lines+text', name=name,
        line=dict(color=color, width=4 if dashed else 6, dash='dash' if dashed else 'solid'),
        text=['', name], textposition="top center"
    )


def get_axis_traces(result: CalibrationResult) -> List[go.Scatter3d]:
    traces = []
    for label, raw, projected in (('X', result.xaxis, result.projected_xaxis),
                                  ('Y', result.yaxis, result.projected_yaxis),
                                  ('Z', result.zaxis, result.projected_zaxis)):
        color = AXIS_COLORS[label]
        traces.append(_axis_trace(raw, color, f'{label} measured', dashed=True))
        traces.append(_axis_trace(projected, color, f'{label} projected'))
    return traces


def build_calibration_figure(result: CalibrationResult) -> go.Figure:
    fig = go.Figure(data=get_device_mesh(result.correction) + get_axis_traces(result))
    status = "OK" if result.success else "REJECTED"
    fig.update_layout(
        title=f"Axis calibration {status} "
              f"(x_projected={result.x_projected}, z_projected={result.z_projected}, "
              f"orthogonal={result.orthogonal})",
        scene=dict(
            xaxis=dict(range=[-2, 2]),
            yaxis=dict(range=[-2, 2]),
            zaxis=dict(range=[-2, 2]),
            aspectmode='cube',
            camera=dict(eye=dict(x=1.5, y=1.5, z=1.5))
        ),
        margin=dict(l=0, r=0, b=0, t=40),
    )
    return fig


def build_trajectory_figure(quats: np.ndarray, timestamps: Optional[np.ndarray] = None) -> go.Figure:
    """Roll/pitch/yaw (degrees) of an N x 4 trajectory."""
    quats = np.asarray(quats, dtype=float)
    if timestamps is None:
        timestamps = np.arange(len(quats))
    rpy = to_scipy(quats).as_euler('xyz', degrees=True)

    fig = make_subplots(rows=1, cols=1)
    for idx, (name, color) in enumerate((('Roll', 'red'), ('Pitch', 'green'), ('Yaw', 'blue'))):
        fig.add_trace(go.Scatter(x=timestamps, y=rpy[:, idx], line=dict(color=color), name=name))
    fig.update_layout(
        yaxis_title="Degrees", xaxis_title="Time (s)",
        yaxis=dict(range=[-200, 200]),
        hovermode="x unified"
    )
    return fig
