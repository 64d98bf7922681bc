"""
Quaternion helpers for axis calibration.

All quaternions are numpy arrays in [w, x, y, z] order (scalar first).
Scipy expects [x, y, z, w], so conversions go through q[[1, 2, 3, 0]].

Frames:
- Sensor frame: right-handed, as reported by the phone gyroscope attitude.
- Consumer frame: left-handed, as used by the renderer (Z mirrored).
"""

from typing import Tuple
import numpy as np
from scipy.spatial.transform import Rotation as R

IDENTITY = np.array([1.0, 0.0, 0.0, 0.0])

# Below this norm a vector has no usable direction
NORM_EPSILON = 1e-5


def swap_handedness(q: np.ndarray) -> np.ndarray:
    """
    Mirrors a rotation between the sensor (right-handed) and consumer
    (left-handed) frames by flipping the Z axis.

    [w, x, y, z] -> [-w, x, y, -z]. Applying it twice returns the input.
    Works on a single quaternion or an N x 4 array.
    """
    q = np.asarray(q, dtype=float)
    return q * np.array([-1.0, 1.0, 1.0, -1.0])


def quat_multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Hamilton product a * b (b applied first, then a)."""
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array([
        aw*bw - ax*bx - ay*by - az*bz,
        aw*bx + ax*bw + ay*bz - az*by,
        aw*by - ax*bz + ay*bw + az*bx,
        aw*bz + ax*by - ay*bx + az*bw
    ])


def quat_inverse(q: np.ndarray) -> np.ndarray:
    q = np.asarray(q, dtype=float)
    norm_sq = np.dot(q, q)
    conj = q * np.array([1.0, -1.0, -1.0, -1.0])
    if norm_sq < NORM_EPSILON ** 2:
        return conj
    return conj / norm_sq


def normalize_quaternion(q: np.ndarray) -> np.ndarray:
    """Unit quaternion in the same direction; identity if q is ~zero."""
    q = np.asarray(q, dtype=float)
    norm = np.linalg.norm(q)
    if norm < NORM_EPSILON:
        return IDENTITY.copy()
    return q / norm


def normalize_vector(v: np.ndarray) -> np.ndarray:
    """Unit vector in the same direction; zero vector if v is ~zero."""
    v = np.asarray(v, dtype=float)
    norm = np.linalg.norm(v)
    if norm < NORM_EPSILON:
        return np.zeros(3)
    return v / norm


def relative_rotation(from_q: np.ndarray, to_q: np.ndarray) -> np.ndarray:
    """
    Rotation that takes from_q to to_q: inverse(from_q) * to_q.

    Both inputs must be expressed in the same frame (use the converted,
    consumer-frame poses).
    """
    return quat_multiply(quat_inverse(from_q), np.asarray(to_q, dtype=float))


def project_on_basis_axis(axis: np.ndarray, tolerance: float) -> Tuple[np.ndarray, bool]:
    """
    Snaps a direction onto a cardinal axis if it is close enough to one.

    Axes are tested in the fixed order X, Y, Z. Axis a wins when
    a^2 * tolerance > (sum of squares of the other two components).
    The winning component keeps its sign, the others become zero; the
    result is not re-normalized.

    Args:
        axis: direction vector (x, y, z), normally unit length
        tolerance: strictness in (0, 1); lower means stricter

    Returns:
        (vector, projected). When no axis qualifies the input is returned
        unchanged with projected=False.
    """
    axis = np.asarray(axis, dtype=float)
    x, y, z = axis
    x2, y2, z2 = x * x, y * y, z * z

    if x2 * tolerance > y2 + z2:
        return np.array([x, 0.0, 0.0]), True
    if y2 * tolerance > x2 + z2:
        return np.array([0.0, y, 0.0]), True
    if z2 * tolerance > x2 + y2:
        return np.array([0.0, 0.0, z]), True

    return axis.copy(), False


def basis_to_quaternion(xaxis: np.ndarray, yaxis: np.ndarray, zaxis: np.ndarray) -> np.ndarray:
    """
    Quaternion [w, x, y, z] of the rotation matrix whose ROWS are the given axes.

    Orthonormality is not checked. Degenerate bases (zero rows, reflections)
    still produce a unit quaternion instead of raising, since failed
    calibrations keep their correction for diagnostics.
    """
    m = np.array([xaxis, yaxis, zaxis], dtype=float)
    m00, m01, m02 = m[0]
    m10, m11, m12 = m[1]
    m20, m21, m22 = m[2]
    trace = m00 + m11 + m22

    # Shepperd's method: pivot on the largest diagonal term
    if trace > 0:
        s = np.sqrt(trace + 1.0) * 2
        q = [0.25 * s, (m21 - m12) / s, (m02 - m20) / s, (m10 - m01) / s]
    elif m00 > m11 and m00 > m22:
        s = np.sqrt(max(1.0 + m00 - m11 - m22, 0.0)) * 2
        if s < NORM_EPSILON:
            return IDENTITY.copy()
        q = [(m21 - m12) / s, 0.25 * s, (m01 + m10) / s, (m02 + m20) / s]
    elif m11 > m22:
        s = np.sqrt(max(1.0 + m11 - m00 - m22, 0.0)) * 2
        if s < NORM_EPSILON:
            return IDENTITY.copy()
        q = [(m02 - m20) / s, (m01 + m10) / s, 0.25 * s, (m12 + m21) / s]
    else:
        s = np.sqrt(max(1.0 + m22 - m00 - m11, 0.0)) * 2
        if s < NORM_EPSILON:
            return IDENTITY.copy()
        q = [(m10 - m01) / s, (m02 + m20) / s, (m12 + m21) / s, 0.25 * s]

    return normalize_quaternion(np.array(q))


def to_scipy(q: np.ndarray) -> R:
    """[w, x, y, z] -> scipy Rotation."""
    q = np.asarray(q, dtype=float)
    return R.from_quat(q[..., [1, 2, 3, 0]])


def from_scipy(r: R) -> np.ndarray:
    """scipy Rotation -> [w, x, y, z] (N x 4 for stacked rotations)."""
    return r.as_quat()[..., [3, 0, 1, 2]]


def sign(value: float) -> float:
    """Sign with sign(0) = +1, so a zero scalar part never wipes an axis."""
    return 1.0 if value >= 0.0 else -1.0


def quat_angle_degrees(q1: np.ndarray, q2: np.ndarray) -> float:
    """Angular distance between two orientations, ignoring quaternion sign."""
    # atan2 form stays accurate near zero, unlike arccos of the dot product
    delta = quat_multiply(quat_inverse(normalize_quaternion(q1)), normalize_quaternion(q2))
    return float(np.degrees(2 * np.arctan2(np.linalg.norm(delta[1:]), abs(delta[0]))))
