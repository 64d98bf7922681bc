import sys
import os
import unittest
import numpy as np
from scipy.spatial.transform import Rotation as R

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from attitude.rotations import (
    IDENTITY,
    basis_to_quaternion,
    normalize_quaternion,
    normalize_vector,
    project_on_basis_axis,
    quat_angle_degrees,
    quat_inverse,
    quat_multiply,
    relative_rotation,
    sign,
    swap_handedness,
    to_scipy,
    from_scipy,
)


class TestSwapHandedness(unittest.TestCase):
    def test_swap_is_its_own_inverse(self):
        rng = np.random.default_rng(7)
        for _ in range(50):
            q = normalize_quaternion(rng.normal(size=4))
            np.testing.assert_allclose(swap_handedness(swap_handedness(q)), q, atol=1e-12)

    def test_swap_mirrors_z(self):
        q = np.array([0.5, 0.1, 0.2, 0.3])
        np.testing.assert_allclose(swap_handedness(q), [-0.5, 0.1, 0.2, -0.3])

    def test_swap_identity(self):
        np.testing.assert_allclose(swap_handedness(IDENTITY), [-1.0, 0.0, 0.0, 0.0])

    def test_swap_trajectory(self):
        quats = np.array([[1.0, 0.0, 0.0, 0.0], [0.0, 0.0, 0.0, 1.0]])
        np.testing.assert_allclose(swap_handedness(quats), [[-1.0, 0, 0, 0], [0, 0, 0, -1.0]])


class TestQuaternionAlgebra(unittest.TestCase):
    def test_multiply_matches_scipy(self):
        a = from_scipy(R.from_euler('xyz', [10, 20, 30], degrees=True))
        b = from_scipy(R.from_euler('xyz', [-40, 5, 70], degrees=True))
        expected = from_scipy(to_scipy(a) * to_scipy(b))
        self.assertLess(quat_angle_degrees(quat_multiply(a, b), expected), 1e-6)

    def test_inverse(self):
        q = normalize_quaternion(np.array([0.3, -0.2, 0.8, 0.1]))
        np.testing.assert_allclose(quat_multiply(q, quat_inverse(q)), IDENTITY, atol=1e-12)

    def test_inverse_of_unnormalized(self):
        q = np.array([2.0, 0.0, 0.0, 0.0])
        np.testing.assert_allclose(quat_inverse(q), [0.5, 0.0, 0.0, 0.0])

    def test_relative_rotation(self):
        a = from_scipy(R.from_euler('z', 30, degrees=True))
        b = from_scipy(R.from_euler('z', 75, degrees=True))
        rel = relative_rotation(a, b)
        # a * rel == b
        np.testing.assert_allclose(quat_multiply(a, rel), b, atol=1e-12)
        self.assertAlmostEqual(np.degrees(to_scipy(rel).magnitude()), 45.0, places=6)

    def test_normalize_zero(self):
        np.testing.assert_allclose(normalize_quaternion(np.zeros(4)), IDENTITY)
        np.testing.assert_allclose(normalize_vector(np.zeros(3)), np.zeros(3))
        np.testing.assert_allclose(normalize_vector(np.array([0.0, 3.0, 4.0])), [0.0, 0.6, 0.8])

    def test_sign_of_zero_is_positive(self):
        self.assertEqual(sign(0.0), 1.0)
        self.assertEqual(sign(-0.1), -1.0)
        self.assertEqual(sign(2.0), 1.0)


class TestAxisProjection(unittest.TestCase):
    def test_aligned_axes_are_unchanged(self):
        for axis in ([1, 0, 0], [0, -1, 0], [0, 0, 1], [-1, 0, 0]):
            projected, ok = project_on_basis_axis(np.array(axis, dtype=float), 0.4)
            self.assertTrue(ok)
            np.testing.assert_array_equal(projected, axis)

    def test_keeps_signed_component_without_normalizing(self):
        projected, ok = project_on_basis_axis(np.array([0.1, -0.9, 0.2]), 0.4)
        self.assertTrue(ok)
        np.testing.assert_allclose(projected, [0.0, -0.9, 0.0])

    def test_rejects_ambiguous_axis(self):
        a = np.radians(50)
        v = np.array([np.cos(a), np.sin(a), 0.0])
        projected, ok = project_on_basis_axis(v, 0.4)
        self.assertFalse(ok)
        np.testing.assert_array_equal(projected, v)

    def test_threshold_is_strict(self):
        # 4 * 0.5 == 1 + 1: exactly on the boundary is not enough
        v = np.array([2.0, 1.0, 1.0])
        projected, ok = project_on_basis_axis(v, 0.5)
        self.assertFalse(ok)
        np.testing.assert_array_equal(projected, v)

    def test_tolerance_controls_strictness(self):
        a = np.radians(30)
        v = np.array([np.cos(a), 0.0, np.sin(a)])
        self.assertTrue(project_on_basis_axis(v, 0.4)[1])
        self.assertFalse(project_on_basis_axis(v, 0.2)[1])

    def test_priority_x_then_y_then_z(self):
        # Only tolerances >= 1 let two axes qualify at once
        v = np.array([1.0, 1.0, 0.0]) / np.sqrt(2)
        projected, ok = project_on_basis_axis(v, 3.0)
        self.assertTrue(ok)
        np.testing.assert_allclose(projected, [v[0], 0.0, 0.0])

        v = np.array([0.0, 1.0, 1.0]) / np.sqrt(2)
        projected, ok = project_on_basis_axis(v, 3.0)
        self.assertTrue(ok)
        np.testing.assert_allclose(projected, [0.0, v[1], 0.0])

    def test_zero_vector_fails(self):
        projected, ok = project_on_basis_axis(np.zeros(3), 0.4)
        self.assertFalse(ok)
        np.testing.assert_array_equal(projected, np.zeros(3))


class TestBasisToQuaternion(unittest.TestCase):
    def test_identity_basis(self):
        q = basis_to_quaternion([1, 0, 0], [0, 1, 0], [0, 0, 1])
        np.testing.assert_allclose(q, IDENTITY, atol=1e-12)

    def test_matches_scipy_for_rotations(self):
        for euler in ([10, 20, 30], [170, -80, 45], [0, 0, 180], [180, 0, 0], [90, 90, 0]):
            m = R.from_euler('xyz', euler, degrees=True).as_matrix()
            q = basis_to_quaternion(m[0], m[1], m[2])
            expected = from_scipy(R.from_matrix(m))
            self.assertLess(quat_angle_degrees(q, expected), 1e-5, msg=f"euler={euler}")
            self.assertAlmostEqual(np.linalg.norm(q), 1.0, places=12)

    def test_rows_not_columns(self):
        # Rows x=(0,1,0), y=(0,0,1), z=(1,0,0): the matrix sends e_y to e_x
        q = basis_to_quaternion([0, 1, 0], [0, 0, 1], [1, 0, 0])
        np.testing.assert_allclose(to_scipy(q).apply([0.0, 1.0, 0.0]), [1.0, 0.0, 0.0], atol=1e-12)

    def test_degenerate_basis_does_not_raise(self):
        q = basis_to_quaternion([1, 0, 0], [0, 0, 0], [1, 0, 0])
        self.assertAlmostEqual(np.linalg.norm(q), 1.0, places=12)
        q = basis_to_quaternion(np.zeros(3), np.zeros(3), np.zeros(3))
        self.assertAlmostEqual(np.linalg.norm(q), 1.0, places=12)


if __name__ == '__main__':
    unittest.main()
