"""
Tests for the quaternion angular error metric.
"""

import os
import sys
import unittest

import numpy as np

sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from attitude import (  # type: ignore
    angular_error_degrees,
    quaternion_multiply,
    relative_rotation,
    rotation_angle_degrees,
)


def axis_angle_quaternion(axis, angle_deg):
    axis = np.asarray(axis, dtype=np.float64)
    axis = axis / np.linalg.norm(axis)
    half = np.radians(angle_deg) / 2.0
    return np.concatenate([axis * np.sin(half), [np.cos(half)]])


class TestAngularError(unittest.TestCase):
    """Test cases for angular_error_degrees."""

    def setUp(self):
        rng = np.random.default_rng(7)
        raw = rng.normal(size=(25, 4))
        self.random_quats = raw / np.linalg.norm(raw, axis=1, keepdims=True)
        self.identity = np.array([0.0, 0.0, 0.0, 1.0])

    def test_same_orientation_is_zero(self):
        for q in self.random_quats:
            self.assertAlmostEqual(angular_error_degrees(q, q), 0.0, delta=1e-5)

    def test_double_cover_is_zero(self):
        """q and -q describe the same orientation."""
        for q in self.random_quats:
            self.assertAlmostEqual(angular_error_degrees(q, -q), 0.0, delta=1e-5)

    def test_quarter_turn_about_each_axis(self):
        for axis in ([1, 0, 0], [0, 1, 0], [0, 0, 1]):
            q = axis_angle_quaternion(axis, 90.0)
            self.assertAlmostEqual(angular_error_degrees(self.identity, q), 90.0, places=9)

    def test_half_turn_is_maximal(self):
        q = axis_angle_quaternion([0, 0, 1], 180.0)
        self.assertAlmostEqual(angular_error_degrees(self.identity, q), 180.0, places=6)

    def test_result_in_range_and_symmetric(self):
        for q1, q2 in zip(self.random_quats, self.random_quats[::-1]):
            error = angular_error_degrees(q1, q2)
            self.assertGreaterEqual(error, 0.0)
            self.assertLessEqual(error, 180.0)
            self.assertAlmostEqual(error, angular_error_degrees(q2, q1), places=9)

    def test_dot_product_above_one_is_clamped(self):
        """Rounding slack past |dot| = 1 must not produce NaN."""
        q1 = np.array([0.0, 0.0, 0.0, 1.0 + 1e-12])
        q2 = np.array([0.0, 0.0, 0.0, 1.0 + 1e-12])
        with np.errstate(invalid="ignore"):
            unclamped = np.degrees(np.arccos(2.0 * np.dot(q1, q2) ** 2 - 1.0))
        self.assertTrue(np.isnan(unclamped))

        error = angular_error_degrees(q1, q2)
        self.assertFalse(np.isnan(error))
        self.assertAlmostEqual(error, 0.0, places=9)

    def test_returns_python_float_for_single_pair(self):
        self.assertIsInstance(angular_error_degrees([0, 0, 0, 1], [0, 0, 0, 1]), float)

    def test_batch_rows(self):
        angles = [0.0, 30.0, 90.0, 135.0]
        q2 = np.array([axis_angle_quaternion([0, 1, 0], a) for a in angles])
        q1 = np.tile(self.identity, (len(angles), 1))
        errors = angular_error_degrees(q1, q2)
        self.assertEqual(errors.shape, (len(angles),))
        np.testing.assert_allclose(errors, angles, atol=1e-5)

    def test_single_against_batch_broadcasts(self):
        errors = angular_error_degrees(self.identity, self.random_quats)
        self.assertEqual(errors.shape, (len(self.random_quats),))

    def test_wrong_component_count_raises(self):
        with self.assertRaises(ValueError):
            angular_error_degrees([0, 0, 1], [0, 0, 0, 1])

    def test_inputs_are_not_normalized(self):
        """Non-unit inputs are a caller error; they are not silently fixed."""
        q = axis_angle_quaternion([0, 0, 1], 60.0)
        self.assertAlmostEqual(angular_error_degrees(self.identity, q), 60.0, places=6)
        self.assertNotAlmostEqual(angular_error_degrees(self.identity, 0.5 * q), 60.0, places=1)


class TestQuaternionHelpers(unittest.TestCase):
    """Cross-checks between the metric and the quaternion helpers."""

    def test_relative_rotation_angle_matches_metric(self):
        rng = np.random.default_rng(11)
        for _ in range(20):
            q1, q2 = rng.normal(size=(2, 4))
            q1 /= np.linalg.norm(q1)
            q2 /= np.linalg.norm(q2)
            q_err = relative_rotation(q1, q2)
            self.assertAlmostEqual(rotation_angle_degrees(q_err), angular_error_degrees(q1, q2), delta=1e-4)

    def test_composition_adds_angles_about_same_axis(self):
        qa = axis_angle_quaternion([1, 0, 0], 20.0)
        qb = axis_angle_quaternion([1, 0, 0], 25.0)
        np.testing.assert_allclose(quaternion_multiply(qa, qb), axis_angle_quaternion([1, 0, 0], 45.0), atol=1e-12)


if __name__ == "__main__":
    unittest.main()
