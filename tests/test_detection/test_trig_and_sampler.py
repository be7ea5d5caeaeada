import unittest

import numpy as np

from pupil_eval.detection.ellipse_sampler import ellipse_to_points, normalize_angle, round_half_away
from pupil_eval.detection.pupil_types import Pupil
from pupil_eval.detection.trig_table import SIN_TABLE, TABLE_SIZE, sincos


class TestSinTable(unittest.TestCase):
    def test_table_layout(self):
        self.assertEqual(TABLE_SIZE, 451)
        self.assertEqual(SIN_TABLE.shape, (451,))
        self.assertEqual(SIN_TABLE.dtype, np.float32)
        self.assertAlmostEqual(float(SIN_TABLE[90]), 1.0)
        self.assertAlmostEqual(float(SIN_TABLE[270]), -1.0)
        self.assertAlmostEqual(float(SIN_TABLE[450]), 1.0)

    def test_table_is_read_only(self):
        with self.assertRaises(ValueError):
            SIN_TABLE[0] = 1.0

    def test_sincos(self):
        cos, sin = sincos(0)
        self.assertAlmostEqual(cos, 1.0)
        self.assertAlmostEqual(sin, 0.0)

        cos, sin = sincos(60)
        self.assertAlmostEqual(cos, 0.5, places=6)
        self.assertAlmostEqual(sin, np.sqrt(3) / 2, places=6)

        # negative angles take one full turn
        cos, sin = sincos(-90)
        self.assertAlmostEqual(cos, 0.0, places=6)
        self.assertAlmostEqual(sin, -1.0, places=6)


class TestEllipseSampler(unittest.TestCase):
    def test_round_half_away(self):
        np.testing.assert_array_equal(
            round_half_away([0.5, 1.5, 2.5, -0.5, -2.5, 1.49]),
            [1.0, 2.0, 3.0, -1.0, -3.0, 1.0])

    def test_normalize_angle(self):
        self.assertEqual(normalize_angle(-30.7), 330)
        self.assertEqual(normalize_angle(390.2), 30)
        self.assertEqual(normalize_angle(360), 360)
        self.assertEqual(normalize_angle(-720), 0)

    def test_circle_points_on_radius(self):
        radius = 100
        pupil = Pupil(center=(0.0, 0.0), size=(2.0 * radius, 2.0 * radius), angle=0.0)
        points = ellipse_to_points(pupil, 1)

        self.assertEqual(points.shape, (360, 2))
        self.assertEqual(points.dtype, np.int32)

        dist = np.hypot(points[:, 0], points[:, 1])
        self.assertTrue(np.all(np.abs(dist - radius) <= 1.0))

        # closed but not repeated: last point is one step before the first
        first, last = points[0], points[-1]
        self.assertEqual(tuple(first), (radius, 0))
        self.assertFalse(np.array_equal(first, last))
        self.assertTrue(np.all(np.abs(first - last) <= 2))

    def test_step_controls_density(self):
        pupil = Pupil(center=(50.0, 50.0), size=(40.0, 30.0), angle=0.0)
        self.assertEqual(len(ellipse_to_points(pupil, 10)), 36)
        self.assertEqual(len(ellipse_to_points(pupil, 7)), 52)
        self.assertEqual(len(ellipse_to_points(pupil)), 360)

    def test_rotation(self):
        pupil = Pupil(center=(50.0, 50.0), size=(40.0, 20.0), angle=90.0)
        points = ellipse_to_points(pupil, 90)
        # the width axis now points down the image
        self.assertEqual(tuple(points[0]), (50, 70))
        self.assertEqual(tuple(points[1]), (40, 50))

    def test_angle_normalization(self):
        a = Pupil(center=(30.0, 30.0), size=(20.0, 10.0), angle=-30.0)
        b = Pupil(center=(30.0, 30.0), size=(20.0, 10.0), angle=330.0)
        c = Pupil(center=(30.0, 30.0), size=(20.0, 10.0), angle=690.0)
        np.testing.assert_array_equal(ellipse_to_points(a, 5), ellipse_to_points(b, 5))
        np.testing.assert_array_equal(ellipse_to_points(b, 5), ellipse_to_points(c, 5))

    def test_degenerate_ellipse(self):
        pupil = Pupil(center=(10.0, 12.0), size=(0.0, 0.0), angle=0.0)
        points = ellipse_to_points(pupil, 30)
        self.assertTrue(np.all(points == (10, 12)))

    def test_invalid_step(self):
        pupil = Pupil(center=(10.0, 12.0), size=(4.0, 4.0), angle=0.0)
        with self.assertRaises(ValueError):
            ellipse_to_points(pupil, 0)
        with self.assertRaises(ValueError):
            ellipse_to_points(pupil, 2.5)


if __name__ == "__main__":
    unittest.main()
