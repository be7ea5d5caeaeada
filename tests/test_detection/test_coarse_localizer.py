import unittest
from unittest.mock import MagicMock

import cv2
import numpy as np

from pupil_eval.detection.coarse_localizer import coarse_pupil_detection
from pupil_eval.detection.pupil_types import Rect
from pupil_eval.ports.interfaces import ICoarseObserver
from pupil_eval.utilities.pupil_drawer import CoarseDebugDrawer


def dark_disc_frame(shape=(240, 320), center=(160, 120), radius=20, dark=20, bright=200):
    frame = np.full(shape, bright, dtype=np.uint8)
    cv2.circle(frame, center, radius, dark, -1)
    return frame


class TestCoarseLocalizer(unittest.TestCase):
    def assertInsideFrame(self, roi: Rect, frame: np.ndarray):
        rows, cols = frame.shape
        self.assertGreater(roi.width, 0)
        self.assertGreater(roi.height, 0)
        self.assertGreaterEqual(roi.x, 0)
        self.assertGreaterEqual(roi.y, 0)
        self.assertLessEqual(roi.x + roi.width, cols)
        self.assertLessEqual(roi.y + roi.height, rows)

    def test_dark_disc_tight_roi(self):
        frame = dark_disc_frame()
        roi = coarse_pupil_detection(frame, min_coverage=0.05, working_width=60, working_height=40)

        self.assertInsideFrame(roi, frame)
        self.assertTrue(roi.contains((160, 120)))
        self.assertLessEqual(roi.width, 160)
        self.assertLessEqual(roi.height, 120)

    def test_dark_disc_roi_follows_disc_extent(self):
        # 320x240 at 60x40: scale 6, radii 2..9 in steps of 2, so the ROI edges
        # may be off by one radius step of the 4r candidate box: 4 * 2 * 6 px
        margin = 48
        for center, radius in (((160, 120), 20), ((100, 140), 25), ((200, 100), 30)):
            with self.subTest(center=center, radius=radius):
                frame = dark_disc_frame(center=center, radius=radius)
                roi = coarse_pupil_detection(frame, 0.05, 60, 40)
                left, top = center[0] - radius, center[1] - radius
                right, bottom = center[0] + radius, center[1] + radius

                self.assertInsideFrame(roi, frame)
                self.assertTrue(roi.contains(center))
                self.assertLessEqual(abs(roi.x - left), margin)
                self.assertLessEqual(abs(roi.y - top), margin)
                self.assertLessEqual(abs(roi.br[0] - right), margin)
                self.assertLessEqual(abs(roi.br[1] - bottom), margin)

    def test_dark_disc_default_coverage(self):
        frame = dark_disc_frame(center=(100, 140))
        roi = coarse_pupil_detection(frame)

        self.assertInsideFrame(roi, frame)
        self.assertTrue(roi.contains((100, 140)))

    def test_uniform_frame_falls_back_to_full_frame(self):
        for value in (0, 128, 255):
            frame = np.full((240, 320), value, dtype=np.uint8)
            self.assertEqual(coarse_pupil_detection(frame), Rect(0, 0, 320, 240))

    def test_frame_smaller_than_working_size(self):
        frame = np.full((1, 1), 90, dtype=np.uint8)
        self.assertEqual(coarse_pupil_detection(frame), Rect(0, 0, 1, 1))

        frame = np.full((12, 30), 90, dtype=np.uint8)
        self.assertEqual(coarse_pupil_detection(frame), Rect(0, 0, 30, 12))

    def test_random_frames_stay_inside(self):
        rng = np.random.default_rng(7)
        for shape in ((240, 320), (480, 640), (100, 37), (37, 100)):
            frame = rng.integers(0, 256, size=shape, dtype=np.uint8)
            roi = coarse_pupil_detection(frame, min_coverage=0.3)
            self.assertInsideFrame(roi, frame)

    def test_observer_receives_scan(self):
        observer = MagicMock(spec=ICoarseObserver)
        frame = dark_disc_frame()
        coarse_pupil_detection(frame, 0.05, 60, 40, observer=observer)

        observer.on_coarse_result.assert_called_once()
        downscaled, candidates, used, coarse, scale = observer.on_coarse_result.call_args[0]
        self.assertEqual(downscaled.shape, (40, 53))
        self.assertAlmostEqual(scale, 6.0)
        self.assertGreaterEqual(used, 1)
        self.assertFalse(coarse.empty)
        responses = [response for _, response in candidates]
        self.assertEqual(responses, sorted(responses, reverse=True))
        self.assertTrue(all(r > 0 for r in responses))

    def test_debug_drawer(self):
        drawer = CoarseDebugDrawer()
        coarse_pupil_detection(dark_disc_frame(), 0.05, 60, 40, observer=drawer)
        self.assertIsNotNone(drawer.image)
        self.assertEqual(drawer.image.ndim, 3)

    def test_contract_violations(self):
        frame = dark_disc_frame()
        with self.assertRaises(ValueError):
            coarse_pupil_detection(frame, working_width=0)
        with self.assertRaises(ValueError):
            coarse_pupil_detection(frame, working_height=-5)
        with self.assertRaises(ValueError):
            coarse_pupil_detection(np.zeros((0, 10), dtype=np.uint8))
        with self.assertRaises(ValueError):
            coarse_pupil_detection(np.zeros((10, 10, 3), dtype=np.uint8))
        with self.assertRaises(ValueError):
            coarse_pupil_detection(frame.astype(np.float32))


if __name__ == "__main__":
    unittest.main()
