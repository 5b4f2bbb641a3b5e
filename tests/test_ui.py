"""
Capture UI helpers and the landmark detector interface, without a display.
"""

import sys
import os
import unittest
from types import SimpleNamespace
from unittest import mock

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np

from face_symmetry.detector import LandmarkDetector

try:
    from face_symmetry.ui import app
except ImportError:  # no tkinter in this interpreter
    app = None


class TestLandmarkDetector(unittest.TestCase):

    def test_interface_is_abstract(self):
        with self.assertRaises(TypeError):
            LandmarkDetector()

    def test_subclass_as_context_manager(self):
        class Fixed(LandmarkDetector):
            closed = False

            def detect(self, frame):
                return None

            def close(self):
                self.closed = True

        with Fixed() as det:
            self.assertIsNone(det.detect(np.zeros((4, 4, 3), dtype=np.uint8)))
        self.assertTrue(det.closed)


@unittest.skipIf(app is None, "tkinter not available")
class TestImageWindows(unittest.TestCase):

    def test_show_images_paints_once(self):
        images = [np.zeros((4, 4, 3), dtype=np.uint8)] * 2
        with mock.patch.object(app.cv2, "imshow") as imshow, mock.patch.object(app.cv2, "waitKey") as wait:
            names = app.show_images(images)
        self.assertEqual(names, ["Facial Symmetry [1]", "Facial Symmetry [2]"])
        self.assertEqual(imshow.call_count, 2)
        wait.assert_called_once_with(1)

    def test_show_no_images(self):
        with mock.patch.object(app.cv2, "imshow"), mock.patch.object(app.cv2, "waitKey") as wait:
            self.assertEqual(app.show_images([]), [])
        wait.assert_not_called()

    def test_poll_drops_closed_windows(self):
        visible = {"a": 1.0, "b": 0.0}
        with mock.patch.object(app.cv2, "waitKey") as wait, \
                mock.patch.object(app.cv2, "getWindowProperty", side_effect=lambda n, p: visible[n]):
            self.assertEqual(app.poll_windows(["a", "b"]), ["a"])
        wait.assert_called_once_with(1)

    def test_poll_reschedules_while_windows_open(self):
        fake = SimpleNamespace(running=False, _image_windows=["a"], root=mock.Mock(),
                               _poll_image_windows=mock.Mock())
        with mock.patch.object(app, "poll_windows", return_value=["a"]):
            app.SymmetryApp._poll_image_windows(fake)
        fake.root.after.assert_called_once()
        fake.root.after.reset_mock()
        with mock.patch.object(app, "poll_windows", return_value=[]):
            app.SymmetryApp._poll_image_windows(fake)
        fake.root.after.assert_not_called()

    def test_images_refused_while_streaming(self):
        fake = SimpleNamespace(running=True)
        with mock.patch.object(app, "messagebox") as box, mock.patch.object(app, "filedialog") as dialog:
            app.SymmetryApp._analyze_images(fake)
        box.showinfo.assert_called_once()
        dialog.askopenfilenames.assert_not_called()


if __name__ == "__main__":
    unittest.main()
