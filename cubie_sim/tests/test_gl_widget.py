import os
import random
import unittest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

try:
    from PySide6.QtWidgets import QApplication

    from cubie_sim.render.cube_gl_widget import CubeGLWidget
except ImportError as exc:  # sin libGL en el entorno
    raise unittest.SkipTest(f"OpenGL no disponible: {exc}")

from cubie_sim.logic import CubeSession


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestCubeGLWidgetSignals(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = QApplication.instance() or QApplication([])

    def setUp(self):
        self.clock = FakeClock()
        self.session = CubeSession(clock=self.clock, rng=random.Random(3))
        self.widget = CubeGLWidget(self.session)
        self.frames = []
        self.committed = []
        self.widget.frame_ticked.connect(lambda: self.frames.append(self.clock.now))
        self.widget.turn_committed.connect(self.committed.append)

    def tearDown(self):
        self.widget.deleteLater()

    def test_frame_ticked_on_every_tick(self):
        self.widget._on_anim_tick()
        self.widget._on_anim_tick()
        self.assertEqual(len(self.frames), 2)
        self.assertEqual(self.committed, [])

    def test_turn_committed_then_frame(self):
        self.assertTrue(self.session.request_turn("R", -1))
        self.clock.now = 250.0
        self.widget._on_anim_tick()
        self.assertEqual(self.committed, ["R'"])
        self.assertEqual(self.frames, [250.0])


if __name__ == "__main__":
    unittest.main()
