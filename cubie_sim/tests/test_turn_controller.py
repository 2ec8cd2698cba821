import math
import random
import unittest

from PySide6.QtGui import QVector3D

from cubie_sim.core import FACES, CubeInvariantError, CubeModel, InvalidFaceError
from cubie_sim.core.cube_model import GRID_POSITIONS
from cubie_sim.core.faces import face_spec
from cubie_sim.core.rotation import is_identity, orientation_matrix, world_normal
from cubie_sim.logic.turn_controller import Turn, TurnController, TurnState


def run_animated(ctrl, face, direction, start=0.0, steps=7):
    ctrl.request_turn(face, direction, start)
    committed = None
    for i in range(1, steps + 1):
        committed = ctrl.tick(start + ctrl.duration * i / steps)
    return committed


def assert_stickers_outside(tc, model):
    # Cada sticker debe apuntar hacia afuera desde la posición actual
    for p in model.all_pieces():
        for n in p.stickers:
            wn = world_normal(p.orientation, n)
            axis = [abs(c) for c in wn].index(1)
            tc.assertEqual(p.grid_position[axis], wn[axis], (p, n, wn))


class TestAnimatedTurn(unittest.TestCase):
    def setUp(self):
        self.model = CubeModel()
        self.ctrl = TurnController(self.model)

    def test_starts_idle(self):
        self.assertIs(self.ctrl.state, TurnState.IDLE)
        self.assertFalse(self.ctrl.is_busy())
        self.assertIsNone(self.ctrl.tick(100.0))

    def test_request_enters_animating(self):
        self.assertTrue(self.ctrl.request_turn("R", 1, 0.0))
        self.assertIs(self.ctrl.state, TurnState.ANIMATING)
        self.assertTrue(self.ctrl.is_busy())
        self.assertEqual(self.ctrl.active_turn, Turn("R", 1))

    def test_concrete_R_scenario(self):
        before = {p.piece_id: p.grid_position for p in self.model.all_pieces()}
        corner = self.model.piece_at((1, 1, 1))

        self.ctrl.request_turn("R", 1, 0.0)
        self.assertIsNone(self.ctrl.tick(125.0))
        committed = self.ctrl.tick(250.0)

        self.assertEqual(committed, Turn("R", 1))
        self.assertIs(self.ctrl.state, TurnState.IDLE)
        self.assertEqual(corner.grid_position, (1, 1, -1))
        for p in self.model.all_pieces():
            x, y, z = before[p.piece_id]
            if x == 1:
                self.assertEqual(p.grid_position, (x, z, -y))
            else:
                self.assertEqual(p.grid_position, (x, y, z))
                self.assertTrue(is_identity(p.orientation))
        # El sticker U de la esquina UFR queda mirando hacia B
        self.assertEqual(world_normal(corner.orientation, (0, 1, 0)), (0, 0, -1))

    def test_positions_frozen_during_animation(self):
        before = self.model.positions()
        self.ctrl.request_turn("U", -1, 1000.0)
        for now in (1000.0, 1050.0, 1100.0, 1200.0, 1249.0):
            self.ctrl.tick(now)
            self.assertEqual(self.model.positions(), before)
        self.ctrl.tick(1250.0)
        self.assertNotEqual(self.model.positions(), before)

    def test_halfway_orientation_and_display_position(self):
        corner = self.model.piece_at((1, 1, 1))
        self.ctrl.request_turn("R", 1, 0.0)
        self.ctrl.tick(125.0)
        self.assertAlmostEqual(self.ctrl.progress, 0.5)

        v = corner.orientation.rotatedVector(QVector3D(0, 1, 0))
        s = math.sqrt(0.5)
        self.assertAlmostEqual(v.y(), s, places=4)
        self.assertAlmostEqual(v.z(), -s, places=4)

        snap = {s.piece_id: s for s in self.ctrl.current_state()}[corner.piece_id]
        self.assertEqual(snap.grid_position, (1, 1, 1))
        self.assertAlmostEqual(snap.display_position[0], 1.0, places=4)
        self.assertAlmostEqual(snap.display_position[1], math.sqrt(2.0), places=4)
        self.assertAlmostEqual(snap.display_position[2], 0.0, places=4)
        self.assertTrue(self.ctrl.is_moving(corner))
        self.assertFalse(self.ctrl.is_moving(self.model.piece_at((-1, 1, 1))))

        live = self.ctrl.live_rotation().rotatedVector(QVector3D(0, 0, 1))
        self.assertAlmostEqual(live.y(), math.sqrt(0.5), places=4)
        self.ctrl.tick(250.0)
        self.assertAlmostEqual(self.ctrl.live_rotation().scalar(), 1.0)

    def test_progress_is_clamped(self):
        self.ctrl.request_turn("F", 1, 500.0)
        self.assertIsNone(self.ctrl.tick(400.0))
        self.assertEqual(self.ctrl.progress, 0.0)
        self.assertEqual(self.ctrl.tick(10_000.0), Turn("F", 1))

    def test_request_while_busy_is_ignored(self):
        self.ctrl.request_turn("R", 1, 0.0)
        self.ctrl.tick(100.0)
        before = self.model.positions()

        self.assertFalse(self.ctrl.request_turn("U", 1, 110.0))
        self.assertFalse(self.ctrl.apply_instant(Turn("L")))
        self.assertEqual(self.model.positions(), before)
        self.assertEqual(self.ctrl.active_turn, Turn("R", 1))

        self.ctrl.tick(250.0)
        self.assertEqual(self.ctrl.turns_committed, 1)

    def test_busy_rejection_is_logged(self):
        self.ctrl.request_turn("R", 1, 0.0)
        with self.assertLogs("cubie_sim.logic.turn_controller", level="DEBUG") as cm:
            self.ctrl.request_turn("U", 1, 10.0)
        self.assertTrue(any("rechazado" in line for line in cm.output))

    def test_invalid_face_raises(self):
        with self.assertRaises(InvalidFaceError):
            self.ctrl.request_turn("X", 1, 0.0)
        self.assertIs(self.ctrl.state, TurnState.IDLE)

    def test_invalid_direction_raises(self):
        with self.assertRaises(ValueError):
            self.ctrl.request_turn("R", 0, 0.0)

    def test_round_trip(self):
        before = self.model.to_hashable()
        run_animated(self.ctrl, "B", 1)
        self.assertNotEqual(before, self.model.to_hashable())
        run_animated(self.ctrl, "B", -1, start=1000.0)
        self.assertEqual(before, self.model.to_hashable())
        self.assertTrue(self.model.is_solved())

    def test_four_turn_identity_every_face(self):
        for face in FACES:
            start = 0.0
            for _ in range(4):
                run_animated(self.ctrl, face, 1, start=start)
                start += 1000.0
            self.assertTrue(self.model.is_solved(), face)

    def test_animated_matches_instant(self):
        other = CubeModel()
        other_ctrl = TurnController(other)
        seq = [Turn("R"), Turn("U", -1), Turn("F"), Turn("L", -1), Turn("D"), Turn("B")]
        start = 0.0
        for t in seq:
            run_animated(self.ctrl, t.face, t.direction, start=start, steps=11)
            other_ctrl.apply_instant(t)
            start += 500.0
        self.assertEqual(self.model.to_hashable(), other.to_hashable())

    def test_smooth_easing(self):
        ctrl = TurnController(CubeModel(), duration=100.0, easing="smooth")
        corner = ctrl.model.piece_at((1, 1, 1))
        ctrl.request_turn("R", 1, 0.0)
        ctrl.tick(25.0)
        # smoothstep(0.25) = 0.15625 -> 14.0625°
        v = corner.orientation.rotatedVector(QVector3D(0, 1, 0))
        self.assertAlmostEqual(v.y(), math.cos(math.radians(14.0625)), places=4)
        self.assertEqual(ctrl.tick(100.0), Turn("R", 1))
        self.assertEqual(corner.grid_position, (1, 1, -1))

    def test_commit_without_active_turn_raises(self):
        with self.assertRaises(CubeInvariantError):
            self.ctrl._commit_animation()
        self.assertTrue(self.model.is_solved())

    def test_bad_construction(self):
        with self.assertRaises(ValueError):
            TurnController(CubeModel(), duration=0)
        with self.assertRaises(ValueError):
            TurnController(CubeModel(), easing="bounce")


class TestInstantTurn(unittest.TestCase):
    def setUp(self):
        self.model = CubeModel()
        self.ctrl = TurnController(self.model)

    def test_apply_instant_commits_synchronously(self):
        self.assertTrue(self.ctrl.apply_instant(Turn("R")))
        self.assertIs(self.ctrl.state, TurnState.IDLE)
        self.assertEqual(self.model.piece_at((1, 1, -1)).home, (1, 1, 1))
        self.assertEqual(self.ctrl.turns_committed, 1)

    def test_clockwise_direction_for_every_face(self):
        # Vista desde fuera de cada cara: la pieza arriba/adelante avanza en sentido horario
        expected = {
            "R": ((1, 1, 1), (1, 1, -1)),
            "L": ((-1, 1, 1), (-1, -1, 1)),
            "U": ((0, 1, 1), (-1, 1, 0)),
            "D": ((0, -1, 1), (1, -1, 0)),
            "F": ((0, 1, 1), (1, 0, 1)),
            "B": ((0, 1, -1), (-1, 0, -1)),
        }
        for face, (src, dst) in expected.items():
            model = CubeModel()
            piece = model.piece_at(src)
            TurnController(model).apply_instant(Turn(face))
            self.assertEqual(piece.grid_position, dst, face)

    def test_bijection_and_stickers_after_random_sequence(self):
        rng = random.Random(11)
        for _ in range(60):
            self.ctrl.apply_instant(Turn(rng.choice(FACES), rng.choice([1, -1])))
            self.model.check_invariants()
            self.assertEqual(
                sorted(p.grid_position for p in self.model.all_pieces()),
                sorted(GRID_POSITIONS),
            )
        assert_stickers_outside(self, self.model)

    def test_orientations_stay_exact(self):
        for _ in range(25):
            for face in ("R", "U", "F"):
                self.ctrl.apply_instant(Turn(face))
        for p in self.model.all_pieces():
            orientation_matrix(p.orientation)
            norm = math.sqrt(
                p.orientation.scalar() ** 2 + p.orientation.x() ** 2
                + p.orientation.y() ** 2 + p.orientation.z() ** 2
            )
            self.assertAlmostEqual(norm, 1.0, places=5)

    def test_centers_never_move(self):
        centers = {face_spec(f).axis_vector for f in FACES}
        for face in FACES:
            self.ctrl.apply_instant(Turn(face, -1))
        for p in self.model.all_pieces():
            if p.home in centers:
                self.assertEqual(p.grid_position, p.home)

    def test_independent_instances(self):
        other = CubeModel()
        self.ctrl.apply_instant(Turn("U"))
        self.assertTrue(other.is_solved())
        self.assertFalse(self.model.is_solved())


class TestScrambleFlag(unittest.TestCase):
    def test_scrambling_blocks_animated_requests(self):
        ctrl = TurnController(CubeModel())
        self.assertTrue(ctrl.begin_scramble())
        self.assertIs(ctrl.state, TurnState.SCRAMBLING)
        self.assertFalse(ctrl.request_turn("R", 1, 0.0))
        self.assertTrue(ctrl.apply_instant(Turn("R")))
        ctrl.end_scramble()
        self.assertIs(ctrl.state, TurnState.IDLE)

    def test_cannot_begin_scramble_while_animating(self):
        ctrl = TurnController(CubeModel())
        ctrl.request_turn("R", 1, 0.0)
        self.assertFalse(ctrl.begin_scramble())
        ctrl.end_scramble()
        self.assertIs(ctrl.state, TurnState.ANIMATING)


if __name__ == "__main__":
    unittest.main()
