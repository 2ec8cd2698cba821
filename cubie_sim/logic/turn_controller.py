# cubie_sim/logic/turn_controller.py
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Literal, Optional, Tuple

from PySide6.QtGui import QQuaternion, QVector3D

from cubie_sim import config
from cubie_sim.core.cube_model import CubeModel, Piece
from cubie_sim.core.errors import CubeInvariantError
from cubie_sim.core.faces import Face, face_spec, select_layer
from cubie_sim.core.rotation import (
    compose,
    copy_quaternion,
    delta_between,
    direction_to_turns,
    interpolate,
    quarter_turn_quaternion,
    rotate_position,
    snap_orientation,
)

logger = logging.getLogger(__name__)

Vec3i = Tuple[int, int, int]
Vec3f = Tuple[float, float, float]
Easing = Literal["linear", "smooth"]

EASINGS: Dict[str, Callable[[float], float]] = {
    "linear": lambda t: t,
    "smooth": lambda t: t * t * (3.0 - 2.0 * t),
}


class TurnState(enum.Enum):
    IDLE = "idle"
    ANIMATING = "animating"
    SCRAMBLING = "scrambling"


@dataclass(frozen=True)
class Turn:
    """Giro de una capa: cara + dirección (+1 horario visto desde fuera, -1 inverso)."""

    face: Face
    direction: int = 1

    def __post_init__(self) -> None:
        face_spec(self.face)
        direction_to_turns(self.direction)

    def inverse(self) -> "Turn":
        return Turn(self.face, -self.direction)

    def __str__(self) -> str:
        return self.face if self.direction == 1 else self.face + "'"


@dataclass(frozen=True)
class PieceSnapshot:
    """Vista de solo lectura de una pieza para el render."""

    piece_id: int
    grid_position: Vec3i
    orientation: QQuaternion
    display_position: Vec3f
    stickers: Dict[Vec3i, str]


class TurnController:
    """Máquina de estados que secuencia los giros de capa.

    Estados:
        - IDLE: sin giro activo; acepta `request_turn` y `apply_instant`.
        - ANIMATING: un giro animado en curso; cualquier otro pedido se rechaza
          en silencio (sin cola).
        - SCRAMBLING: una mezcla en curso; solo `apply_instant` (desde el
          driver de mezcla) está permitido.

    Durante una animación solo cambia la orientación viva de las piezas de la
    capa; las posiciones de grilla se escriben una sola vez, en el commit.
    """

    def __init__(
        self,
        model: CubeModel,
        duration: float = config.TURN_DURATION_MS,
        easing: Easing = "linear",
    ) -> None:
        """Crea el controlador en estado IDLE.

        Args:
            model: Modelo del cubo a controlar.
            duration: Duración de un giro animado (mismas unidades que `now`).
            easing: Curva de interpolación: "linear" o "smooth".

        Raises:
            ValueError: Si la duración no es positiva o la curva no existe.
        """
        if duration <= 0:
            raise ValueError("duration debe ser mayor que 0.")
        if easing not in EASINGS:
            raise ValueError(f"Curva de interpolación no soportada: {easing}")

        self.model: CubeModel = model
        self.duration: float = float(duration)
        self._ease: Callable[[float], float] = EASINGS[easing]

        self.state: TurnState = TurnState.IDLE
        self.turns_committed: int = 0

        # Giro activo (solo en ANIMATING)
        self.active_turn: Optional[Turn] = None
        self._start: float = 0.0
        self._layer: List[Piece] = []
        self._axis_vector: Optional[Vec3i] = None
        self._target: QQuaternion = QQuaternion()
        self._applied: QQuaternion = QQuaternion()
        self.progress: float = 0.0

    # --------------------------
    # Consultas
    # --------------------------
    def is_busy(self) -> bool:
        return self.state is not TurnState.IDLE

    def is_moving(self, piece: Piece) -> bool:
        """Indica si la pieza pertenece a la capa que se está animando."""
        return self.state is TurnState.ANIMATING and piece in self._layer

    def live_rotation(self) -> QQuaternion:
        """Rotación aplicada hasta ahora a la capa animada (identidad si no hay)."""
        return copy_quaternion(self._applied)

    def current_state(self) -> List[PieceSnapshot]:
        """Instantánea de las 26 piezas para las llamadas de dibujo.

        `display_position` es la posición de grilla rotada por la rotación viva
        si la pieza está en la capa animada; en otro caso coincide con la grilla.
        """
        out: List[PieceSnapshot] = []
        for p in self.model.all_pieces():
            if self.is_moving(p):
                v = self._applied.rotatedVector(QVector3D(*p.grid_position))
                display: Vec3f = (v.x(), v.y(), v.z())
            else:
                display = (float(p.grid_position[0]), float(p.grid_position[1]), float(p.grid_position[2]))
            out.append(
                PieceSnapshot(
                    piece_id=p.piece_id,
                    grid_position=p.grid_position,
                    orientation=copy_quaternion(p.orientation),
                    display_position=display,
                    stickers=dict(p.stickers),
                )
            )
        return out

    # --------------------------
    # Giros animados
    # --------------------------
    def request_turn(self, face: str, direction: int, now: float) -> bool:
        """Pide un giro animado.

        Args:
            face: Cara a girar (R, L, U, D, F, B).
            direction: +1 o -1.
            now: Marca de tiempo actual.

        Returns:
            True si el giro fue aceptado; False si el controlador está ocupado.

        Raises:
            InvalidFaceError: Si la cara no existe (debió filtrarse antes).
            ValueError: Si la dirección no es +1/-1.
        """
        turn = Turn(face, direction)  # valida antes de mirar el estado

        if self.state is not TurnState.IDLE:
            logger.debug("Giro %s rechazado: controlador %s", turn, self.state.value)
            return False

        layer, axis_vector = select_layer(self.model, turn.face)
        self.active_turn = turn
        self._start = float(now)
        self._layer = layer
        self._axis_vector = axis_vector
        self._target = quarter_turn_quaternion(axis_vector, direction_to_turns(turn.direction))
        self._applied = QQuaternion()
        self.progress = 0.0
        self.state = TurnState.ANIMATING

        logger.debug("Giro %s iniciado (%d piezas)", turn, len(layer))
        return True

    def tick(self, now: float) -> Optional[Turn]:
        """Avanza la animación activa.

        Args:
            now: Marca de tiempo actual.

        Returns:
            El giro confirmado en este tick, o None si no terminó ninguno.
        """
        if self.state is not TurnState.ANIMATING:
            return None

        progress = (float(now) - self._start) / self.duration
        self.progress = max(0.0, min(1.0, progress))

        if self.progress >= 1.0:
            return self._commit_animation()

        partial = interpolate(self._target, self._ease(self.progress))
        delta = delta_between(self._applied, partial)
        for p in self._layer:
            p.orientation = compose(delta, p.orientation)
        self._applied = partial
        return None

    def _commit_animation(self) -> Turn:
        """Termina el giro activo: orientación exacta, posiciones enteras, IDLE."""
        turn = self.active_turn
        if turn is None or self._axis_vector is None:
            raise CubeInvariantError("Commit sin giro activo")

        # Deshace la rotación parcial y aplica el objetivo exacto de una vez
        undo = self._applied.conjugated()
        for p in self._layer:
            p.orientation = compose(undo, p.orientation)
        self._apply_full(self._layer, self._axis_vector, turn)

        self.active_turn = None
        self._layer = []
        self._axis_vector = None
        self._target = QQuaternion()
        self._applied = QQuaternion()
        self.progress = 0.0
        self.state = TurnState.IDLE

        logger.debug("Giro %s confirmado", turn)
        return turn

    # --------------------------
    # Modo instantáneo
    # --------------------------
    def apply_instant(self, turn: Turn) -> bool:
        """Aplica un giro completo de forma síncrona, sin estados intermedios.

        Permitido en IDLE y en SCRAMBLING (mezcla en curso); rechazado en
        ANIMATING.

        Returns:
            True si se aplicó; False si había un giro animado en curso.
        """
        if self.state is TurnState.ANIMATING:
            logger.debug("Giro instantáneo %s rechazado: animación en curso", turn)
            return False

        layer, axis_vector = select_layer(self.model, turn.face)
        self._apply_full(layer, axis_vector, turn)
        return True

    def _apply_full(self, layer: List[Piece], axis_vector: Vec3i, turn: Turn) -> None:
        """Aplica el giro exacto a la capa y confirma las posiciones en el modelo."""
        turns = direction_to_turns(turn.direction)
        q = quarter_turn_quaternion(axis_vector, turns)

        updates: Dict[Piece, Vec3i] = {}
        for p in layer:
            p.orientation = snap_orientation(compose(q, p.orientation))
            updates[p] = rotate_position(p.grid_position, axis_vector, turns)

        self.model.commit(updates)
        self.turns_committed += 1

    # --------------------------
    # Bandera compartida con la mezcla
    # --------------------------
    def begin_scramble(self) -> bool:
        """Reserva el controlador para una mezcla. False si está ocupado."""
        if self.state is not TurnState.IDLE:
            return False
        self.state = TurnState.SCRAMBLING
        return True

    def end_scramble(self) -> None:
        """Libera el controlador al terminar una mezcla."""
        if self.state is TurnState.SCRAMBLING:
            self.state = TurnState.IDLE
