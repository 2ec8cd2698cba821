# cubie_sim/logic/session.py
from __future__ import annotations

import logging
import random
import time
from typing import Callable, List, Optional

from cubie_sim import config
from cubie_sim.core.cube_model import CubeModel
from cubie_sim.logic.scramble import ScrambleDriver
from cubie_sim.logic.turn_controller import Easing, PieceSnapshot, Turn, TurnController

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Reloj por defecto: tiempo monotónico en milisegundos."""
    return time.monotonic() * 1000.0


class CubeSession:
    """Fachada que el front-end usa para hablar con el núcleo.

    Agrupa el modelo (`CubeModel`), el controlador de giros (`TurnController`)
    y el driver de mezcla (`ScrambleDriver`), y les entrega marcas de tiempo de
    un reloj inyectable.
    """

    def __init__(
        self,
        clock: Clock = monotonic_ms,
        duration: float = config.TURN_DURATION_MS,
        easing: Easing = "linear",
        rng: Optional[random.Random] = None,
    ) -> None:
        self.clock: Clock = clock
        self.model: CubeModel = CubeModel()
        self.controller: TurnController = TurnController(self.model, duration=duration, easing=easing)
        self.scrambler: ScrambleDriver = ScrambleDriver(self.controller, rng=rng)

    def request_turn(self, face: str, direction: int = 1) -> bool:
        """Pide un giro animado. False si hay un giro o una mezcla en curso."""
        return self.controller.request_turn(face, direction, self.clock())

    def tick(self, now: Optional[float] = None) -> Optional[Turn]:
        """Avanza la animación y la mezcla temporizada.

        Returns:
            El giro animado confirmado en este tick, si lo hubo.
        """
        now = self.clock() if now is None else now
        self.scrambler.tick(now)
        return self.controller.tick(now)

    def is_busy(self) -> bool:
        return self.controller.is_busy()

    def current_state(self) -> List[PieceSnapshot]:
        return self.controller.current_state()

    def scramble(
        self,
        move_count: int = config.SCRAMBLE_DEFAULT_MOVES,
        interval: Optional[float] = None,
    ) -> bool:
        """Mezcla el cubo con `move_count` giros instantáneos aleatorios."""
        return self.scrambler.scramble(move_count, interval=interval, now=self.clock())

    def is_solved(self) -> bool:
        """Estado resuelto; False mientras el controlador está ocupado."""
        return not self.is_busy() and self.model.is_solved()

    def reset(self) -> bool:
        """Vuelve al estado resuelto. Rechazado (False) si está ocupado."""
        if self.is_busy():
            return False
        self.model.reset()
        return True
