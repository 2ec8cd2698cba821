# cubie_sim/logic/scramble.py
from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from cubie_sim.core.faces import FACES, face_spec
from cubie_sim.logic.turn_controller import Turn, TurnController

logger = logging.getLogger(__name__)

DIRECTIONS: List[int] = [1, -1]


def generate_scramble(
    n: int,
    faces: Sequence[str] = FACES,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> List[Turn]:
    """Genera una secuencia de mezcla (scramble) aleatoria.

    Cada giro elige cara y dirección de forma uniforme e independiente.

    Args:
        n: Cantidad de giros a generar.
        faces: Caras candidatas.
        seed: Semilla opcional (se ignora si se pasa `rng`).
        rng: Generador a usar; si es None se crea uno con `seed`.

    Returns:
        Lista de `n` giros.

    Raises:
        ValueError: Si `n` es menor o igual a 0 o `faces` está vacío.
        InvalidFaceError: Si alguna cara no existe.
    """
    if n <= 0:
        raise ValueError("n debe ser mayor que 0.")
    if not faces:
        raise ValueError("faces no puede estar vacío.")
    for f in faces:
        face_spec(f)

    rng = rng if rng is not None else random.Random(seed)
    return [Turn(rng.choice(faces), rng.choice(DIRECTIONS)) for _ in range(n)]  # type: ignore[arg-type]


class ScrambleDriver:
    """Aplica una mezcla como secuencia de giros instantáneos.

    Comparte la bandera de ocupado del `TurnController`: no arranca si hay un
    giro animado en curso, y mientras mezcla el controlador rechaza giros
    animados del usuario.

    Con `interval` nulo la mezcla completa se aplica dentro de `scramble`. Con
    un intervalo positivo se aplica un giro por intervalo transcurrido, desde
    `tick`.
    """

    def __init__(self, controller: TurnController, rng: Optional[random.Random] = None) -> None:
        self.controller: TurnController = controller
        self.rng: random.Random = rng if rng is not None else random.Random()

        self.history: List[Turn] = []
        self.moves_applied: int = 0
        self._pending: List[Turn] = []
        self._interval: float = 0.0
        self._next_due: float = 0.0

    def is_running(self) -> bool:
        return bool(self._pending)

    @property
    def moves_remaining(self) -> int:
        return len(self._pending)

    def scramble(
        self,
        move_count: int,
        faces: Sequence[str] = FACES,
        interval: Optional[float] = None,
        now: float = 0.0,
    ) -> bool:
        """Inicia (o ejecuta completa) una mezcla de `move_count` giros.

        Args:
            move_count: Cantidad exacta de giros.
            faces: Caras candidatas.
            interval: Espera entre giros (mismas unidades que `now`). None o 0
                aplica todo de inmediato.
            now: Marca de tiempo actual; el primer giro se aplica en `now`.

        Returns:
            True si la mezcla arrancó; False si el controlador estaba ocupado.

        Raises:
            ValueError: Si `move_count` <= 0, `faces` está vacío o `interval`
                es negativo.
        """
        if interval is not None and interval < 0:
            raise ValueError("interval no puede ser negativo.")
        turns = generate_scramble(move_count, faces, rng=self.rng)

        if not self.controller.begin_scramble():
            logger.debug("Mezcla rechazada: controlador ocupado")
            return False

        self.history = []
        self.moves_applied = 0
        self._pending = turns
        self._interval = float(interval or 0.0)
        self._next_due = float(now)
        logger.info("Mezcla iniciada: %d giros", move_count)

        if self._interval == 0.0:
            try:
                while self._pending:
                    self._dispatch_next()
            except Exception:
                self._abort()
                raise
            self._finish()
        return True

    def tick(self, now: float) -> int:
        """Aplica los giros cuyo turno ya llegó.

        Returns:
            Cantidad de giros aplicados en esta llamada.

        Raises:
            CubeInvariantError: Si un giro rompe el modelo; la mezcla se
                aborta y el controlador queda libre.
        """
        applied = 0
        try:
            while self._pending and now >= self._next_due:
                self._dispatch_next()
                self._next_due += self._interval
                applied += 1
        except Exception:
            self._abort()
            raise
        if applied and not self._pending:
            self._finish()
        return applied

    def _dispatch_next(self) -> None:
        turn = self._pending.pop(0)
        if not self.controller.apply_instant(turn):
            # El controlador está en SCRAMBLING; no puede haber animación
            raise RuntimeError(f"Giro de mezcla {turn} rechazado por el controlador")
        self.history.append(turn)
        self.moves_applied += 1

    def _abort(self) -> None:
        remaining = len(self._pending)
        self._pending = []
        self.controller.end_scramble()
        logger.error("Mezcla abortada tras %d giros (%d sin aplicar)", self.moves_applied, remaining)

    def _finish(self) -> None:
        self.controller.end_scramble()
        logger.info("Mezcla terminada: %s", " ".join(str(t) for t in self.history))
