# cubie_sim/core/cube_model.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from PySide6.QtGui import QQuaternion

from cubie_sim import config
from cubie_sim.core.errors import CubeInvariantError
from cubie_sim.core.faces import NORMAL_TO_FACE
from cubie_sim.core.rotation import Matrix3i, is_identity, orientation_matrix, snap_position

logger = logging.getLogger(__name__)

Color = str  # Letras: "W", "Y", "O", "R", "G", "B"
Vec3i = Tuple[int, int, int]
CubeHash = Tuple[Tuple[int, Vec3i, Matrix3i], ...]

GRID_POSITIONS: List[Vec3i] = [
    (x, y, z)
    for x in (-1, 0, 1)
    for y in (-1, 0, 1)
    for z in (-1, 0, 1)
    if (x, y, z) != (0, 0, 0)
]


def outward_normals(position: Vec3i) -> List[Vec3i]:
    """Normales de las caras exteriores (visibles) de una pieza en `position`."""
    normals: List[Vec3i] = []
    for i, c in enumerate(position):
        if c != 0:
            n = [0, 0, 0]
            n[i] = c
            normals.append((n[0], n[1], n[2]))
    return normals


class Piece:
    """Una de las 26 piezas móviles (cubies).

    Atributos:
        piece_id: Identidad estable (0..25).
        home: Posición de grilla en el estado resuelto.
        grid_position: Posición de grilla actual (entera).
        orientation: Rotación acumulada de la pieza (cuaternión unitario).
        stickers: Normal en el marco de la pieza -> color. Solo las caras
            exteriores en `home` llevan sticker; el resto es plástico.
    """

    __slots__ = ("piece_id", "home", "grid_position", "orientation", "stickers")

    def __init__(self, piece_id: int, home: Vec3i) -> None:
        self.piece_id: int = piece_id
        self.home: Vec3i = home
        self.grid_position: Vec3i = home
        self.orientation: QQuaternion = QQuaternion()
        self.stickers: Dict[Vec3i, Color] = {
            n: config.COLORS_SOLVED[NORMAL_TO_FACE[n]] for n in outward_normals(home)
        }

    def __repr__(self) -> str:
        return f"Piece(id={self.piece_id}, home={self.home}, pos={self.grid_position})"


class CubeModel:
    """Modelo de estado del cubo 3x3x3 basado en piezas.

    Representación:
        - 26 piezas (`Piece`) creadas una sola vez; nunca se destruyen.
        - Cada pieza guarda su posición de grilla en {-1,0,1}³ \\ {(0,0,0)} y
          su orientación acumulada.

    Invariante:
        Las 26 posiciones forman siempre una permutación de `GRID_POSITIONS`.
        La única vía para escribir posiciones es `commit` (usada al
        reiniciar y en cada giro), lo que permite auditar la biyección en un
        solo punto.
    """

    def __init__(self) -> None:
        """Inicializa el cubo en estado resuelto."""
        self._pieces: List[Piece] = [Piece(i, pos) for i, pos in enumerate(GRID_POSITIONS)]
        self.check_invariants()

    # --------------------------
    # Public API
    # --------------------------
    def all_pieces(self) -> List[Piece]:
        """Devuelve las 26 piezas (la lista es una copia; las piezas no)."""
        return list(self._pieces)

    def _set_position(self, piece: Piece, position: Iterable[float]) -> None:
        """Sobrescribe la posición de grilla de una pieza (solo desde `commit`).

        Args:
            piece: Pieza del modelo.
            position: Nueva posición; se reajusta a enteros y se valida.

        Raises:
            CubeInvariantError: Si la pieza no pertenece a este modelo o la
                posición no es legal.
        """
        if piece not in self._pieces:
            raise CubeInvariantError(f"{piece!r} no pertenece a este cubo")
        piece.grid_position = snap_position(tuple(position))

    def commit(self, updates: Mapping[Piece, Iterable[float]]) -> None:
        """Escribe un lote de posiciones y verifica la biyección.

        Un giro mueve varias piezas en ciclo, por eso la verificación se hace
        sobre el lote completo y no pieza a pieza. Si el lote es inválido el
        modelo queda como estaba.

        Args:
            updates: Pieza -> nueva posición.

        Raises:
            CubeInvariantError: Si alguna posición es ilegal o el resultado
                pierde la biyección.
        """
        previous = {p: p.grid_position for p in self._pieces}
        try:
            for piece, pos in updates.items():
                self._set_position(piece, pos)
            self.check_invariants()
        except CubeInvariantError:
            for p, pos in previous.items():
                p.grid_position = pos
            raise

    def check_invariants(self) -> None:
        """Verifica que las posiciones sean una permutación de la grilla.

        Raises:
            CubeInvariantError: Si hay posiciones repetidas o faltantes.
        """
        seen = sorted(p.grid_position for p in self._pieces)
        if seen != sorted(GRID_POSITIONS):
            dupes = {pos for pos in seen if seen.count(pos) > 1}
            logger.error("Biyección perdida; posiciones repetidas: %s", dupes)
            raise CubeInvariantError(f"Biyección pieza/posición perdida: {sorted(dupes)}")

    def piece_at(self, position: Vec3i) -> Optional[Piece]:
        """Pieza que ocupa `position`, o None si la posición no es legal."""
        for p in self._pieces:
            if p.grid_position == tuple(position):
                return p
        return None

    def is_solved(self) -> bool:
        """Indica si cada pieza está en su posición y orientación de origen.

        Solo debe consultarse con el cubo en reposo (fuera de una animación).
        """
        return all(p.grid_position == p.home and is_identity(p.orientation) for p in self._pieces)

    def to_hashable(self) -> CubeHash:
        """Convierte el estado del cubo a una estructura inmutable y hasheable.

        Returns:
            Tupla (id, posición, matriz de orientación) por pieza, ordenada por id.
        """
        return tuple(
            (p.piece_id, p.grid_position, orientation_matrix(p.orientation))
            for p in self._pieces
        )

    def positions(self) -> Dict[int, Vec3i]:
        """Mapa id de pieza -> posición de grilla."""
        return {p.piece_id: p.grid_position for p in self._pieces}

    def reset(self) -> None:
        """Reinicia el cubo a estado resuelto (mismas piezas, misma identidad)."""
        for p in self._pieces:
            p.orientation = QQuaternion()
        self.commit({p: p.home for p in self._pieces})
        logger.info("Cubo reiniciado a estado resuelto.")
