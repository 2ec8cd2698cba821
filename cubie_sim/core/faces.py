# cubie_sim/core/faces.py
from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Literal, NamedTuple, Tuple

from cubie_sim.core.errors import InvalidFaceError

if TYPE_CHECKING:
    from cubie_sim.core.cube_model import CubeModel, Piece

Face = Literal["R", "L", "U", "D", "F", "B"]
Axis = Literal["x", "y", "z"]
Vec3i = Tuple[int, int, int]

FACES: List[Face] = ["R", "L", "U", "D", "F", "B"]


class FaceSpec(NamedTuple):
    """Parámetros geométricos de una capa exterior."""

    axis: Axis
    index: int         # 0, 1, 2 para x, y, z
    value: int         # -1 o +1
    axis_vector: Vec3i  # normal saliente de la cara


FACE_TABLE: Dict[Face, FaceSpec] = {
    "R": FaceSpec("x", 0, 1, (1, 0, 0)),
    "L": FaceSpec("x", 0, -1, (-1, 0, 0)),
    "U": FaceSpec("y", 1, 1, (0, 1, 0)),
    "D": FaceSpec("y", 1, -1, (0, -1, 0)),
    "F": FaceSpec("z", 2, 1, (0, 0, 1)),
    "B": FaceSpec("z", 2, -1, (0, 0, -1)),
}

# Normal saliente -> cara (para colorear stickers)
NORMAL_TO_FACE: Dict[Vec3i, Face] = {spec.axis_vector: f for f, spec in FACE_TABLE.items()}


def face_spec(face: str) -> FaceSpec:
    """Devuelve eje, valor de capa y vector eje de una cara.

    Args:
        face: Designador de cara (R, L, U, D, F, B).

    Returns:
        El `FaceSpec` de la cara.

    Raises:
        InvalidFaceError: Si la cara no existe.
    """
    try:
        return FACE_TABLE[face]  # type: ignore[index]
    except (KeyError, TypeError):
        raise InvalidFaceError(f"Cara no soportada: {face!r}") from None


def in_layer(position: Vec3i, spec: FaceSpec) -> bool:
    """Indica si una posición de grilla pertenece a la capa descrita por `spec`."""
    return int(round(position[spec.index])) == spec.value


def select_layer(model: CubeModel, face: str) -> Tuple[List[Piece], Vec3i]:
    """Selecciona las piezas de una capa exterior.

    Solo se consulta `grid_position`; la orientación no influye en la selección.

    Args:
        model: Modelo del cubo.
        face: Designador de cara.

    Returns:
        (piezas de la capa, vector eje de rotación). Siempre son 9 piezas.

    Raises:
        InvalidFaceError: Si la cara no existe.
    """
    spec = face_spec(face)
    pieces = [p for p in model.all_pieces() if in_layer(p.grid_position, spec)]
    return pieces, spec.axis_vector
