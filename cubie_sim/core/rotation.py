# cubie_sim/core/rotation.py
from __future__ import annotations

import logging
from typing import Sequence, Tuple

from PySide6.QtGui import QQuaternion, QVector3D

from cubie_sim.core.errors import CubeInvariantError

logger = logging.getLogger(__name__)

Vec3i = Tuple[int, int, int]
Matrix3i = Tuple[Vec3i, Vec3i, Vec3i]

LEGAL_COORDS: Tuple[int, int, int] = (-1, 0, 1)
BASIS: Matrix3i = ((1, 0, 0), (0, 1, 0), (0, 0, 1))


# --------------------------
# Posiciones (exactas, enteras)
# --------------------------
def _rot_x(v: Vec3i, turns: int) -> Vec3i:
    """Rota un vector 90°*turns alrededor de +X (regla de la mano derecha)."""
    x, y, z = v
    turns %= 4
    if turns == 0:
        return (x, y, z)
    if turns == 1:
        return (x, -z, y)
    if turns == 2:
        return (x, -y, -z)
    return (x, z, -y)


def _rot_y(v: Vec3i, turns: int) -> Vec3i:
    """Rota un vector 90°*turns alrededor de +Y (regla de la mano derecha)."""
    x, y, z = v
    turns %= 4
    if turns == 0:
        return (x, y, z)
    if turns == 1:
        return (z, y, -x)
    if turns == 2:
        return (-x, y, -z)
    return (-z, y, x)


def _rot_z(v: Vec3i, turns: int) -> Vec3i:
    """Rota un vector 90°*turns alrededor de +Z (regla de la mano derecha)."""
    x, y, z = v
    turns %= 4
    if turns == 0:
        return (x, y, z)
    if turns == 1:
        return (-y, x, z)
    if turns == 2:
        return (-x, -y, z)
    return (y, -x, z)


_ROTATIONS = (_rot_x, _rot_y, _rot_z)


def axis_index_and_sign(axis_vector: Vec3i) -> Tuple[int, int]:
    """Descompone un vector eje unitario en (índice de eje, signo).

    Args:
        axis_vector: Uno de (±1,0,0), (0,±1,0), (0,0,±1).

    Returns:
        (índice 0..2, signo +1/-1).

    Raises:
        ValueError: Si el vector no es un eje cartesiano unitario.
    """
    nonzero = [(i, c) for i, c in enumerate(axis_vector) if c != 0]
    if len(nonzero) != 1 or nonzero[0][1] not in (1, -1):
        raise ValueError(f"Eje de rotación inválido: {axis_vector}")
    return nonzero[0]


def direction_to_turns(direction: int) -> int:
    """Convierte la dirección de un giro en cuartos de vuelta (mano derecha).

    La dirección +1 es horaria vista desde fuera de la cara, es decir -90°
    alrededor del eje saliente de la cara.
    """
    if direction not in (1, -1):
        raise ValueError(f"Dirección inválida: {direction}")
    return -direction


def snap_position(vector: Sequence[float]) -> Vec3i:
    """Redondea una coordenada a la tripleta entera legal más cercana.

    Args:
        vector: Coordenadas (x, y, z), enteras o flotantes.

    Returns:
        Tripleta entera en {-1,0,1}³ distinta del centro.

    Raises:
        CubeInvariantError: Si alguna componente cae fuera de {-1,0,1} o si
            el resultado es el centro (0,0,0).
    """
    snapped = tuple(int(round(c)) for c in vector)
    if len(snapped) != 3 or any(c not in LEGAL_COORDS for c in snapped):
        logger.error("Coordenada fuera de la grilla: %s", tuple(vector))
        raise CubeInvariantError(f"Coordenada fuera de la grilla: {tuple(vector)}")
    if snapped == (0, 0, 0):
        logger.error("Una pieza cayó en el centro del cubo")
        raise CubeInvariantError("Una pieza no puede ocupar el centro (0,0,0)")
    return snapped  # type: ignore[return-value]


def rotate_position(position: Vec3i, axis_vector: Vec3i, turns: int) -> Vec3i:
    """Aplica un giro de 90°*turns sobre `axis_vector` a una posición de grilla.

    Se parte siempre de las coordenadas previas al giro (nunca de una posición
    interpolada) y el resultado se valida con `snap_position`.

    Args:
        position: Posición de grilla antes del giro.
        axis_vector: Eje de rotación unitario (con signo).
        turns: Cuartos de vuelta según la regla de la mano derecha.

    Returns:
        Nueva posición de grilla.
    """
    idx, sign = axis_index_and_sign(axis_vector)
    return snap_position(_ROTATIONS[idx](position, turns * sign))


# --------------------------
# Orientaciones (cuaterniones)
# --------------------------
def quarter_turn_quaternion(axis_vector: Vec3i, turns: int) -> QQuaternion:
    """Cuaternión de un giro de 90°*turns alrededor de `axis_vector`."""
    axis_index_and_sign(axis_vector)
    return QQuaternion.fromAxisAndAngle(QVector3D(*axis_vector), 90.0 * turns)


def copy_quaternion(q: QQuaternion) -> QQuaternion:
    """Copia independiente de un cuaternión."""
    return QQuaternion(q.scalar(), q.x(), q.y(), q.z())


def interpolate(target: QQuaternion, progress: float) -> QQuaternion:
    """Interpolación esférica (slerp) desde la identidad hasta `target`."""
    if progress <= 0.0:
        return QQuaternion()
    if progress >= 1.0:
        return copy_quaternion(target)
    return QQuaternion.slerp(QQuaternion(), target, progress)


def compose(delta: QQuaternion, orientation: QQuaternion) -> QQuaternion:
    """Aplica la rotación incremental `delta` (en el marco del mundo)."""
    return (delta * orientation).normalized()


def delta_between(previous: QQuaternion, current: QQuaternion) -> QQuaternion:
    """Rotación que lleva de `previous` a `current` (diferencia entre frames)."""
    return (current * previous.conjugated()).normalized()


def _to_vec3i(v: QVector3D) -> Vec3i:
    return (int(round(v.x())), int(round(v.y())), int(round(v.z())))


def world_normal(orientation: QQuaternion, normal: Vec3i) -> Vec3i:
    """Dirección actual (entera) de una normal definida en el marco de la pieza."""
    return _to_vec3i(orientation.rotatedVector(QVector3D(*normal)))


def orientation_matrix(orientation: QQuaternion) -> Matrix3i:
    """Imagen entera de los ejes X, Y, Z bajo una orientación en reposo.

    Raises:
        CubeInvariantError: Si la orientación no es una de las 24 rotaciones
            del cubo (por ejemplo, si se consulta a mitad de un giro).
    """
    images = tuple(world_normal(orientation, e) for e in BASIS)
    for img in images:
        if sorted(abs(c) for c in img) != [0, 0, 1]:
            raise CubeInvariantError(f"Orientación fuera de la red del cubo: {orientation}")
    return images  # type: ignore[return-value]


def snap_orientation(orientation: QQuaternion) -> QQuaternion:
    """Reajusta un cuaternión a la rotación exacta del cubo más cercana."""
    mx, my, mz = orientation_matrix(orientation)
    return QQuaternion.fromAxes(QVector3D(*mx), QVector3D(*my), QVector3D(*mz)).normalized()


def is_identity(orientation: QQuaternion) -> bool:
    """Indica si una orientación en reposo es la identidad."""
    return orientation_matrix(orientation) == BASIS
