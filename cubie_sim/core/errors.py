# cubie_sim/core/errors.py
from __future__ import annotations


class InvalidFaceError(ValueError):
    """Designador de cara desconocido que llegó al núcleo.

    Indica un error de validación aguas arriba: la capa de entrada debe filtrar
    teclas inválidas antes de pedir un giro.
    """


class CubeInvariantError(RuntimeError):
    """Violación de un invariante del cubo (coordenada fuera de {-1,0,1} o
    pérdida de la biyección pieza <-> posición). Es un defecto del algoritmo."""
