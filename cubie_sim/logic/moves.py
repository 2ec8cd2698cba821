# cubie_sim/logic/moves.py
from __future__ import annotations

from typing import Optional

from cubie_sim.core.faces import FACE_TABLE
from cubie_sim.logic.turn_controller import Turn


def turn_from_key(key: str, shift: bool = False) -> Optional[Turn]:
    """Traduce una tecla a un giro, filtrando teclas que no son caras.

    Reglas:
    - Letras R L U D F B, sin distinguir mayúsculas.
    - Sin modificador: dirección +1 (horario visto desde fuera de la cara).
    - Con Shift: dirección -1.

    Args:
        key: Texto de la tecla presionada.
        shift: True si Shift estaba presionado.

    Returns:
        El giro correspondiente, o None si la tecla no es una cara. Las teclas
        inválidas nunca llegan al núcleo.
    """
    face = key.strip().upper()
    if face not in FACE_TABLE:
        return None
    return Turn(face, -1 if shift else 1)  # type: ignore[arg-type]
