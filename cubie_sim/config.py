"""
Constantes globales
===================
Registro central de los valores fijos del simulador: tiempos de animación,
geometría de las piezas y paleta de colores.

No hay archivo de configuración: cada clase acepta argumentos de constructor
para sobreescribir estos valores por instancia (por ejemplo, `duration` en el
controlador de giros).
"""
from typing import Dict, Tuple

# Tiempos (milisegundos)
TURN_DURATION_MS: float = 250.0
FRAME_INTERVAL_MS: int = 16  # ~60fps

# Mezcla
SCRAMBLE_DEFAULT_MOVES: int = 20
SCRAMBLE_DEFAULT_INTERVAL_MS: float = 0.0

# Geometría de cada pieza en el mundo 3D
CUBE_SIZE: float = 0.9
SPACING: float = 0.1
STEP: float = CUBE_SIZE + SPACING

# Color resuelto por cara (letras, igual que la paleta del render)
COLORS_SOLVED: Dict[str, str] = {
    "U": "W",
    "D": "Y",
    "L": "O",
    "R": "R",
    "F": "G",
    "B": "B",
}

PALETTE: Dict[str, Tuple[float, float, float]] = {
    "W": (1.0, 1.0, 1.0),
    "Y": (1.0, 1.0, 0.0),
    "O": (1.0, 0.5, 0.0),
    "R": (1.0, 0.0, 0.0),
    "G": (0.0, 0.85, 0.0),
    "B": (0.0, 0.35, 1.0),
}
PLASTIC_RGB: Tuple[float, float, float] = (0.05, 0.05, 0.06)
BACKGROUND_RGB: Tuple[float, float, float] = (0.10, 0.10, 0.12)
