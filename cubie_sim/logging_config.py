"""
Configuración de logging
Prepara el logger del paquete `cubie_sim`.
"""
import logging
import sys
from typing import Optional


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configura el logger raíz del espacio de nombres 'cubie_sim'.

    Args:
        level: Nivel de logging (p. ej. logging.DEBUG, logging.INFO)
        log_file: Ruta opcional para guardar también los logs en un archivo.
    """
    logger = logging.getLogger("cubie_sim")
    logger.setLevel(level)

    # Evita handlers duplicados si se llama más de una vez
    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info("Logging inicializado.")
