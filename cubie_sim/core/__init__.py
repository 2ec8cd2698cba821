from cubie_sim.core.cube_model import CubeModel, Piece
from cubie_sim.core.errors import CubeInvariantError, InvalidFaceError
from cubie_sim.core.faces import FACES, select_layer

__all__ = ["CubeModel", "Piece", "CubeInvariantError", "InvalidFaceError", "FACES", "select_layer"]
