from cubie_sim.logic.session import CubeSession
from cubie_sim.logic.turn_controller import Turn, TurnController, TurnState

__all__ = ["CubeSession", "Turn", "TurnController", "TurnState"]
