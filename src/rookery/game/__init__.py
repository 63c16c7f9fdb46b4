"""Game management layer — controller, players, session state machine.

Quick start::

    from rookery.core import Color
    from rookery.game import GameController, HumanPlayer

    ctrl = GameController()
    ctrl.new_game(
        white=HumanPlayer(Color.WHITE, "Alice"),
        black=HumanPlayer(Color.BLACK, "Bob"),
    )
"""

from rookery.game.controller import GameController, GameEvents
from rookery.game.interfaces import GamePhase, IGameController, IPlayer
from rookery.game.player import AIPlayer, HumanPlayer
from rookery.game.session import GameSession, MoveRecord, PlayerStats

__all__ = [
    # Interfaces
    "GamePhase",
    "IGameController",
    "IPlayer",
    # Concrete
    "AIPlayer",
    "GameController",
    "GameEvents",
    "GameSession",
    "HumanPlayer",
    "MoveRecord",
    "PlayerStats",
]
