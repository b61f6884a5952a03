"""AI players for Chain Reaction.

Create AIs through the factory or the per-game context:

    from chainreaction.ai import AIGameContext, choose_move

    context = AIGameContext.for_game(
        state,
        controls={PlayerColor.BLUE: PlayerControl.AI},
        ai_configs={PlayerColor.BLUE: AIConfig(strategy=AIStrategy.MINIMAX)},
    )
    move = choose_move(state, PlayerColor.BLUE, context)

Architecture:
- base.py: BaseAI abstract base class
- heuristic_ai.py: one-ply weighted scoring of every legal move
- minimax_ai.py: paranoid alpha-beta search with iterative deepening
- personality.py: per-game category multipliers and rival
- context.py: AIGameContext and choose_move
- factory.py: AIFactory
"""

from .base import BaseAI, ScoredMove
from .context import AIGameContext, choose_move
from .factory import AIFactory, choose_ai_move
from .heuristic_ai import HeuristicAI
from .minimax_ai import MinimaxAI
from .personality import AIPersonality

__all__ = [
    "AIFactory",
    "AIGameContext",
    "AIPersonality",
    "BaseAI",
    "HeuristicAI",
    "MinimaxAI",
    "ScoredMove",
    "choose_ai_move",
    "choose_move",
]
