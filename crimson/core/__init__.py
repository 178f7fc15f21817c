"""Core engine components: board state, rules, notation, evaluator and bot."""

from .pieces import Color, Piece, PieceType
from .state import CastlingRights, GameState
from .move import DrawReason, GameStatus, Move, MoveFlags, MoveRecord
from .board import ChessBoard
from .evaluator import Evaluator
from .bot import CrimsonBot
