"""Static material + piece-square evaluator used by the bot."""

from typing import Dict, List, Optional

from crimson.config import CONFIG, BotConfig
from crimson.core.pieces import Color, PieceType
from crimson.core.state import Board

# Tables are laid out from black's side: index 0 is a8, index 63 is h1.
# White uses the same tables reversed.
PST_PAWN = [
    0, 5, 5, 0, 5, 10, 50, 0,
    0, 10, -5, 0, 5, 10, 10, 0,
    0, 10, -10, 20, 25, 5, 10, 0,
    5, 5, 10, 25, 30, 10, 5, 5,
    10, 10, 20, 30, 35, 20, 10, 10,
    15, 15, 20, 25, 25, 20, 15, 15,
    30, 30, 30, 35, 35, 30, 30, 30,
    0, 0, 0, 0, 0, 0, 0, 0,
]
PST_KNIGHT = [
    -30, -20, -10, -10, -10, -10, -20, -30,
    -20, -5, 0, 5, 5, 0, -5, -20,
    -10, 5, 10, 15, 15, 10, 5, -10,
    -10, 0, 15, 20, 20, 15, 0, -10,
    -10, 5, 15, 20, 20, 15, 5, -10,
    -10, 0, 10, 15, 15, 10, 0, -10,
    -20, -5, 0, 0, 0, 0, -5, -20,
    -30, -20, -10, -10, -10, -10, -20, -30,
]
PST_BISHOP = [
    -20, -10, -10, -5, -5, -10, -10, -20,
    -10, 0, 10, 0, 0, 10, 0, -10,
    -10, 10, 5, 10, 10, 5, 10, -10,
    -5, 0, 10, 10, 10, 10, 0, -5,
    0, 5, 10, 10, 10, 10, 5, 0,
    -10, 0, 10, 10, 10, 10, 0, -10,
    -10, 0, 0, 0, 0, 0, 0, -10,
    -20, -10, -10, -5, -5, -10, -10, -20,
]
PST_ROOK = [
    0, 0, 5, 10, 10, 5, 0, 0,
    -5, 0, 0, 0, 0, 0, 0, -5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    5, 10, 10, 10, 10, 10, 10, 5,
    0, 0, 0, 5, 5, 0, 0, 0,
]
PST_QUEEN = [
    -20, -10, -10, -5, -5, -10, -10, -20,
    -10, 0, 5, 0, 0, 5, 0, -10,
    -10, 5, 5, 5, 5, 5, 5, -10,
    -5, 0, 5, 5, 5, 5, 0, -5,
    0, 0, 5, 5, 5, 5, 0, -5,
    -10, 5, 5, 5, 5, 5, 5, -10,
    -10, 0, 5, 0, 0, 5, 0, -10,
    -20, -10, -10, -5, -5, -10, -10, -20,
]
PST_KING = [
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -20, -30, -30, -40, -40, -30, -30, -20,
    -10, -20, -20, -20, -20, -20, -20, -10,
    20, 20, 0, 0, 0, 0, 20, 20,
    20, 30, 10, 0, 0, 10, 30, 20,
]

_BLACK_TABLES = {
    PieceType.PAWN: PST_PAWN,
    PieceType.KNIGHT: PST_KNIGHT,
    PieceType.BISHOP: PST_BISHOP,
    PieceType.ROOK: PST_ROOK,
    PieceType.QUEEN: PST_QUEEN,
    PieceType.KING: PST_KING,
}

PIECE_SQUARE_TABLES: Dict[Color, Dict[PieceType, List[int]]] = {
    Color.BLACK: _BLACK_TABLES,
    Color.WHITE: {pt: table[::-1] for pt, table in _BLACK_TABLES.items()},
}


class Evaluator:
    def __init__(self, config: Optional[BotConfig] = None):
        self.cfg = config or CONFIG.bot

    def piece_value(self, piece_type: PieceType) -> int:
        return self.cfg.piece_values.get(piece_type.name, 0)

    def evaluate(self, board: Board, perspective: Color) -> float:
        """Material plus weighted positional score, positive favors `perspective`."""
        total = 0.0
        for row_index, row in enumerate(board):
            for file, piece in enumerate(row):
                if piece is None:
                    continue
                positional = PIECE_SQUARE_TABLES[piece.color][piece.type][row_index * 8 + file]
                value = self.piece_value(piece.type) + positional * self.cfg.positional_weight
                total += value if piece.color is perspective else -value
        return total
