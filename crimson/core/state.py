"""Game state: board grid, side to move, castling rights, en passant and clocks."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from crimson.core.pieces import BACK_RANK_ORDER, Color, Piece, PieceType
from crimson.core.utils import coords_to_square, iter_coords, square_to_coords

Board = List[List[Optional[Piece]]]


def empty_board() -> Board:
    return [[None] * 8 for _ in range(8)]


def initial_board() -> Board:
    """Standard starting layout, black on rows 0-1, white on rows 6-7."""
    board = empty_board()
    for file, piece_type in enumerate(BACK_RANK_ORDER):
        board[0][file] = Piece(piece_type, Color.BLACK)
        board[1][file] = Piece(PieceType.PAWN, Color.BLACK)
        board[6][file] = Piece(PieceType.PAWN, Color.WHITE)
        board[7][file] = Piece(piece_type, Color.WHITE)
    return board


def clone_board(board: Board) -> Board:
    # Pieces are frozen, copying the rows is a full deep copy.
    return [row[:] for row in board]


@dataclass
class CastlingRights:
    kingside: bool = True
    queenside: bool = True

    def copy(self) -> "CastlingRights":
        return CastlingRights(self.kingside, self.queenside)


def _full_rights() -> Dict[Color, CastlingRights]:
    return {Color.WHITE: CastlingRights(), Color.BLACK: CastlingRights()}


@dataclass
class GameState:
    """Complete position. Committed moves replace it, they never patch it."""

    board: Board = field(default_factory=initial_board)
    turn: Color = Color.WHITE
    castling: Dict[Color, CastlingRights] = field(default_factory=_full_rights)
    en_passant: Optional[str] = None
    halfmove_clock: int = 0
    fullmove_number: int = 1

    @classmethod
    def initial(cls) -> "GameState":
        return cls()

    @classmethod
    def empty(cls, turn: Color = Color.WHITE) -> "GameState":
        """Empty board with no castling rights, for building test positions."""
        return cls(
            board=empty_board(),
            turn=turn,
            castling={
                Color.WHITE: CastlingRights(False, False),
                Color.BLACK: CastlingRights(False, False),
            },
        )

    def clone(self) -> "GameState":
        return GameState(
            board=clone_board(self.board),
            turn=self.turn,
            castling={color: rights.copy() for color, rights in self.castling.items()},
            en_passant=self.en_passant,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
        )

    def piece_at(self, square: str) -> Optional[Piece]:
        coords = square_to_coords(square)
        if coords is None:
            return None
        file, row = coords
        return self.board[row][file]

    def place(self, square: str, piece: Optional[Piece]) -> None:
        """Put a piece on (or clear) a square. Invalid squares are ignored."""
        coords = square_to_coords(square)
        if coords is None:
            return
        file, row = coords
        self.board[row][file] = piece

    def occupied(self):
        """Yield (square, piece) for every occupied square, a8 first."""
        for file, row in iter_coords():
            piece = self.board[row][file]
            if piece is not None:
                yield coords_to_square(file, row), piece
