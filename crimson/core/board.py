"""ChessBoard: the rules engine's public surface, with move history and undo."""

import logging
from typing import List, NamedTuple, Optional, Tuple, Union

from crimson.core import rules
from crimson.core.move import GameStatus, Move, MoveRecord
from crimson.core.notation import describe_move, piece_symbol
from crimson.core.pieces import Color, Piece, PieceType
from crimson.core.state import Board, GameState, clone_board
from crimson.core.utils import is_valid_square

logger = logging.getLogger(__name__)

PromotionChoice = Union[PieceType, str, None]


class PlacedPiece(NamedTuple):
    square: str
    piece: Piece


class ChessBoard:
    def __init__(self, state: Optional[GameState] = None):
        """Start from the standard position, or from a copy of `state`."""
        self.state = state.clone() if state is not None else GameState.initial()
        self.move_history: List[MoveRecord] = []

    def reset(self):
        """Reset to the initial position and forget the history."""
        self.state = GameState.initial()
        self.move_history.clear()

    def load_state(self, state: GameState):
        """Replace the position with a copy of `state`. History is cleared."""
        self.state = state.clone()
        self.move_history.clear()

    # ── Queries ───────────────────────────────────────────────────────────

    @property
    def turn(self) -> Color:
        return self.state.turn

    def get_turn(self) -> Color:
        return self.state.turn

    @property
    def history(self) -> Tuple[MoveRecord, ...]:
        return tuple(self.move_history)

    def get_piece(self, square: str) -> Optional[Piece]:
        return self.state.piece_at(square)

    def set_piece(self, square: str, piece: Optional[Piece]):
        """Edit the current position directly. Invalid squares are ignored."""
        self.state.place(square, piece)

    def pieces(self, color: Optional[Color] = None) -> List[PlacedPiece]:
        """Occupied squares, optionally for one color only."""
        return [
            PlacedPiece(square, piece)
            for square, piece in self.state.occupied()
            if color is None or piece.color is color
        ]

    def moves(self, square: Optional[str] = None) -> List[Move]:
        """Legal moves from `square`, or every legal move for the side to move."""
        return rules.legal_moves(self.state, square)

    def in_check(self) -> bool:
        return rules.is_king_attacked(self.state, self.state.turn)

    def status(self) -> GameStatus:
        """Status of the current position, computed from scratch."""
        check = self.in_check()
        if not rules.has_legal_move(self.state):
            return GameStatus.CHECKMATE if check else GameStatus.STALEMATE
        if rules.is_insufficient_material(self.state):
            return GameStatus.DRAW
        if self.state.halfmove_clock >= rules.FIFTY_MOVE_HALFMOVES:
            return GameStatus.DRAW
        return GameStatus.CHECK if check else GameStatus.IN_PROGRESS

    def is_game_over(self) -> bool:
        return self.status().is_terminal

    def export_board(self) -> Board:
        """Copy of the grid; callers may mutate it freely."""
        return clone_board(self.state.board)

    def export_state(self) -> GameState:
        return self.state.clone()

    @staticmethod
    def piece_symbol(piece_type: PieceType, color: Color) -> str:
        return piece_symbol(piece_type, color)

    # ── Moves ─────────────────────────────────────────────────────────────

    def make_move(self, from_square: str, to_square: str,
                  promotion: PromotionChoice = None) -> Optional[MoveRecord]:
        """Commit the legal move matching these fields, or return None.

        A promotion with no choice defaults to a queen. Naming a promotion for
        a move that does not promote matches nothing.
        """
        if not is_valid_square(from_square):
            return None
        if promotion is not None and not isinstance(promotion, PieceType):
            try:
                promotion = PieceType.from_char(promotion)
            except ValueError:
                return None

        wanted = promotion or PieceType.QUEEN
        for move in self.moves(from_square):
            if move.to_square != to_square:
                continue
            if move.promotion is not None:
                if move.promotion is wanted:
                    return self._commit(move)
            elif promotion is None:
                return self._commit(move)
        return None

    def make_move_uci(self, text: str) -> Optional[MoveRecord]:
        """Commit a move given as coordinate text such as 'e2e4' or 'g7g8n'."""
        text = (text or "").strip().lower()
        if len(text) not in (4, 5):
            return None
        from_square, to_square = text[:2], text[2:4]
        if not (is_valid_square(from_square) and is_valid_square(to_square)):
            return None
        promotion = text[4] if len(text) == 5 else None
        return self.make_move(from_square, to_square, promotion)

    def push(self, move: Move) -> Optional[MoveRecord]:
        """Commit a Move previously returned by moves()."""
        return self.make_move(move.from_square, move.to_square, move.promotion)

    def undo(self) -> Optional[MoveRecord]:
        """Restore the position before the last move and return its record."""
        if not self.move_history:
            return None
        record = self.move_history.pop()
        if record.previous_state is not None:
            self.state = record.previous_state.clone()
        logger.debug("Undid %s", record.uci)
        return record

    def _commit(self, move: Move) -> MoveRecord:
        previous = self.state
        applied = rules.apply_move(previous.clone(), move)
        self.state = applied.state
        record = MoveRecord(
            move=move,
            notation=describe_move(
                move,
                check=applied.check,
                checkmate=applied.checkmate,
                stalemate=applied.stalemate,
                draw=applied.draw,
            ),
            captured=applied.captured,
            check=applied.check,
            checkmate=applied.checkmate,
            stalemate=applied.stalemate,
            draw=applied.draw,
            draw_reason=applied.draw_reason,
            previous_state=previous,
            fullmove_number=previous.fullmove_number,
        )
        self.move_history.append(record)
        logger.debug("Played %s (%s)", move.uci, record.status.value)
        return record

    def __str__(self) -> str:
        lines = []
        for row in self.state.board:
            lines.append(" ".join(piece.letter if piece else "." for piece in row))
        return "\n".join(lines)
