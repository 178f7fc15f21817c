"""Move and move-record types returned by the rules engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from crimson.core.pieces import Color, Piece, PieceType
from crimson.core.state import GameState

KINGSIDE = "k"
QUEENSIDE = "q"


class DrawReason(str, Enum):
    STALEMATE = "stalemate"
    INSUFFICIENT = "insufficient"
    FIFTY_MOVE = "fifty-move"


class GameStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"

    @property
    def is_terminal(self) -> bool:
        return self in (GameStatus.CHECKMATE, GameStatus.STALEMATE, GameStatus.DRAW)


@dataclass
class MoveFlags:
    capture: bool = False
    en_passant: bool = False
    double: bool = False
    promotion: bool = False
    castle: Optional[str] = None  # KINGSIDE / QUEENSIDE


@dataclass
class Move:
    from_square: str
    to_square: str
    piece: PieceType
    color: Color
    captured: Optional[Piece] = None
    promotion: Optional[PieceType] = None
    flags: MoveFlags = field(default_factory=MoveFlags)
    # Only set for en passant, where the victim is not on to_square.
    capture_square: Optional[str] = None

    @property
    def uci(self) -> str:
        """Coordinate text, e.g. 'e2e4' or 'e7e8q'."""
        suffix = self.promotion.value if self.promotion else ""
        return f"{self.from_square}{self.to_square}{suffix}"

    def __str__(self) -> str:
        return self.uci


@dataclass
class MoveRecord:
    """A committed move plus everything the collaborator needs to react to it."""

    move: Move
    notation: str
    captured: Optional[Piece] = None
    check: bool = False
    checkmate: bool = False
    stalemate: bool = False
    draw: bool = False
    draw_reason: Optional[DrawReason] = None
    previous_state: Optional[GameState] = None
    fullmove_number: int = 1

    @property
    def from_square(self) -> str:
        return self.move.from_square

    @property
    def to_square(self) -> str:
        return self.move.to_square

    @property
    def piece(self) -> PieceType:
        return self.move.piece

    @property
    def color(self) -> Color:
        return self.move.color

    @property
    def promotion(self) -> Optional[PieceType]:
        return self.move.promotion

    @property
    def flags(self) -> MoveFlags:
        return self.move.flags

    @property
    def uci(self) -> str:
        return self.move.uci

    @property
    def status(self) -> GameStatus:
        if self.checkmate:
            return GameStatus.CHECKMATE
        if self.stalemate:
            return GameStatus.STALEMATE
        if self.draw:
            return GameStatus.DRAW
        if self.check:
            return GameStatus.CHECK
        return GameStatus.IN_PROGRESS

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
