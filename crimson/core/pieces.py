"""Piece, piece type and color value types."""

from dataclasses import dataclass
from enum import Enum


class Color(str, Enum):
    WHITE = "w"
    BLACK = "b"

    @property
    def opposite(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def label(self) -> str:
        """'white' or 'black'."""
        return self.name.lower()

    @classmethod
    def parse(cls, value) -> "Color":
        """Accept a Color, 'w'/'b' or 'white'/'black' (any case)."""
        if isinstance(value, Color):
            return value
        text = str(value).strip().lower()
        for color in cls:
            if text in (color.value, color.label):
                return color
        raise ValueError(f"Unknown color: {value!r}")


class PieceType(str, Enum):
    PAWN = "p"
    KNIGHT = "n"
    BISHOP = "b"
    ROOK = "r"
    QUEEN = "q"
    KING = "k"

    @classmethod
    def from_char(cls, char: str) -> "PieceType":
        """Map a letter (either case) to a piece type."""
        try:
            return cls(str(char).lower())
        except ValueError:
            raise ValueError(f"Unknown piece letter: {char!r}") from None


# Order in which a promoting pawn expands into moves.
PROMOTION_TYPES = (PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT)

BACK_RANK_ORDER = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


@dataclass(frozen=True)
class Piece:
    """Immutable piece value; two pieces are equal when type and color match."""

    type: PieceType
    color: Color

    @property
    def code(self) -> str:
        """Two-letter code such as 'wp' or 'bk'."""
        return f"{self.color.value}{self.type.value}"

    @property
    def letter(self) -> str:
        """Uppercase letter for white, lowercase for black."""
        return self.type.value.upper() if self.color is Color.WHITE else self.type.value

    @classmethod
    def from_letter(cls, letter: str) -> "Piece":
        color = Color.WHITE if letter.isupper() else Color.BLACK
        return cls(PieceType.from_char(letter), color)

    def __str__(self) -> str:
        return self.letter
