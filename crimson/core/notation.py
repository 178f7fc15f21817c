"""Human-readable move text.

This is not SAN: there is no disambiguation, every non-castling move spells
out both squares, e.g. "♘ g1 – f3" or "♙ e7 × d8 (= ♕) +".
"""

from crimson.core.move import KINGSIDE, QUEENSIDE, Move
from crimson.core.pieces import Color, PieceType

PIECE_SYMBOLS = {
    PieceType.KING: {Color.WHITE: "♔", Color.BLACK: "♚"},
    PieceType.QUEEN: {Color.WHITE: "♕", Color.BLACK: "♛"},
    PieceType.ROOK: {Color.WHITE: "♖", Color.BLACK: "♜"},
    PieceType.BISHOP: {Color.WHITE: "♗", Color.BLACK: "♝"},
    PieceType.KNIGHT: {Color.WHITE: "♘", Color.BLACK: "♞"},
    PieceType.PAWN: {Color.WHITE: "♙", Color.BLACK: "♟"},
}

CAPTURE_GLYPH = "×"
MOVE_GLYPH = "–"
CHECK_MARK = "+"
MATE_MARK = "#"
DRAW_MARK = "½"


def piece_symbol(piece_type: PieceType, color: Color) -> str:
    return PIECE_SYMBOLS[piece_type][color]


def describe_move(
    move: Move,
    check: bool = False,
    checkmate: bool = False,
    stalemate: bool = False,
    draw: bool = False,
) -> str:
    """Render a move with its trailing mate/check/draw marker."""
    if move.flags.castle == KINGSIDE:
        text = "O-O"
    elif move.flags.castle == QUEENSIDE:
        text = "O-O-O"
    else:
        glyph = CAPTURE_GLYPH if move.flags.capture else MOVE_GLYPH
        text = f"{piece_symbol(move.piece, move.color)} {move.from_square} {glyph} {move.to_square}"
        if move.promotion:
            text += f" (= {piece_symbol(move.promotion, move.color)})"

    if checkmate:
        text += f" {MATE_MARK}"
    elif check:
        text += f" {CHECK_MARK}"
    elif stalemate or draw:
        text += f" {DRAW_MARK}"
    return text
