"""Move generation and the rules of chess over a GameState.

Legality is decided by simulation only: a pseudo-legal move is applied to a
clone of the state and rejected if it leaves the mover's king attacked. Pins,
discovered checks and check evasions all fall out of that one test.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from crimson.core.move import KINGSIDE, QUEENSIDE, DrawReason, Move, MoveFlags
from crimson.core.pieces import PROMOTION_TYPES, Color, Piece, PieceType
from crimson.core.state import GameState
from crimson.core.utils import coords_to_square, iter_coords, square_parity, square_to_coords

# (file delta, row delta). Row 0 is rank 8, so white moves toward lower rows.
KNIGHT_OFFSETS = ((1, 2), (2, 1), (-1, 2), (-2, 1), (1, -2), (2, -1), (-1, -2), (-2, -1))
KING_OFFSETS = tuple((df, dr) for dr in (-1, 0, 1) for df in (-1, 0, 1) if df or dr)
ROOK_DIRECTIONS = ((1, 0), (-1, 0), (0, 1), (0, -1))
BISHOP_DIRECTIONS = ((1, 1), (1, -1), (-1, 1), (-1, -1))
QUEEN_DIRECTIONS = ROOK_DIRECTIONS + BISHOP_DIRECTIONS

FIFTY_MOVE_HALFMOVES = 100


def _on_board(file: int, row: int) -> bool:
    return 0 <= file < 8 and 0 <= row < 8


def pawn_direction(color: Color) -> int:
    return -1 if color is Color.WHITE else 1


def home_row(color: Color) -> int:
    return 7 if color is Color.WHITE else 0


@dataclass
class MoveApplication:
    """Outcome of apply_move. Terminal flags are only filled for real moves."""

    state: GameState
    captured: Optional[Piece] = None
    check: bool = False
    checkmate: bool = False
    stalemate: bool = False
    draw: bool = False
    draw_reason: Optional[DrawReason] = None


# ── Pseudo-legal generation ────────────────────────────────────────────────


def generate_pseudo_moves(state: GameState, from_square: Optional[str] = None) -> List[Move]:
    """Pseudo-legal moves for the side to move, optionally from one square."""
    if from_square is not None:
        coords = square_to_coords(from_square)
        if coords is None:
            return []
        file, row = coords
        piece = state.board[row][file]
        if piece is None or piece.color is not state.turn:
            return []
        return _piece_moves(state, file, row, piece)

    moves = []
    for file, row in iter_coords():
        piece = state.board[row][file]
        if piece is not None and piece.color is state.turn:
            moves.extend(_piece_moves(state, file, row, piece))
    return moves


def _piece_moves(state: GameState, file: int, row: int, piece: Piece) -> List[Move]:
    if piece.type is PieceType.PAWN:
        return _pawn_moves(state, file, row, piece)
    if piece.type is PieceType.KNIGHT:
        return _step_moves(state, file, row, piece, KNIGHT_OFFSETS)
    if piece.type is PieceType.BISHOP:
        return _sliding_moves(state, file, row, piece, BISHOP_DIRECTIONS)
    if piece.type is PieceType.ROOK:
        return _sliding_moves(state, file, row, piece, ROOK_DIRECTIONS)
    if piece.type is PieceType.QUEEN:
        return _sliding_moves(state, file, row, piece, QUEEN_DIRECTIONS)
    return _step_moves(state, file, row, piece, KING_OFFSETS) + _castling_moves(state, file, row, piece)


def _pawn_moves(state: GameState, file: int, row: int, piece: Piece) -> List[Move]:
    board = state.board
    moves = []
    direction = pawn_direction(piece.color)
    start_row = 6 if piece.color is Color.WHITE else 1
    from_square = coords_to_square(file, row)

    ahead = row + direction
    if not _on_board(file, ahead):
        return moves

    if board[ahead][file] is None:
        moves.extend(_pawn_targets(from_square, file, ahead, piece.color, None))
        double = row + 2 * direction
        if row == start_row and board[double][file] is None:
            moves.append(Move(
                from_square=from_square,
                to_square=coords_to_square(file, double),
                piece=PieceType.PAWN,
                color=piece.color,
                flags=MoveFlags(double=True),
            ))

    for df in (-1, 1):
        target_file = file + df
        if not _on_board(target_file, ahead):
            continue
        target = board[ahead][target_file]
        target_square = coords_to_square(target_file, ahead)
        if target is not None:
            if target.color is not piece.color:
                moves.extend(_pawn_targets(from_square, target_file, ahead, piece.color, target))
        elif target_square == state.en_passant:
            # The victim sits beside the capturing pawn, one row behind the target.
            victim = board[row][target_file]
            if victim == Piece(PieceType.PAWN, piece.color.opposite):
                moves.append(Move(
                    from_square=from_square,
                    to_square=target_square,
                    piece=PieceType.PAWN,
                    color=piece.color,
                    captured=victim,
                    flags=MoveFlags(capture=True, en_passant=True),
                    capture_square=coords_to_square(target_file, row),
                ))
    return moves


def _pawn_targets(from_square: str, file: int, row: int, color: Color,
                  captured: Optional[Piece]) -> List[Move]:
    """One move, or four when the pawn lands on the last rank."""
    to_square = coords_to_square(file, row)
    if row != home_row(color.opposite):
        return [Move(
            from_square=from_square,
            to_square=to_square,
            piece=PieceType.PAWN,
            color=color,
            captured=captured,
            flags=MoveFlags(capture=captured is not None),
        )]
    return [
        Move(
            from_square=from_square,
            to_square=to_square,
            piece=PieceType.PAWN,
            color=color,
            captured=captured,
            promotion=promotion,
            flags=MoveFlags(capture=captured is not None, promotion=True),
        )
        for promotion in PROMOTION_TYPES
    ]


def _step_moves(state: GameState, file: int, row: int, piece: Piece, offsets) -> List[Move]:
    moves = []
    from_square = coords_to_square(file, row)
    for df, dr in offsets:
        f, r = file + df, row + dr
        if not _on_board(f, r):
            continue
        target = state.board[r][f]
        if target is None or target.color is not piece.color:
            moves.append(Move(
                from_square=from_square,
                to_square=coords_to_square(f, r),
                piece=piece.type,
                color=piece.color,
                captured=target,
                flags=MoveFlags(capture=target is not None),
            ))
    return moves


def _sliding_moves(state: GameState, file: int, row: int, piece: Piece, directions) -> List[Move]:
    moves = []
    from_square = coords_to_square(file, row)
    for df, dr in directions:
        f, r = file + df, row + dr
        while _on_board(f, r):
            target = state.board[r][f]
            if target is not None and target.color is piece.color:
                break
            moves.append(Move(
                from_square=from_square,
                to_square=coords_to_square(f, r),
                piece=piece.type,
                color=piece.color,
                captured=target,
                flags=MoveFlags(capture=target is not None),
            ))
            if target is not None:
                break
            f += df
            r += dr
    return moves


def _castling_moves(state: GameState, file: int, row: int, piece: Piece) -> List[Move]:
    """Castling is only generated when every precondition holds."""
    moves = []
    rights = state.castling.get(piece.color)
    if rights is None or (file, row) != (4, home_row(piece.color)):
        return moves

    board = state.board
    enemy = piece.color.opposite
    rook = Piece(PieceType.ROOK, piece.color)
    # side: (rook file, files that must be empty, files the king must not be attacked on)
    sides = []
    if rights.kingside:
        sides.append((KINGSIDE, 7, (5, 6), (4, 5, 6)))
    if rights.queenside:
        sides.append((QUEENSIDE, 0, (3, 2, 1), (4, 3, 2)))

    for side, rook_file, between, king_path in sides:
        if board[row][rook_file] != rook:
            continue
        if any(board[row][f] is not None for f in between):
            continue
        if any(_attacked(board, f, row, enemy) for f in king_path):
            continue
        moves.append(Move(
            from_square=coords_to_square(file, row),
            to_square=coords_to_square(king_path[-1], row),
            piece=PieceType.KING,
            color=piece.color,
            flags=MoveFlags(castle=side),
        ))
    return moves


# ── Attacks ────────────────────────────────────────────────────────────────


def is_square_attacked(state: GameState, square: str, by_color: Color) -> bool:
    """Whether `by_color` attacks `square`, regardless of whose turn it is."""
    coords = square_to_coords(square)
    if coords is None:
        return False
    return _attacked(state.board, coords[0], coords[1], by_color)


def _attacked(board, file: int, row: int, by_color: Color) -> bool:
    # A pawn attacks diagonally forward, so look one row back from its view.
    pawn_row = row - pawn_direction(by_color)
    for df in (-1, 1):
        f = file + df
        if _on_board(f, pawn_row):
            piece = board[pawn_row][f]
            if piece is not None and piece.color is by_color and piece.type is PieceType.PAWN:
                return True

    for df, dr in KNIGHT_OFFSETS:
        f, r = file + df, row + dr
        if _on_board(f, r):
            piece = board[r][f]
            if piece is not None and piece.color is by_color and piece.type is PieceType.KNIGHT:
                return True

    for df, dr in QUEEN_DIRECTIONS:
        diagonal = df != 0 and dr != 0
        f, r = file + df, row + dr
        distance = 1
        while _on_board(f, r):
            piece = board[r][f]
            if piece is not None:
                if piece.color is by_color:
                    if piece.type is PieceType.QUEEN:
                        return True
                    if diagonal and piece.type is PieceType.BISHOP:
                        return True
                    if not diagonal and piece.type is PieceType.ROOK:
                        return True
                    if distance == 1 and piece.type is PieceType.KING:
                        return True
                break
            f += df
            r += dr
            distance += 1
    return False


def find_king(state: GameState, color: Color) -> Optional[Tuple[int, int]]:
    king = Piece(PieceType.KING, color)
    for file, row in iter_coords():
        if state.board[row][file] == king:
            return file, row
    return None


def is_king_attacked(state: GameState, color: Color) -> bool:
    """False when `color` has no king on the board."""
    coords = find_king(state, color)
    if coords is None:
        return False
    return _attacked(state.board, coords[0], coords[1], color.opposite)


# ── Legality ───────────────────────────────────────────────────────────────


def is_legal_move(state: GameState, move: Move) -> bool:
    probe = state.clone()
    apply_move(probe, move, simulate=True)
    return not is_king_attacked(probe, move.color)


def iter_legal_moves(state: GameState, from_square: Optional[str] = None) -> Iterator[Move]:
    for move in generate_pseudo_moves(state, from_square):
        if is_legal_move(state, move):
            yield move


def legal_moves(state: GameState, from_square: Optional[str] = None) -> List[Move]:
    return list(iter_legal_moves(state, from_square))


def has_legal_move(state: GameState) -> bool:
    return next(iter_legal_moves(state), None) is not None


# ── Application ────────────────────────────────────────────────────────────


def apply_move(state: GameState, move: Move, simulate: bool = False) -> MoveApplication:
    """Play `move` on `state` in place. Callers pass a clone they own.

    With simulate=True only the board and bookkeeping fields are updated; the
    check/mate/stalemate/draw analysis (which generates every reply) is skipped.
    """
    board = state.board
    from_file, from_row = square_to_coords(move.from_square)
    to_file, to_row = square_to_coords(move.to_square)
    moving = board[from_row][from_file]

    board[from_row][from_file] = None
    if move.flags.en_passant:
        capture_file, capture_row = to_file, to_row - pawn_direction(move.color)
    else:
        capture_file, capture_row = to_file, to_row
    captured = board[capture_row][capture_file]
    board[capture_row][capture_file] = None

    board[to_row][to_file] = Piece(move.promotion, move.color) if move.promotion else moving

    if move.flags.castle == KINGSIDE:
        board[from_row][to_file - 1] = board[from_row][7]
        board[from_row][7] = None
    elif move.flags.castle == QUEENSIDE:
        board[from_row][to_file + 1] = board[from_row][0]
        board[from_row][0] = None

    state.en_passant = None
    if move.flags.double:
        state.en_passant = coords_to_square(to_file, to_row - pawn_direction(move.color))

    _update_castling_rights(state, moving, from_file, from_row, captured, capture_file, capture_row)

    if moving.type is PieceType.PAWN or captured is not None:
        state.halfmove_clock = 0
    else:
        state.halfmove_clock += 1

    if moving.color is Color.BLACK:
        state.fullmove_number += 1

    state.turn = move.color.opposite

    result = MoveApplication(state=state, captured=captured)
    if simulate:
        return result

    result.check = is_king_attacked(state, state.turn)
    no_moves = not has_legal_move(state)
    result.checkmate = no_moves and result.check
    result.stalemate = no_moves and not result.check
    if result.stalemate:
        result.draw, result.draw_reason = True, DrawReason.STALEMATE
    elif not no_moves:
        # A mating move is never also a draw.
        if is_insufficient_material(state):
            result.draw, result.draw_reason = True, DrawReason.INSUFFICIENT
        elif state.halfmove_clock >= FIFTY_MOVE_HALFMOVES:
            result.draw, result.draw_reason = True, DrawReason.FIFTY_MOVE
    return result


def _update_castling_rights(state: GameState, moving: Piece, from_file: int, from_row: int,
                            captured: Optional[Piece], capture_file: int, capture_row: int) -> None:
    """Rights are only ever revoked."""
    if moving.type is PieceType.KING:
        rights = state.castling[moving.color]
        rights.kingside = rights.queenside = False
    elif moving.type is PieceType.ROOK:
        _revoke_corner(state, moving.color, from_file, from_row)

    if captured is not None and captured.type is PieceType.ROOK:
        _revoke_corner(state, captured.color, capture_file, capture_row)


def _revoke_corner(state: GameState, color: Color, file: int, row: int) -> None:
    if row != home_row(color):
        return
    if file == 0:
        state.castling[color].queenside = False
    elif file == 7:
        state.castling[color].kingside = False


# ── Draws ──────────────────────────────────────────────────────────────────


def is_insufficient_material(state: GameState) -> bool:
    """Bare kings, a lone minor piece, or bishops all on one square color."""
    bishops = []
    knights = 0
    for file, row in iter_coords():
        piece = state.board[row][file]
        if piece is None:
            continue
        if piece.type in (PieceType.PAWN, PieceType.ROOK, PieceType.QUEEN):
            return False
        if piece.type is PieceType.BISHOP:
            bishops.append(square_parity(file, row))
        elif piece.type is PieceType.KNIGHT:
            knights += 1

    if not bishops and knights <= 1:
        return True
    if knights == 0 and bishops:
        return len(set(bishops)) == 1
    return False
