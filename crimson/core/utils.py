"""Square coordinate helpers shared by the rules engine and the front ends.

Squares are two-character strings ("e4"). Internally the board is a list of
rows where row 0 is rank 8 and column 0 is file a, so "a8" -> (0, 0) and
"h1" -> (7, 7). Conversions never raise; bad input gives None.
"""

from typing import Iterator, Optional, Tuple

FILES = "abcdefgh"
RANKS = "12345678"


def square_to_coords(square) -> Optional[Tuple[int, int]]:
    """Return (file, row) for a square string, or None if it is not one."""
    if not isinstance(square, str) or len(square) != 2:
        return None
    file = FILES.find(square[0])
    if file < 0 or square[1] not in RANKS:
        return None
    return file, 8 - int(square[1])


def coords_to_square(file: int, row: int) -> Optional[str]:
    """Inverse of square_to_coords. Off-board coordinates give None."""
    if not (0 <= file < 8 and 0 <= row < 8):
        return None
    return f"{FILES[file]}{8 - row}"


def is_valid_square(square) -> bool:
    return square_to_coords(square) is not None


def square_parity(file: int, row: int) -> int:
    """Square color as 0/1; equal values mean same-colored squares."""
    return (file + row) % 2


def iter_coords() -> Iterator[Tuple[int, int]]:
    """All (file, row) pairs, a8 first, in reading order."""
    for row in range(8):
        for file in range(8):
            yield file, row
