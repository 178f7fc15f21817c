"""Terminal front end: play against the bot (or hot-seat) in coordinate notation."""

import argparse
import logging
import random
import sys
from dataclasses import replace
from typing import Callable, List, Optional

from crimson.config import CONFIG, configure_logging
from crimson.core.board import ChessBoard
from crimson.core.move import MoveRecord
from crimson.core.notation import piece_symbol
from crimson.session import GameSession

logger = logging.getLogger(__name__)

HELP = "Enter moves in coordinate notation (e2e4, g7g8q). Type 'undo', 'reset' or 'exit'."


def render_board(engine: ChessBoard, unicode_glyphs: bool = True) -> str:
    lines = ["  +------------------------+"]
    for row_index, row in enumerate(engine.export_board()):
        cells = []
        for piece in row:
            if piece is None:
                cells.append(" . ")
            elif unicode_glyphs:
                cells.append(f" {piece_symbol(piece.type, piece.color)} ")
            else:
                cells.append(f" {piece.letter} ")
        lines.append(f"{8 - row_index} |{''.join(cells)}|")
    lines.append("  +------------------------+")
    lines.append("    a  b  c  d  e  f  g  h")
    return "\n".join(lines)


def _announce(session: GameSession, record: MoveRecord, write: Callable[[str], None]):
    """Print a move; on checkmate or draw print the result and start over."""
    write(f"{record.fullmove_number}. {record.notation}")
    if record.is_terminal:
        write(session.status_text())
        session.reset()


def run(session: GameSession, read: Optional[Callable[[str], str]] = None,
        write: Optional[Callable[[str], None]] = None, unicode_glyphs: bool = True):
    read = read or input
    write = write or print
    write(CONFIG.ui.engine_name)
    write(HELP)
    while True:
        write(render_board(session.engine, unicode_glyphs))

        if session.is_bot_turn():
            record = session.play_bot_move()
            if record is None:
                write("Bot has no move.")
                break
            _announce(session, record, write)
            continue

        try:
            line = read(f"{session.engine.get_turn().label} to move > ")
        except EOFError:
            break
        line = line.strip().lower()
        if not line:
            continue
        if line in ("exit", "quit"):
            break
        if line == "reset":
            session.reset()
            continue
        if line == "undo":
            if not session.undo():
                write("Nothing to undo.")
            continue
        if len(line) < 4:
            write("Please enter moves like e2e4 or g7g8q for promotion.")
            continue

        promotion = line[4] if len(line) >= 5 else None
        record = session.player_move(line[:2], line[2:4], promotion)
        if record is None:
            write("Illegal move, try again.")
            continue
        _announce(session, record, write)
    write("Goodbye.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play chess against the Crimson bot.")
    parser.add_argument("--bot", choices=["white", "black", "none"], default=CONFIG.session.bot_color,
                        help="color the bot plays ('none' for two players)")
    parser.add_argument("--randomness", type=float, default=CONFIG.bot.randomness)
    parser.add_argument("--aggression", type=float, default=CONFIG.bot.aggression)
    parser.add_argument("--seed", type=int, default=None, help="seed for reproducible bot play")
    parser.add_argument("--ascii", action="store_true", help="draw pieces as letters")
    parser.add_argument("--log-level", default=CONFIG.log_level)
    return parser


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        bot_config = replace(CONFIG.bot, randomness=args.randomness, aggression=args.aggression)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    session = GameSession(bot_color=args.bot, bot_config=bot_config, rng=random.Random(args.seed))
    logger.debug("Starting CLI game, bot=%s seed=%s", args.bot, args.seed)
    run(session, unicode_glyphs=CONFIG.ui.unicode_glyphs and not args.ascii)
    return 0


if __name__ == "__main__":
    sys.exit(main())
