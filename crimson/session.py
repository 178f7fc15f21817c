"""GameSession: presentation-side game state around one engine and one bot.

Front ends own a session instead of keeping module globals. The session holds
who plays which color, the captured-piece trays, and the pending "thinking"
timer for the bot's reply. It never contains rules logic itself.
"""

import logging
import random
import threading
from typing import Callable, Dict, List, Optional

from crimson.config import CONFIG, BotConfig, SessionConfig
from crimson.core.board import ChessBoard, PromotionChoice
from crimson.core.bot import CrimsonBot
from crimson.core.move import MoveRecord
from crimson.core.pieces import Color, Piece

logger = logging.getLogger(__name__)

BotCallback = Callable[[Optional[MoveRecord]], None]

# bot_color not given: take it from SessionConfig
_DEFAULT = object()


def parse_bot_color(value) -> Optional[Color]:
    """'none' (or None) means two humans share the board."""
    if value is None or str(value).strip().lower() in ("", "none"):
        return None
    return Color.parse(value)


class GameSession:
    def __init__(
        self,
        engine: Optional[ChessBoard] = None,
        bot_color=_DEFAULT,
        bot_config: Optional[BotConfig] = None,
        config: Optional[SessionConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or CONFIG.session
        self.engine = engine or ChessBoard()
        self.rng = rng or random.Random()
        if bot_color is _DEFAULT:
            bot_color = self.config.bot_color
        self.bot_color = parse_bot_color(bot_color)
        self.bot = CrimsonBot(self.engine, self.bot_color, bot_config, self.rng) if self.bot_color else None

        self.captured: Dict[Color, List[Piece]] = {Color.WHITE: [], Color.BLACK: []}
        self.last_record: Optional[MoveRecord] = None
        self._lock = threading.RLock()
        self._timer: Optional[threading.Timer] = None
        self._timer_token = 0

    # ── State ─────────────────────────────────────────────────────────────

    @property
    def player_color(self) -> Optional[Color]:
        return self.bot_color.opposite if self.bot_color else None

    @property
    def lock(self) -> threading.RLock:
        """Held while the engine is mutated; front ends take it for consistent reads."""
        return self._lock

    @property
    def thinking(self) -> bool:
        return self._timer is not None

    @property
    def is_over(self) -> bool:
        return self.last_record is not None and self.last_record.is_terminal

    def is_bot_turn(self) -> bool:
        return self.bot_color is not None and self.engine.get_turn() is self.bot_color

    def status_text(self) -> str:
        record = self.last_record
        if record is not None and record.checkmate:
            return f"Checkmate! {record.color.label.capitalize()} wins."
        if record is not None and record.draw:
            return f"Draw by {record.draw_reason.value}."
        text = f"{self.engine.get_turn().label.capitalize()} to move"
        if record is not None and record.check:
            text += " (check)"
        return text

    # ── Moves ─────────────────────────────────────────────────────────────

    def player_move(self, from_square: str, to_square: str,
                    promotion: PromotionChoice = None) -> Optional[MoveRecord]:
        """Commit a human move; None if illegal, finished, or the bot is on move."""
        with self._lock:
            if self.is_over or self.is_bot_turn():
                return None
            record = self.engine.make_move(from_square, to_square, promotion)
            if record is not None:
                self._after_move(record)
            return record

    def play_bot_move(self) -> Optional[MoveRecord]:
        """Let the bot move now. None if it is not the bot's turn or it has no move."""
        with self._lock:
            if self.bot is None or self.is_over or not self.is_bot_turn():
                return None
            move = self.bot.choose_move()
            if move is None:
                return None
            record = self.engine.push(move)
            if record is not None:
                self._after_move(record)
            return record

    def schedule_bot_move(self, callback: Optional[BotCallback] = None,
                          delay: Optional[float] = None) -> bool:
        """Play the bot's reply after a short "thinking" delay (seconds).

        Returns False when there is nothing to schedule. A pending reply can be
        dropped with cancel_pending(); reset() and undo() do so as well.
        """
        with self._lock:
            if self.bot is None or self.is_over or not self.is_bot_turn():
                return False
            self._cancel_timer()
            if delay is None:
                delay = (self.config.think_delay_ms + self.rng.random() * self.config.think_jitter_ms) / 1000.0
            token = self._timer_token
            self._timer = threading.Timer(delay, self._run_scheduled, args=(token, callback))
            self._timer.daemon = True
            self._timer.start()
            logger.debug("Bot reply scheduled in %.3fs", delay)
            return True

    def cancel_pending(self):
        with self._lock:
            self._cancel_timer()

    def wait_for_bot(self, timeout: Optional[float] = None) -> bool:
        """Block until a scheduled reply has run. False if it is still pending."""
        timer = self._timer
        if timer is None:
            return True
        timer.join(timeout)
        return not timer.is_alive()

    def undo(self) -> List[MoveRecord]:
        """Take back the last move, or the last two when the bot just replied.

        Any pending reply is cancelled. If the bot plays white and only its
        first move is undone, the bot is on move again; callers decide whether
        to schedule_bot_move() (the HTTP adapter does).
        """
        with self._lock:
            self._cancel_timer()
            undone = []
            record = self.engine.undo()
            if record is not None:
                undone.append(record)
                if self.bot_color is not None and record.color is self.bot_color:
                    earlier = self.engine.undo()
                    if earlier is not None:
                        undone.append(earlier)
            for item in undone:
                if item.captured is not None:
                    tray = self.captured[item.captured.color]
                    if tray:
                        tray.pop()
            self.last_record = self.engine.move_history[-1] if self.engine.move_history else None
            return undone

    def reset(self):
        with self._lock:
            self._cancel_timer()
            self.engine.reset()
            for tray in self.captured.values():
                tray.clear()
            self.last_record = None
            logger.info("New game (bot plays %s)", self.bot_color.label if self.bot_color else "nobody")

    # ── Internals ─────────────────────────────────────────────────────────

    def _after_move(self, record: MoveRecord):
        self.last_record = record
        if record.captured is not None:
            self.captured[record.captured.color].append(record.captured)
        if record.is_terminal:
            self._cancel_timer()
            logger.info("Game over: %s", self.status_text())

    def _cancel_timer(self):
        self._timer_token += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.debug("Pending bot reply cancelled")

    def _run_scheduled(self, token: int, callback: Optional[BotCallback]):
        with self._lock:
            if token != self._timer_token:
                return
            record = self.play_bot_move()
            self._timer = None
        if callback is not None:
            callback(record)
