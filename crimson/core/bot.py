"""Heuristic move-selection bot.

The bot looks exactly one ply ahead: every legal move is played on the live
engine, the resulting position is scored, and the move is taken back. The
final pick is random among all moves scoring within `soft_margin` of the best.
"""

import logging
import math
import random
from typing import List, Optional, Tuple

from crimson.config import CONFIG, BotConfig
from crimson.core.board import ChessBoard
from crimson.core.evaluator import Evaluator
from crimson.core.move import Move
from crimson.core.pieces import Color, PieceType

logger = logging.getLogger(__name__)


class CrimsonBot:
    def __init__(
        self,
        engine: ChessBoard,
        color: Color = Color.BLACK,
        config: Optional[BotConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.engine = engine
        self.color = Color.parse(color)
        self.cfg = config or CONFIG.bot
        self.rng = rng or random.Random()
        self.evaluator = Evaluator(self.cfg)

    def choose_move(self) -> Optional[Move]:
        """Pick a move for the bot's color, or None if it cannot move now."""
        if self.engine.get_turn() is not self.color:
            return None
        scored = self.rank_moves()
        if not scored:
            return None

        best_score = scored[0][0]
        candidates = [move for score, move in scored if score >= best_score - self.cfg.soft_margin]
        choice = self.rng.choice(candidates)
        logger.debug("Bot %s: %d legal, %d near-best, chose %s",
                     self.color.label, len(scored), len(candidates), choice.uci)
        return choice

    def rank_moves(self) -> List[Tuple[float, Move]]:
        """All legal moves with their scores, best first."""
        scored = [(self.score_move(move), move) for move in self.collect_legal_moves()]
        scored.sort(key=lambda entry: entry[0], reverse=True)
        return scored

    def collect_legal_moves(self) -> List[Move]:
        moves = []
        for square, _piece in self.engine.pieces(self.color):
            moves.extend(self.engine.moves(square))
        return moves

    def score_move(self, move: Move) -> float:
        """Score one candidate by playing it, evaluating, and undoing it."""
        record = self.engine.push(move)
        if record is None:
            return -math.inf

        score = self.evaluator.evaluate(self.engine.export_board(), self.color)
        if record.checkmate:
            score = math.inf
        else:
            if record.captured is not None:
                score += self.evaluator.piece_value(record.captured.type) * self.cfg.capture_weight
            if record.flags.capture and record.piece is not PieceType.PAWN:
                score += self.cfg.capture_bonus
            if record.check:
                score += self.cfg.check_bonus * self.cfg.aggression
            if record.draw:
                score -= self.cfg.draw_penalty
            if record.flags.castle:
                score += self.cfg.castle_bonus
        self.engine.undo()

        score += (self.rng.random() - 0.5) * self.cfg.randomness * self.cfg.noise_scale
        return score
