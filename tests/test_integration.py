"""
Integration test suite for Crimson chess.

Tests components working together end-to-end:
- Rules engine checked against python-chess on random games
- Move-count (perft) positions with castling, en passant and promotion
- Bot vs bot full games
- GameSession (turn ownership, thinking timer, undo, trays)
- Terminal front end with scripted input
- FastAPI REST adapter
"""

import logging
import random
import threading

import chess
import pytest
from fastapi.testclient import TestClient

from crimson.config import BotConfig, SessionConfig
from crimson.core.board import ChessBoard
from crimson.core.bot import CrimsonBot
from crimson.core.move import DrawReason
from crimson.core.pieces import Color, Piece, PieceType
from crimson.core.state import CastlingRights, GameState
from crimson.session import GameSession, parse_bot_color
from interface import api, cli


def state_from_python_chess(pc_board: chess.Board) -> GameState:
    state = GameState.empty(Color.WHITE if pc_board.turn == chess.WHITE else Color.BLACK)
    for square, piece in pc_board.piece_map().items():
        state.place(chess.square_name(square), Piece.from_letter(piece.symbol()))
    for color, pc_color in ((Color.WHITE, chess.WHITE), (Color.BLACK, chess.BLACK)):
        state.castling[color] = CastlingRights(
            pc_board.has_kingside_castling_rights(pc_color),
            pc_board.has_queenside_castling_rights(pc_color),
        )
    if pc_board.ep_square is not None:
        state.en_passant = chess.square_name(pc_board.ep_square)
    state.halfmove_clock = pc_board.halfmove_clock
    state.fullmove_number = pc_board.fullmove_number
    return state


def perft(board: ChessBoard, depth: int) -> int:
    moves = board.moves()
    if depth == 1:
        return len(moves)
    total = 0
    for move in moves:
        board.push(move)
        total += perft(board, depth - 1)
        board.undo()
    return total


def fast_session(**kwargs) -> GameSession:
    config = SessionConfig(think_delay_ms=0, think_jitter_ms=0)
    kwargs.setdefault("rng", random.Random(11))
    return GameSession(config=config, **kwargs)


# ════════════════════════════════════════════════════════════════════════════
#  RULES VS PYTHON-CHESS
# ════════════════════════════════════════════════════════════════════════════

class TestAgainstPythonChess:
    @pytest.mark.parametrize("seed", range(6))
    def test_random_game_matches(self, seed):
        """Legal move sets and check/mate/stalemate flags agree ply by ply."""
        rng = random.Random(seed)
        ours = ChessBoard()
        theirs = chess.Board()

        for _ply in range(250):
            our_moves = sorted(m.uci for m in ours.moves())
            their_moves = sorted(m.uci() for m in theirs.legal_moves)
            assert our_moves == their_moves, f"diverged after {theirs.move_stack}"
            assert ours.in_check() == theirs.is_check()
            if not our_moves:
                break

            uci = rng.choice(our_moves)
            record = ours.make_move_uci(uci)
            theirs.push_uci(uci)

            assert record.checkmate == theirs.is_checkmate()
            assert record.stalemate == theirs.is_stalemate()
            assert ours.state.halfmove_clock == theirs.halfmove_clock
            assert ours.state.fullmove_number == theirs.fullmove_number
            if record.draw_reason is DrawReason.INSUFFICIENT:
                assert theirs.is_insufficient_material()
            if record.draw_reason is DrawReason.FIFTY_MOVE:
                assert theirs.halfmove_clock >= 100
            if record.is_terminal:
                break

    @pytest.mark.parametrize("fen", [
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
        "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
        "r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1",
        "rnbqkbnr/ppp1p1pp/8/3pPp2/8/8/PPPP1PPP/RNBQKBNR w KQkq f6 0 3",
        "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1",
        "4k3/8/8/8/8/8/8/4K2R w K - 0 1",
    ])
    def test_positions_match(self, fen):
        theirs = chess.Board(fen)
        ours = ChessBoard(state_from_python_chess(theirs))
        assert sorted(m.uci for m in ours.moves()) == sorted(m.uci() for m in theirs.legal_moves)
        assert ours.in_check() == theirs.is_check()


# ════════════════════════════════════════════════════════════════════════════
#  PERFT
# ════════════════════════════════════════════════════════════════════════════

class TestPerft:
    def test_start_position(self):
        board = ChessBoard()
        assert perft(board, 1) == 20
        assert perft(board, 2) == 400
        assert board.state == GameState.initial()

    @pytest.mark.parametrize("fen,depth1,depth2", [
        ("r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1", 48, 2039),
        ("8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1", 14, 191),
        ("r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1", 6, 264),
    ])
    def test_known_positions(self, fen, depth1, depth2):
        board = ChessBoard(state_from_python_chess(chess.Board(fen)))
        before = board.export_state()
        assert perft(board, 1) == depth1
        assert perft(board, 2) == depth2
        assert board.state == before


# ════════════════════════════════════════════════════════════════════════════
#  BOT VS BOT
# ════════════════════════════════════════════════════════════════════════════

class TestBotGames:
    @pytest.mark.parametrize("seed", range(3))
    def test_bot_vs_bot_plays_legal_moves(self, seed):
        engine = ChessBoard()
        rng = random.Random(seed)
        bots = {
            Color.WHITE: CrimsonBot(engine, Color.WHITE, rng=rng),
            Color.BLACK: CrimsonBot(engine, Color.BLACK, rng=rng),
        }
        plies = 0
        while plies < 60:
            move = bots[engine.get_turn()].choose_move()
            if move is None:
                break
            assert move.uci in {m.uci for m in engine.moves()}
            record = engine.push(move)
            plies += 1
            if record.is_terminal:
                break
        assert plies > 10 or engine.is_game_over()
        assert len(engine.history) == plies


# ════════════════════════════════════════════════════════════════════════════
#  GAME SESSION
# ════════════════════════════════════════════════════════════════════════════

class TestGameSession:
    def test_parse_bot_color(self):
        assert parse_bot_color("none") is None
        assert parse_bot_color(None) is None
        assert parse_bot_color("White") is Color.WHITE
        assert parse_bot_color("b") is Color.BLACK
        with pytest.raises(ValueError):
            parse_bot_color("purple")

    def test_turn_ownership(self):
        s = fast_session(bot_color="black")
        assert s.player_color is Color.WHITE
        assert s.play_bot_move() is None  # white to move
        assert s.player_move("e2", "e4") is not None
        assert s.is_bot_turn()
        assert s.player_move("e7", "e5") is None  # bot's move
        record = s.play_bot_move()
        assert record.color is Color.BLACK
        assert not s.is_bot_turn()

    def test_bot_plays_white_first(self):
        s = fast_session(bot_color="white")
        assert s.is_bot_turn()
        assert s.player_move("e7", "e5") is None
        assert s.play_bot_move().color is Color.WHITE

    def test_scheduled_reply_runs_callback(self):
        s = fast_session(bot_color="black")
        s.player_move("e2", "e4")
        done = threading.Event()
        results = []

        def on_reply(record):
            results.append(record)
            done.set()

        assert s.schedule_bot_move(on_reply, delay=0.01)
        assert done.wait(5)
        assert s.wait_for_bot(5)
        assert not s.thinking
        assert results[0].color is Color.BLACK
        assert len(s.engine.history) == 2

    def test_schedule_refused_when_not_bot_turn(self):
        s = fast_session(bot_color="black")
        assert not s.schedule_bot_move(delay=0.01)
        assert not s.thinking

    def test_default_delay_comes_from_config(self):
        s = fast_session(bot_color="black")
        s.player_move("e2", "e4")
        assert s.schedule_bot_move()
        assert s.wait_for_bot(5)
        assert s.engine.get_turn() is Color.WHITE

    def test_cancel_pending_reply(self):
        s = fast_session(bot_color="black")
        s.player_move("e2", "e4")
        assert s.schedule_bot_move(delay=30)
        assert s.thinking
        s.cancel_pending()
        assert not s.thinking
        assert len(s.engine.history) == 1
        assert s.is_bot_turn()

    def test_reset_cancels_pending_reply(self):
        s = fast_session(bot_color="black")
        s.player_move("e2", "e4")
        s.schedule_bot_move(delay=30)
        s.reset()
        assert not s.thinking
        assert s.engine.history == ()
        assert s.engine.state == GameState.initial()

    def test_undo_takes_back_bot_reply_and_player_move(self):
        s = fast_session(bot_color="black")
        s.player_move("e2", "e4")
        s.play_bot_move()
        undone = s.undo()
        assert [r.color for r in undone] == [Color.BLACK, Color.WHITE]
        assert s.engine.state == GameState.initial()
        assert s.last_record is None

    def test_undo_single_ply_when_bot_has_not_replied(self):
        s = fast_session(bot_color="black")
        s.player_move("e2", "e4")
        assert [r.uci for r in s.undo()] == ["e2e4"]
        assert s.undo() == []

    def test_captured_trays(self):
        s = fast_session(bot_color="none")
        for frm, to in (("e2", "e4"), ("d7", "d5"), ("e4", "d5"), ("d8", "d5")):
            assert s.player_move(frm, to) is not None
        assert s.captured[Color.BLACK] == [Piece(PieceType.PAWN, Color.BLACK)]
        assert s.captured[Color.WHITE] == [Piece(PieceType.PAWN, Color.WHITE)]
        s.undo()
        assert s.captured[Color.WHITE] == []
        assert len(s.captured[Color.BLACK]) == 1

    def test_status_text_and_game_over(self):
        s = fast_session(bot_color="none")
        assert s.status_text() == "White to move"
        for frm, to in (("e2", "e4"), ("e7", "e5"), ("f1", "c4"), ("b8", "c6"), ("d1", "h5")):
            s.player_move(frm, to)
        assert s.status_text() == "Black to move"
        s.player_move("g8", "f6")
        s.player_move("h5", "f7")
        assert s.is_over
        assert s.status_text() == "Checkmate! White wins."
        assert s.player_move("a7", "a6") is None

    def test_check_in_status_text(self):
        s = fast_session(bot_color="none")
        for frm, to in (("e2", "e4"), ("f7", "f6"), ("d1", "h5")):
            s.player_move(frm, to)
        assert s.status_text() == "Black to move (check)"

    def test_draw_status_text(self):
        state = GameState.empty()
        for square, letter in {"h8": "k", "f7": "K", "g5": "Q"}.items():
            state.place(square, Piece.from_letter(letter))
        s = fast_session(engine=ChessBoard(state), bot_color="none")
        s.player_move("g5", "g6")
        assert s.is_over
        assert s.status_text() == "Draw by stalemate."

    def test_bot_config_is_used(self):
        s = fast_session(bot_color="black", bot_config=BotConfig(randomness=0.0, aggression=3.0))
        assert s.bot.cfg.aggression == 3.0

    def test_bot_color_defaults_to_config(self):
        s = GameSession(config=SessionConfig(bot_color="white"), rng=random.Random(1))
        assert s.bot_color is Color.WHITE
        assert GameSession(config=SessionConfig(bot_color="none")).bot is None

    def test_undo_white_bot_opening_leaves_bot_on_move(self):
        s = fast_session(bot_color="white")
        s.play_bot_move()
        assert [r.color for r in s.undo()] == [Color.WHITE]
        assert s.is_bot_turn()
        assert not s.thinking


# ════════════════════════════════════════════════════════════════════════════
#  TERMINAL FRONT END
# ════════════════════════════════════════════════════════════════════════════

def scripted(lines):
    feed = iter(lines)

    def read(_prompt):
        try:
            return next(feed)
        except StopIteration:
            raise EOFError from None

    return read


class TestCli:
    @pytest.fixture(autouse=True)
    def keep_root_logger(self):
        # main() reconfigures the root logger
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def _run(self, session, lines, **kwargs):
        out = []
        cli.run(session, read=scripted(lines), write=out.append, **kwargs)
        return "\n".join(out)

    def test_player_move_and_bot_reply(self):
        s = fast_session(bot_color="black")
        text = self._run(s, ["e2e4", "exit"])
        assert "1. ♙ e2 – e4" in text
        assert len(s.engine.history) == 2
        assert text.endswith("Goodbye.")

    def test_undo_command(self):
        s = fast_session(bot_color="black")
        self._run(s, ["e2e4", "undo"])
        assert s.engine.history == ()

    def test_nothing_to_undo(self):
        text = self._run(fast_session(bot_color="black"), ["undo"])
        assert "Nothing to undo." in text

    def test_illegal_and_malformed_input(self):
        s = fast_session(bot_color="none")
        text = self._run(s, ["e2e5", "e2", "", "quit"])
        assert "Illegal move, try again." in text
        assert "Please enter moves like e2e4" in text
        assert s.engine.history == ()

    def test_promotion_suffix(self):
        state = GameState.empty()
        for square, letter in {"a7": "P", "e1": "K", "h5": "k", "h7": "p"}.items():
            state.place(square, Piece.from_letter(letter))
        s = fast_session(engine=ChessBoard(state), bot_color="none")
        text = self._run(s, ["a7a8n"])
        assert "1. ♙ a7 – a8 (= ♘)" in text
        assert s.engine.get_piece("a8") == Piece(PieceType.KNIGHT, Color.WHITE)
        assert len(s.engine.history) == 1

    def test_promotion_ending_game_resets(self):
        # K+N vs K after the promotion is an insufficient-material draw
        state = GameState.empty()
        for square, letter in {"a7": "P", "e1": "K", "h5": "k"}.items():
            state.place(square, Piece.from_letter(letter))
        s = fast_session(engine=ChessBoard(state), bot_color="none")
        text = self._run(s, ["a7a8n"])
        assert "1. ♙ a7 – a8 (= ♘) ½" in text
        assert "Draw by insufficient." in text
        assert s.engine.history == ()
        assert s.engine.state == GameState.initial()

    def test_game_end_announced_and_reset(self):
        s = fast_session(bot_color="none")
        text = self._run(s, ["f2f3", "e7e5", "g2g4", "d8h4"])
        assert "2. ♛ d8 – h4 #" in text
        assert "Checkmate! Black wins." in text
        assert s.engine.history == ()

    def test_reset_command(self):
        s = fast_session(bot_color="none")
        self._run(s, ["e2e4", "reset"])
        assert s.engine.history == ()

    def test_ascii_board(self):
        board = cli.render_board(ChessBoard(), unicode_glyphs=False)
        lines = board.splitlines()
        assert lines[1] == "8 | r  n  b  q  k  b  n  r |"
        assert lines[8] == "1 | R  N  B  Q  K  B  N  R |"
        assert lines[-1].split() == list("abcdefgh")

    def test_main_rejects_bad_randomness(self, capsys):
        assert cli.main(["--bot", "none", "--randomness", "-1"]) == 2
        assert "randomness" in capsys.readouterr().err

    def test_main_runs_until_eof(self, monkeypatch, capsys):
        def no_input(_prompt):
            raise EOFError

        monkeypatch.setattr("builtins.input", no_input)
        assert cli.main(["--bot", "none", "--seed", "1", "--ascii", "--log-level", "WARNING"]) == 0
        assert "Goodbye." in capsys.readouterr().out


# ════════════════════════════════════════════════════════════════════════════
#  REST API
# ════════════════════════════════════════════════════════════════════════════

class TestApi:
    """Tests the FastAPI endpoints against a fresh session per test."""

    @pytest.fixture(autouse=True)
    def setup_client(self, monkeypatch):
        session = fast_session(bot_color="black", rng=random.Random(4))
        monkeypatch.setattr(api, "session", session)
        self.client = TestClient(api.app)
        yield
        session.cancel_pending()

    def test_get_board(self):
        data = self.client.get("/board").json()
        assert data["turn"] == "white"
        assert len(data["legal_moves"]) == 20
        assert data["board"][7][4] == "wk"
        assert data["board"][0][3] == "bq"
        assert data["bot_color"] == "black"
        assert data["history"] == []
        assert data["is_over"] is False

    def test_get_moves(self):
        data = self.client.get("/moves/e2").json()
        assert sorted(m["to"] for m in data["moves"]) == ["e3", "e4"]
        assert self.client.get("/moves/e7").json()["moves"] == []

    def test_get_moves_invalid_square(self):
        assert self.client.get("/moves/z9").status_code == 400

    def test_move_then_bot(self):
        resp = self.client.post("/move", json={"from": "e2", "to": "e4", "reply": False})
        assert resp.status_code == 200
        data = resp.json()
        assert data["move"]["notation"] == "♙ e2 – e4"
        assert data["bot_scheduled"] is False

        resp = self.client.post("/bot")
        assert resp.status_code == 200
        assert resp.json()["move"]["color"] == "b"
        assert len(self.client.get("/board").json()["history"]) == 2

    def test_move_schedules_reply(self):
        data = self.client.post("/move", json={"from": "e2", "to": "e4"}).json()
        assert data["bot_scheduled"] is True
        assert api.session.wait_for_bot(5)
        board = self.client.get("/board").json()
        assert board["turn"] == "white"
        assert board["thinking"] is False

    def test_illegal_move(self):
        resp = self.client.post("/move", json={"from": "e2", "to": "e5"})
        assert resp.status_code == 400

    def test_malformed_move_rejected(self):
        assert self.client.post("/move", json={"from": "e9", "to": "e4"}).status_code == 422
        assert self.client.post("/move", json={"from": "e2", "to": "e4", "promotion": "k"}).status_code == 422

    def test_bot_cannot_move_on_player_turn(self):
        assert self.client.post("/bot").status_code == 400

    def test_undo(self):
        self.client.post("/move", json={"from": "e2", "to": "e4", "reply": False})
        self.client.post("/bot")
        data = self.client.post("/undo").json()
        assert len(data["undone"]) == 2
        assert data["undone"][1] == "e2e4"
        assert data["status"] == "White to move"
        assert data["bot_scheduled"] is False

    def test_reset(self):
        self.client.post("/move", json={"from": "e2", "to": "e4", "reply": False})
        data = self.client.post("/reset").json()
        assert data["history"] == []
        assert data["turn"] == "white"

    def test_undo_reschedules_white_bot(self, monkeypatch):
        session = fast_session(bot_color="white", rng=random.Random(2))
        monkeypatch.setattr(api, "session", session)
        assert self.client.post("/bot").status_code == 200
        data = self.client.post("/undo").json()
        assert len(data["undone"]) == 1
        assert data["bot_scheduled"] is True
        assert session.wait_for_bot(5)
        board = self.client.get("/board").json()
        assert len(board["history"]) == 1
        assert board["turn"] == "black"
