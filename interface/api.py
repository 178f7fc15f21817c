"""FastAPI adapter over one local GameSession.

This replaces the browser glue of a click-to-move UI: the front end asks for
the board and legal moves, posts the player's move, and polls while the bot is
thinking. All rules live in the engine; this module only translates.
"""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from crimson.config import CONFIG, configure_logging
from crimson.core.move import Move, MoveRecord
from crimson.core.utils import is_valid_square
from crimson.session import GameSession

_log = logging.getLogger(__name__)

app = FastAPI(title=CONFIG.ui.engine_name, version="1.0.0")

# Shared session for the single local game.
session = GameSession()

SQUARE_PATTERN = r"^[a-h][1-8]$"


class MoveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_square: str = Field(alias="from", pattern=SQUARE_PATTERN)
    to_square: str = Field(alias="to", pattern=SQUARE_PATTERN)
    promotion: Optional[str] = Field(default=None, pattern=r"^[qrbnQRBN]$")
    reply: Optional[bool] = None  # schedule the bot's answer; defaults to config


def _move_payload(move: Move) -> dict:
    return {
        "from": move.from_square,
        "to": move.to_square,
        "uci": move.uci,
        "piece": move.piece.value,
        "color": move.color.value,
        "promotion": move.promotion.value if move.promotion else None,
        "capture": move.flags.capture,
        "castle": move.flags.castle,
        "en_passant": move.flags.en_passant,
    }


def _record_payload(record: MoveRecord) -> dict:
    payload = _move_payload(record.move)
    payload.update({
        "notation": record.notation,
        "captured": record.captured.code if record.captured else None,
        "check": record.check,
        "checkmate": record.checkmate,
        "stalemate": record.stalemate,
        "draw": record.draw,
        "draw_reason": record.draw_reason.value if record.draw_reason else None,
        "status": record.status.value,
        "fullmove_number": record.fullmove_number,
    })
    return payload


def _board_payload() -> dict:
    engine = session.engine
    return {
        "turn": engine.get_turn().label,
        "board": [[piece.code if piece else None for piece in row] for row in engine.export_board()],
        "legal_moves": [move.uci for move in engine.moves()],
        "status": session.status_text(),
        "is_over": session.is_over,
        "thinking": session.thinking,
        "bot_color": session.bot_color.label if session.bot_color else None,
        "captured": {color.label: [p.code for p in tray] for color, tray in session.captured.items()},
        "history": [record.notation for record in engine.history],
    }


@app.get("/board")
def get_board():
    with session.lock:
        return _board_payload()


@app.get("/moves/{square}")
def get_moves(square: str):
    if not is_valid_square(square):
        raise HTTPException(status_code=400, detail=f"Invalid square: {square}")
    with session.lock:
        return {"square": square, "moves": [_move_payload(m) for m in session.engine.moves(square)]}


@app.post("/move")
def make_move(req: MoveRequest):
    record = session.player_move(req.from_square, req.to_square, req.promotion)
    if record is None:
        raise HTTPException(status_code=400, detail=f"Illegal move: {req.from_square}{req.to_square}")
    reply = CONFIG.session.auto_reply if req.reply is None else req.reply
    scheduled = session.schedule_bot_move() if reply else False
    return {"move": _record_payload(record), "bot_scheduled": scheduled}


@app.post("/bot")
def bot_move():
    session.cancel_pending()
    record = session.play_bot_move()
    if record is None:
        raise HTTPException(status_code=400, detail="Bot cannot move now")
    return {"move": _record_payload(record)}


@app.post("/undo")
def undo_move():
    undone = session.undo()
    # Undoing a white bot's opening move leaves the bot on move again.
    scheduled = session.schedule_bot_move() if CONFIG.session.auto_reply else False
    return {
        "undone": [record.uci for record in undone],
        "status": session.status_text(),
        "bot_scheduled": scheduled,
    }


@app.post("/reset")
def reset_game():
    session.reset()
    _log.info("Game reset via API")
    return _board_payload()


def main():
    import uvicorn

    configure_logging(CONFIG.log_level)
    uvicorn.run(app, host="127.0.0.1", port=CONFIG.ui.api_port)


if __name__ == "__main__":
    main()
