# crimson/config.py
from dataclasses import dataclass, field
from typing import Dict
import logging
import os
import sys
import tomllib  # python >=3.11

logger = logging.getLogger(__name__)

# Bot material values (centipawns)
PIECE_VALUES = {
    "PAWN": 100,
    "KNIGHT": 305,
    "BISHOP": 315,
    "ROOK": 500,
    "QUEEN": 900,
    "KING": 20000,
}

@dataclass
class BotConfig:
    piece_values: Dict[str, int] = field(default_factory=lambda: PIECE_VALUES.copy())
    randomness: float = 0.35        # scales the uniform noise added to every score
    aggression: float = 1.1         # multiplies the check bonus
    positional_weight: float = 0.6  # share of the piece-square table counted
    capture_weight: float = 0.9     # share of the captured piece's value credited
    capture_bonus: int = 25         # flat bonus for captures made by non-pawns
    check_bonus: int = 35
    draw_penalty: int = 120
    castle_bonus: int = 15
    noise_scale: int = 120
    soft_margin: int = 140          # candidates within this of the best are equally eligible

    def __post_init__(self):
        self.validate()

    def validate(self):
        if self.randomness < 0:
            raise ValueError(f"randomness must be >= 0, got {self.randomness}")
        if self.aggression < 0:
            raise ValueError(f"aggression must be >= 0, got {self.aggression}")
        if self.soft_margin < 0:
            raise ValueError(f"soft_margin must be >= 0, got {self.soft_margin}")
        missing = set(PIECE_VALUES) - set(self.piece_values)
        if missing:
            raise ValueError(f"piece_values missing {sorted(missing)}")

@dataclass
class SessionConfig:
    bot_color: str = "black"   # "white", "black" or "none"
    think_delay_ms: int = 450
    think_jitter_ms: int = 500
    auto_reply: bool = True    # HTTP adapter schedules the bot reply after a player move

@dataclass
class UIConfig:
    engine_name: str = "Crimson Knights Chess"
    api_port: int = 8000
    unicode_glyphs: bool = True

@dataclass
class Config:
    bot: BotConfig = field(default_factory=BotConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = "config.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("bot", "session", "ui"):
            target = getattr(cfg, section)
            for k, v in raw.get(section, {}).items():
                if hasattr(target, k):
                    setattr(target, k, v)
                else:
                    logger.warning("Ignoring unknown config key %s.%s", section, k)
        if "log_level" in raw:
            cfg.log_level = raw["log_level"]
        cfg.bot.validate()
        return cfg


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Install a single stdout handler on the root logger."""
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    root_logger.addHandler(console_handler)
    return root_logger


# single globally importable config instance
CONFIG = Config.load_from_toml(os.environ.get("CRIMSON_CONFIG_TOML", "config.toml"))
# env overrides for quick experiments
_randomness = os.environ.get("CRIMSON_BOT_RANDOMNESS")
if _randomness:
    try:
        CONFIG.bot.randomness = float(_randomness)
        CONFIG.bot.validate()
    except ValueError as e:
        logger.warning("Ignoring CRIMSON_BOT_RANDOMNESS=%r: %s", _randomness, e)
        CONFIG.bot.randomness = BotConfig.randomness
if os.environ.get("CRIMSON_LOG_LEVEL"):
    CONFIG.log_level = os.environ["CRIMSON_LOG_LEVEL"]
