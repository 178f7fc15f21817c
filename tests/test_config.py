"""Tests for TOML configuration loading and logging setup."""

import logging

import pytest

from crimson.config import Config, configure_logging


class TestConfigLoading:
    def test_missing_file_gives_defaults(self, tmp_path):
        cfg = Config.load_from_toml(str(tmp_path / "nope.toml"))
        assert cfg.bot.randomness == 0.35
        assert cfg.session.bot_color == "black"
        assert cfg.ui.api_port == 8000
        assert cfg.log_level == "INFO"

    def test_sections_override_defaults(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            'log_level = "DEBUG"\n'
            "[bot]\nrandomness = 0.5\naggression = 2.0\n"
            '[session]\nbot_color = "white"\nthink_delay_ms = 10\n'
            "[ui]\nunicode_glyphs = false\n"
        )
        cfg = Config.load_from_toml(str(path))
        assert cfg.bot.randomness == 0.5
        assert cfg.bot.aggression == 2.0
        assert cfg.bot.soft_margin == 140
        assert cfg.session.bot_color == "white"
        assert cfg.session.think_delay_ms == 10
        assert cfg.ui.unicode_glyphs is False
        assert cfg.log_level == "DEBUG"

    def test_unknown_keys_are_ignored_with_warning(self, tmp_path, caplog):
        path = tmp_path / "config.toml"
        path.write_text("[bot]\ndepth = 4\n")
        with caplog.at_level(logging.WARNING, logger="crimson.config"):
            cfg = Config.load_from_toml(str(path))
        assert not hasattr(cfg.bot, "depth")
        assert "bot.depth" in caplog.text

    def test_invalid_values_rejected(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[bot]\nrandomness = -1.0\n")
        with pytest.raises(ValueError):
            Config.load_from_toml(str(path))


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("restore_root_logger")
class TestLogging:
    def test_configure_logging_installs_one_handler(self):
        root = configure_logging("debug")
        configure_logging("WARNING")
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        assert configure_logging("chatty").level == logging.INFO
