import io
import logging
import colorlog
from nut.UTILS import logger as nut_logger
from nut.UTILS.logger import make_formatter, setup_logger, use_colors


class TTY(io.StringIO):
    def isatty(self):
        return True


def test_colors_on_terminal(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)
    assert use_colors(TTY())
    assert not use_colors(io.StringIO())


def test_no_color_disables_colors(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    assert not use_colors(TTY())


def test_formatters():
    assert isinstance(make_formatter(True), colorlog.ColoredFormatter)
    plain = make_formatter(False)
    assert not isinstance(plain, colorlog.ColoredFormatter)
    record = logging.LogRecord("nut", logging.WARNING, __file__, 1, "careful", None, None)
    assert plain.format(record) == "[WARN] careful"


def test_setup_logger_levels(monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(nut_logger.sys, "stderr", io.StringIO())
    level = root.level
    try:
        setup_logger(level="warning")
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        setup_logger(debug=True)
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
    finally:
        root.setLevel(level)
