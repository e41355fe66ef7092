import logging
import sys


class LevelFormatter(logging.Formatter):
    """Console formatter that colours the line by level when writing to a terminal."""

    cyan = "\x1b[36m"
    green = "\x1b[32m"
    yellow = "\x1b[33m"
    red = "\x1b[31m"
    bold_red = "\x1b[31;1m"
    reset = "\x1b[0m"

    format_str = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s"

    COLOURS = {
        logging.DEBUG: cyan,
        logging.INFO: green,
        logging.WARNING: yellow,
        logging.ERROR: red,
        logging.CRITICAL: bold_red,
    }

    def __init__(self, use_colour=True):
        super().__init__(self.format_str, datefmt="%Y-%m-%d %H:%M:%S")
        self.use_colour = use_colour

    def format(self, record):
        line = super().format(record)
        colour = self.COLOURS.get(record.levelno)
        if not self.use_colour or not colour:
            return line
        return colour + line + self.reset


def setup_logging(level=logging.INFO):
    """Setup centralized logging configuration."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()

    # Clear existing handlers to prevent duplicate logs when the app is rebuilt
    for handler in root_logger.handlers[:]:
        if getattr(handler, "_pyquiz", False):
            root_logger.removeHandler(handler)

    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(LevelFormatter(use_colour=sys.stderr.isatty()))
    console_handler._pyquiz = True
    root_logger.addHandler(console_handler)

    for logger_name in ["pyquiz", "werkzeug"]:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True

    logging.getLogger(__name__).debug("Logging initialized at level %s", logging.getLevelName(level))
