import logging
import sys

# Custom formatter
# Colorize logger output by level
color2num = dict(
    gray=30,red=31,green=32,
    yellow=33,blue=34,magenta=35,
    cyan=36,white=37,crimson=38,
)

def colorize(
    string: str, 
    color: str, 
    bold: bool = False) -> str:
    """Returns string surrounded by terminal colour codes.

    Args:
        string: The message to colourise
        color: One of the keys of `color2num`
        bold: If to bold the string
    """
    attrs = [str(color2num[color])]
    if bold:
        attrs.append("1")
    return f"\x1b[{';'.join(attrs)}m{string}\x1b[0m"

# Level -> (color, bold) of the level tag
LEVEL_COLORS = {
    logging.DEBUG: ("gray", False),
    logging.INFO: ("green", False),
    logging.WARNING: ("yellow", False),
    logging.ERROR: ("crimson", True),
    logging.CRITICAL: ("red", True),
}

class ColoredFormatter(logging.Formatter):
    """
    Formatter prefixing every record with its 
    coloured level name, e.g. ``[WARNING] - message``.
    """
    def __init__(self):
        super().__init__(fmt="%(levelname)s: %(message)s", datefmt=None, style='%')
        self._formats = {
            level: logging.Formatter(
                f'{colorize("[%(levelname)s]", color, bold)} - %(message)s'
            ) for level, (color, bold) in LEVEL_COLORS.items()
        }

    def format(self, record):
        formatter = self._formats.get(record.levelno)
        if formatter is None:
            return super().format(record)
        return formatter.format(record)


# Logger
logger = logging.getLogger("aispacket")
logger.setLevel(logging.INFO)
ch = logging.StreamHandler(sys.stdout)
ch.setFormatter(ColoredFormatter())
logger.addHandler(ch)
