import re

__all__ = [
    "LINE_ENDING", "FOLD_SEPARATOR", "MAX_LINE_LENGTH",
    "escape_value", "unescape_value", "fold_line", "format_type_parameter",
]

LINE_ENDING = "\n"
FOLD_SEPARATOR = "\r\n "
MAX_LINE_LENGTH = 75

_ESCAPES = (
    ("\\", "\\\\"),
    (",", "\\,"),
    (";", "\\;"),
    ("\n", "\\n"),
    ("\r", "\\r"),
)

_UNESCAPES = {
    "\\": "\\",
    ",": ",",
    ";": ";",
    "n": "\n",
    "N": "\n",
    "r": "\r",
    "t": "\t",
}

_ESCAPE_SEQUENCE = re.compile(r"\\(.)", re.DOTALL)


def escape_value(value: str) -> str:
    """
    Escape a free-text property value.

    Backslashes are escaped first so the backslashes introduced for the
    other characters are not escaped twice.

    :param value: Raw text.
    :return: Text safe to place after the property colon.
    """
    for char, replacement in _ESCAPES:
        value = value.replace(char, replacement)
    return value


def unescape_value(value: str) -> str:
    """
    Reverse :func:`escape_value`.

    Works in a single left-to-right pass, so ``unescape_value(escape_value(s)) == s``
    for every string. ``\\t`` is also understood. Unknown sequences are kept as they are.

    :param value: Escaped text.
    :return: Raw text.
    """
    def replace(match):
        char = match.group(1)
        return _UNESCAPES.get(char, match.group(0))

    return _ESCAPE_SEQUENCE.sub(replace, value)


def fold_line(line: str, width: int = MAX_LINE_LENGTH) -> str:
    """
    Fold a content line longer than ``width`` code points.

    A CRLF followed by one space is inserted before every ``width``-th
    character, so each physical segment holds at most ``width`` characters
    after its leading continuation space.

    :param line: Logical line without its terminator.
    :param width: Maximum segment length in code points.
    :return: The folded line.
    """
    if len(line) <= width:
        return line
    segments = [line[i:i + width] for i in range(0, len(line), width)]
    return FOLD_SEPARATOR.join(segments)


def format_type_parameter(*types) -> str:
    """
    Build the ``;TYPE=...`` parameter from the non-empty tokens.

    :return: ";TYPE=A,B" or an empty string when no token is left.
    """
    tokens = [getattr(t, "value", t) for t in types if t]
    if not tokens:
        return ""
    return ";TYPE=" + ",".join(tokens)
