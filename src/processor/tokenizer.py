"""Line tokenizer for vendor CSV exports.

Published spreadsheet exports are single-line-per-record CSV, so lines are
split individually rather than fed through a full CSV reader.

Known limitations:
    - A doubled quote (``""``) inside a quoted field is two toggles, not a
      literal quote character.
    - A quoted field spanning several lines is mis-split; every line starts
      outside a quoted segment.
"""

SEPARATOR = ","
QUOTE = '"'


def split_lines(text):
    """Split raw text into non-blank lines.

    Breaks on ``\\n`` only (a trailing ``\\r`` is removed), so control or
    Unicode separators inside a field stay in their row. Blank lines
    and whitespace-only lines are dropped so line indexes count content
    lines only.
    """
    if not text:
        return []
    return [line.rstrip("\r") for line in text.split("\n") if line.strip()]


def parse_csv_line(line, separator=SEPARATOR):
    """Split one CSV line into trimmed fields.

    Examples:
        'a,b,c'              -> ['a', 'b', 'c']
        '"1,5", x'           -> ['1,5', 'x']
        'a,,b'               -> ['a', '', 'b']
        '"open, quote'       -> ['open, quote']
    """
    fields = []
    current = []
    in_quotes = False

    for char in line:
        if char == QUOTE:
            in_quotes = not in_quotes
        elif char == separator and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    fields.append("".join(current).strip())

    return fields
