"""
CSV parsing for published spreadsheet exports.

Spreadsheet cells routinely contain commas, quotes and line breaks, so the
document is scanned character by character instead of being split on
newlines first. Quoting follows RFC 4180:

- A field wrapped in double quotes may contain commas and line breaks
- Inside a quoted field, "" stands for a single literal quote
- Rows end at \\n, \\r or \\r\\n outside of quotes
"""

from typing import List


def parse_csv(text: str) -> List[List[str]]:
    """
    Parse CSV text into a list of rows, each a list of field strings.

    Never raises. An unterminated quote keeps the rest of the input in the
    last field. Rows are not padded, so a row can be shorter than the header.

    Examples:
        >>> parse_csv('a,"b,c\\nd",e')
        [['a', 'b,c\\nd', 'e']]

        >>> parse_csv('x,"say ""hi"" now"')
        [['x', 'say "hi" now']]
    """
    rows = []
    if not text:
        return rows

    row = []
    current = []
    in_quotes = False
    i = 0
    length = len(text)

    while i < length:
        char = text[i]

        if in_quotes:
            if char == '"':
                if i + 1 < length and text[i + 1] == '"':
                    current.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                current.append(char)
        elif char == '"':
            in_quotes = True
        elif char == ',':
            row.append(''.join(current))
            current = []
        elif char == '\n' or char == '\r':
            # \r\n counts as a single break
            if char == '\r' and i + 1 < length and text[i + 1] == '\n':
                i += 1
            row.append(''.join(current))
            rows.append(row)
            row = []
            current = []
        else:
            current.append(char)

        i += 1

    if current or row:
        row.append(''.join(current))
        rows.append(row)

    return rows
