"""Quote-aware CSV scanner for hand written question files."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

__all__ = ["parse_csv_table"]


@dataclass
class _TableBuilder:
    rows: List[List[str]] = field(default_factory=list)
    row: List[str] = field(default_factory=list)
    chars: List[str] = field(default_factory=list)
    quoted: bool = False

    @property
    def field_is_empty(self) -> bool:
        return not self.chars

    def end_field(self) -> None:
        value = "".join(self.chars)
        # Quoting signals literal formatting (e.g. indented source code).
        self.row.append(value if self.quoted else value.strip())
        self.chars = []
        self.quoted = False

    def end_row(self) -> None:
        self.end_field()
        if any(self.row):
            self.rows.append(self.row)
        self.row = []


def parse_csv_table(text: str) -> List[List[str]]:
    """Split ``text`` into rows of string fields.

    - A field that starts with ``"`` is quoted until the next lone ``"``;
      ``""`` inside it is a literal quote, and commas and line breaks inside
      it are content.
    - ``\\n``, ``\\r\\n`` or a lone ``\\r`` end a row outside quotes.
    - Unquoted fields are stripped, quoted fields are kept as written.
    - Rows where every field is empty are dropped.
    - A quote in the middle of an unquoted field is an ordinary character
      and an unterminated quoted field runs to the end of the input.
    """

    builder = _TableBuilder()
    in_quotes = False
    length = len(text)
    i = 0
    while i < length:
        char = text[i]
        following = text[i + 1] if i + 1 < length else ""

        if char == '"':
            if in_quotes and following == '"':
                builder.chars.append('"')
                i += 1
            elif in_quotes:
                in_quotes = False
            elif builder.field_is_empty:
                in_quotes = True
                builder.quoted = True
            else:
                builder.chars.append(char)
        elif in_quotes:
            builder.chars.append(char)
        elif char == ",":
            builder.end_field()
        elif char in "\r\n":
            if char == "\r" and following == "\n":
                i += 1
            builder.end_row()
        else:
            builder.chars.append(char)
        i += 1

    builder.end_row()
    return builder.rows
