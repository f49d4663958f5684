"""Re-indent pipeline script text by brace depth.

Every line is indented ``indent_spaces * depth``; runs of blank lines are
dropped; a brace opening a block ends its line; a closing brace starts its
own line. Formatting formatted text returns it unchanged.
"""

from __future__ import annotations

import logging

from pipegen.formatter.scanner import STRING_KINDS, Scanner, Token, TokenKind

log = logging.getLogger(__name__)

DEFAULT_INDENT_SPACES = 4


class Formatter:
    """Brace depth pretty printer.

    ``depth`` holds the brace depth after the last ``format`` call; it is 0
    for balanced input.
    """

    def __init__(self, indent_spaces: int = DEFAULT_INDENT_SPACES):
        self.indent_spaces = indent_spaces
        self.depth = 0

    def indent(self) -> str:
        return " " * (max(self.depth, 0) * self.indent_spaces)

    def format(self, text: str) -> str:
        # whitespace-only runs carry no layout information
        tokens = [t for t in Scanner(text).tokens() if not t.is_blank]

        self.depth = 0
        out: list[str] = []
        line_start = True

        def newline() -> None:
            nonlocal line_start
            out.append("\n")
            out.append(self.indent())
            line_start = True

        for i, token in enumerate(tokens):
            nxt: Token | None = tokens[i + 1] if i + 1 < len(tokens) else None

            if token.kind is TokenKind.LEFT_BRACE:
                out.append(token.value)
                line_start = False
                self.depth += 1
                if nxt is None:
                    out.append("\n")
                elif nxt.kind not in (TokenKind.EOL, TokenKind.RIGHT_BRACE):
                    newline()

            elif token.kind is TokenKind.RIGHT_BRACE:
                self.depth -= 1
                if out:
                    out.append("\n")
                out.append(self.indent())
                out.append(token.value)
                line_start = False
                if nxt is None:
                    out.append("\n")
                elif nxt.kind is TokenKind.OTHER or nxt.kind in STRING_KINDS:
                    newline()

            elif token.kind is TokenKind.EOL:
                if not out:
                    continue
                if nxt is None:
                    out.append("\n")
                elif nxt.kind not in (TokenKind.EOL, TokenKind.RIGHT_BRACE):
                    newline()

            else:
                value = token.value
                if line_start:
                    value = value.lstrip(" \t")
                if nxt is None or nxt.kind in (TokenKind.EOL, TokenKind.RIGHT_BRACE):
                    value = value.rstrip(" \t")
                out.append(value)
                line_start = False
                if nxt is not None and nxt.kind is TokenKind.LEFT_BRACE and not value[-1:].isspace():
                    out.append(" ")

        if self.depth != 0:
            log.debug("unbalanced braces, final depth %d", self.depth)
        return "".join(out)


def format_script(text: str, indent_spaces: int = DEFAULT_INDENT_SPACES) -> str:
    """Format pipeline script text."""
    return Formatter(indent_spaces).format(text)
