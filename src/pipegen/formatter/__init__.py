from pipegen.formatter.formatter import DEFAULT_INDENT_SPACES, Formatter, format_script
from pipegen.formatter.scanner import Scanner, Token, TokenKind

__all__ = [
    "DEFAULT_INDENT_SPACES",
    "Formatter",
    "Scanner",
    "Token",
    "TokenKind",
    "format_script",
]
