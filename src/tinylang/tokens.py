from dataclasses import dataclass
from enum import Enum


class TokenKind(Enum):
    """Lexical token kinds. The value is the display form used in diagnostics."""
    ILLEGAL = 'ILLEGAL'
    EOF = 'EOF'

    # Identifiers and literals
    IDENT = 'IDENT'
    INT = 'INT'

    # Operators
    ASSIGN = '='
    PLUS = '+'
    MINUS = '-'
    BANG = '!'
    ASTERISK = '*'
    SLASH = '/'
    LT = '<'
    GT = '>'
    EQ = '=='
    NOT_EQ = '!='

    # Delimiters
    COMMA = ','
    SEMICOLON = ';'
    LPAREN = '('
    RPAREN = ')'
    LBRACE = '{'
    RBRACE = '}'

    # Keywords
    FUNCTION = 'FUNCTION'
    LET = 'LET'
    TRUE = 'TRUE'
    FALSE = 'FALSE'
    IF = 'IF'
    ELSE = 'ELSE'
    RETURN = 'RETURN'

    def __str__(self) -> str:
        return self.value


KEYWORDS = {
    'fn': TokenKind.FUNCTION,
    'let': TokenKind.LET,
    'true': TokenKind.TRUE,
    'false': TokenKind.FALSE,
    'if': TokenKind.IF,
    'else': TokenKind.ELSE,
    'return': TokenKind.RETURN,
}


def lookup_identifier(text: str) -> TokenKind:
    return KEYWORDS.get(text, TokenKind.IDENT)


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int = 1
    column: int = 1

    def __str__(self) -> str:
        return f"{self.kind.name}({self.text!r})"
