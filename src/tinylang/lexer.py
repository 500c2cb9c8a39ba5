import logging
from typing import Iterator, Optional

import ply.lex as lex

from tinylang.tokens import Token, TokenKind, KEYWORDS

logger = logging.getLogger(__name__)


class Lexer:
    # A string containing ignored characters (spaces, tabs and carriage returns)
    t_ignore = ' \t\r'

    # Keywords
    reserved = {text: kind.name for text, kind in KEYWORDS.items()}

    # List of token names
    tokens = [
        'ILLEGAL', 'IDENT', 'INT',
        'ASSIGN', 'PLUS', 'MINUS', 'BANG', 'ASTERISK', 'SLASH',
        'LT', 'GT', 'EQ', 'NOT_EQ',
        'COMMA', 'SEMICOLON', 'LPAREN', 'RPAREN', 'LBRACE', 'RBRACE',
    ] + list(reserved.values())

    # Regular expression rules for simple tokens
    t_EQ = r'=='
    t_NOT_EQ = r'!='
    t_ASSIGN = r'='
    t_PLUS = r'\+'
    t_MINUS = r'-'
    t_BANG = r'!'
    t_ASTERISK = r'\*'
    t_SLASH = r'/'
    t_LT = r'<'
    t_GT = r'>'
    t_COMMA = r','
    t_SEMICOLON = r';'
    t_LPAREN = r'\('
    t_RPAREN = r'\)'
    t_LBRACE = r'\{'
    t_RBRACE = r'\}'

    def t_IDENT(self, t):
        r'[a-zA-Z_][a-zA-Z_0-9]*'
        # Check for reserved words
        t.type = self.reserved.get(t.value, 'IDENT')
        return t

    def t_INT(self, t):
        r'\d+'
        # Conversion happens in the parser so range errors become diagnostics
        return t

    # Define a rule so we can track line numbers
    def t_newline(self, t):
        r'\n+'
        for i in range(len(t.value)):
            self.line_starts.append(t.lexpos + i + 1)
        t.lexer.lineno += len(t.value)

    # Unknown characters become ILLEGAL tokens and are left for the parser to report
    def t_error(self, t):
        t.type = 'ILLEGAL'
        t.value = t.value[0]
        t.lexer.skip(1)
        return t

    # Build the lexer
    def __init__(self, source: Optional[str] = None):
        self.lexer = lex.lex(module=self)
        self.line_starts = [0]  # Track start of each line
        if source is not None:
            self.input(source)

    def input(self, data: str):
        self.lexer.input(data)
        self.lexer.lineno = 1
        self.line_starts = [0]  # Reset line starts

    def _column(self, lineno: int, lexpos: int) -> int:
        line_start = self.line_starts[min(lineno - 1, len(self.line_starts) - 1)]
        return lexpos - line_start + 1  # Make columns 1-based

    def next_token(self) -> Token:
        """Return the next token, or an EOF token once the input is exhausted."""
        tok = self.lexer.token()
        if tok is None:
            lexpos = len(self.lexer.lexdata or "")
            return Token(TokenKind.EOF, '', self.lexer.lineno,
                         self._column(self.lexer.lineno, lexpos))
        token = Token(TokenKind[tok.type], tok.value, tok.lineno,
                      self._column(tok.lineno, tok.lexpos))
        logger.debug(f"Token recognized: {token.kind.name}, value: {token.text}")
        return token

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to and including the first EOF."""
        while True:
            token = self.next_token()
            yield token
            if token.kind is TokenKind.EOF:
                return


def tokenize(source: str) -> list[Token]:
    return list(Lexer(source))
