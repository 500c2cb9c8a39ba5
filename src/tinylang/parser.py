import logging
from enum import IntEnum
from typing import Callable, Dict, Iterable, Iterator, List, Optional

import tinylang.tinylang_ast as ast
from tinylang.errors import NestingTooDeepError, ParseError, SourceLocation
from tinylang.lexer import Lexer
from tinylang.tokens import Token, TokenKind

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 200

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2       # ==
    LESSGREATER = 3  # > or <
    SUM = 4          # +
    PRODUCT = 5      # *
    PREFIX = 6       # -X or !X
    CALL = 7         # myFunction(X)


PRECEDENCES = {
    TokenKind.EQ: Precedence.EQUALS,
    TokenKind.NOT_EQ: Precedence.EQUALS,
    TokenKind.LT: Precedence.LESSGREATER,
    TokenKind.GT: Precedence.LESSGREATER,
    TokenKind.PLUS: Precedence.SUM,
    TokenKind.MINUS: Precedence.SUM,
    TokenKind.SLASH: Precedence.PRODUCT,
    TokenKind.ASTERISK: Precedence.PRODUCT,
    TokenKind.LPAREN: Precedence.CALL,
}

PrefixParseFn = Callable[[], Optional[ast.Expression]]
InfixParseFn = Callable[[ast.Expression], Optional[ast.Expression]]


class Parser:
    """Operator-precedence parser over a token stream.

    Syntax errors are collected in ``self.errors`` instead of being raised, and
    ``parse_program`` always returns a (possibly incomplete) Program. Callers
    must not evaluate the result when ``errors`` is non-empty.
    """

    def __init__(self, tokens: Iterable[Token], max_depth: int = DEFAULT_MAX_DEPTH,
                 file_path: str = "<unknown>"):
        self.logger = logger
        self.tokens: Iterator[Token] = iter(tokens)
        self.max_depth = max_depth
        self.file_path = file_path
        self.depth = 0
        self.errors: List[ParseError] = []
        self.last_token: Optional[Token] = None

        self.prefix_parse_fns: Dict[TokenKind, PrefixParseFn] = {}
        self.register_prefix(TokenKind.IDENT, self.parse_identifier)
        self.register_prefix(TokenKind.INT, self.parse_integer_literal)
        self.register_prefix(TokenKind.TRUE, self.parse_boolean)
        self.register_prefix(TokenKind.FALSE, self.parse_boolean)
        self.register_prefix(TokenKind.BANG, self.parse_prefix_expression)
        self.register_prefix(TokenKind.MINUS, self.parse_prefix_expression)
        self.register_prefix(TokenKind.LPAREN, self.parse_grouped_expression)
        self.register_prefix(TokenKind.IF, self.parse_if_expression)
        self.register_prefix(TokenKind.FUNCTION, self.parse_function_expression)

        self.infix_parse_fns: Dict[TokenKind, InfixParseFn] = {}
        for kind in (TokenKind.PLUS, TokenKind.MINUS, TokenKind.ASTERISK, TokenKind.SLASH,
                     TokenKind.EQ, TokenKind.NOT_EQ, TokenKind.LT, TokenKind.GT):
            self.register_infix(kind, self.parse_infix_expression)
        self.register_infix(TokenKind.LPAREN, self.parse_call_expression)

        # Read two tokens so cur_token and peek_token are both set
        self.cur_token = self._pull()
        self.peek_token = self._pull()

    def register_prefix(self, kind: TokenKind, fn: PrefixParseFn):
        self.prefix_parse_fns[kind] = fn

    def register_infix(self, kind: TokenKind, fn: InfixParseFn):
        self.infix_parse_fns[kind] = fn

    # Token cursor

    def _pull(self) -> Token:
        token = next(self.tokens, None)
        if token is None:
            # The stream is over: keep answering EOF at the last known position
            line = self.last_token.line if self.last_token else 1
            column = self.last_token.column if self.last_token else 1
            return Token(TokenKind.EOF, '', line, column)
        self.last_token = token
        return token

    def next_token(self):
        self.cur_token = self.peek_token
        self.peek_token = self._pull()

    def cur_token_is(self, kind: TokenKind) -> bool:
        return self.cur_token.kind is kind

    def peek_token_is(self, kind: TokenKind) -> bool:
        return self.peek_token.kind is kind

    def expect_peek(self, kind: TokenKind) -> bool:
        if self.peek_token_is(kind):
            self.next_token()
            return True
        self.peek_error(kind)
        return False

    def peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek_token.kind, Precedence.LOWEST)

    def cur_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.cur_token.kind, Precedence.LOWEST)

    # Diagnostics

    def _location(self, token: Token) -> SourceLocation:
        return SourceLocation(self.file_path, token.line, token.column)

    def _error(self, message: str, token: Token):
        self.logger.debug(f"Parse error: {message}")
        self.errors.append(ParseError(message, self._location(token)))

    def peek_error(self, kind: TokenKind):
        self._error(f"expected next token to be {kind}, got {self.peek_token.kind} instead",
                    self.peek_token)

    def no_prefix_parse_fn_error(self, kind: TokenKind):
        self._error(f"no prefix parse function for {kind} found", self.cur_token)

    def _enter(self, stage: str):
        self.depth += 1
        if self.depth > self.max_depth:
            raise NestingTooDeepError.exceeded(stage, self.max_depth,
                                               self._location(self.cur_token))

    def _exit(self):
        self.depth -= 1

    # Statements

    def parse_program(self) -> ast.Program:
        program = ast.Program()
        while not self.cur_token_is(TokenKind.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                program.statements.append(stmt)
            self.next_token()
        self.logger.debug(f"Parsed {len(program.statements)} statement(s), "
                          f"{len(self.errors)} error(s)")
        return program

    def parse_statement(self) -> Optional[ast.Statement]:
        if self.cur_token_is(TokenKind.LET):
            return self.parse_let_statement()
        if self.cur_token_is(TokenKind.RETURN):
            return self.parse_return_statement()
        return self.parse_expression_statement()

    def parse_let_statement(self) -> Optional[ast.LetStatement]:
        token = self.cur_token
        if not self.expect_peek(TokenKind.IDENT):
            return None
        name = ast.Identifier(self.cur_token, self.cur_token.text)
        if not self.expect_peek(TokenKind.ASSIGN):
            return None

        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if self.peek_token_is(TokenKind.SEMICOLON):
            self.next_token()
        if value is None:
            return None
        return ast.LetStatement(token, name, value)

    def parse_return_statement(self) -> Optional[ast.ReturnStatement]:
        token = self.cur_token
        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if self.peek_token_is(TokenKind.SEMICOLON):
            self.next_token()
        if value is None:
            return None
        return ast.ReturnStatement(token, value)

    def parse_expression_statement(self) -> Optional[ast.ExpressionStatement]:
        token = self.cur_token
        expression = self.parse_expression(Precedence.LOWEST)
        if self.peek_token_is(TokenKind.SEMICOLON):
            self.next_token()
        if expression is None:
            return None
        return ast.ExpressionStatement(token, expression)

    def parse_block_statement(self) -> ast.BlockStatement:
        token = self.cur_token
        statements = []
        self._enter("block")
        try:
            self.next_token()
            while not self.cur_token_is(TokenKind.RBRACE):
                if self.cur_token_is(TokenKind.EOF):
                    self._error(f"expected next token to be {TokenKind.RBRACE}, "
                                f"got {TokenKind.EOF} instead", self.cur_token)
                    break
                stmt = self.parse_statement()
                if stmt is not None:
                    statements.append(stmt)
                self.next_token()
        finally:
            self._exit()
        return ast.BlockStatement(token, statements)

    # Expressions

    def parse_expression(self, precedence: Precedence) -> Optional[ast.Expression]:
        self._enter("expression")
        try:
            prefix = self.prefix_parse_fns.get(self.cur_token.kind)
            if prefix is None:
                self.no_prefix_parse_fn_error(self.cur_token.kind)
                return None
            left = prefix()

            while (left is not None
                   and not self.peek_token_is(TokenKind.SEMICOLON)
                   and precedence < self.peek_precedence()):
                infix = self.infix_parse_fns.get(self.peek_token.kind)
                if infix is None:
                    return left
                self.next_token()
                left = infix(left)
            return left
        finally:
            self._exit()

    def parse_identifier(self) -> ast.Expression:
        return ast.Identifier(self.cur_token, self.cur_token.text)

    def parse_integer_literal(self) -> Optional[ast.Expression]:
        text = self.cur_token.text
        try:
            value = int(text, 10)
        except ValueError:
            value = None
        if value is None or not INT64_MIN <= value <= INT64_MAX:
            self._error(f'could not parse "{text}" as integer', self.cur_token)
            return None
        return ast.IntegerLiteral(self.cur_token, value)

    def parse_boolean(self) -> ast.Expression:
        return ast.Boolean(self.cur_token, self.cur_token_is(TokenKind.TRUE))

    def parse_prefix_expression(self) -> Optional[ast.Expression]:
        token = self.cur_token
        self.next_token()
        right = self.parse_expression(Precedence.PREFIX)
        if right is None:
            return None
        return ast.PrefixExpression(token, token.text, right)

    def parse_infix_expression(self, left: ast.Expression) -> Optional[ast.Expression]:
        token = self.cur_token
        precedence = self.cur_precedence()
        self.next_token()
        right = self.parse_expression(precedence)
        if right is None:
            return None
        return ast.InfixExpression(token, left, token.text, right)

    def parse_grouped_expression(self) -> Optional[ast.Expression]:
        self.next_token()
        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None
        if not self.expect_peek(TokenKind.RPAREN):
            return None
        return expression

    def parse_if_expression(self) -> Optional[ast.Expression]:
        token = self.cur_token
        if not self.expect_peek(TokenKind.LPAREN):
            return None

        self.next_token()
        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None:
            return None
        if not self.expect_peek(TokenKind.RPAREN):
            return None
        if not self.expect_peek(TokenKind.LBRACE):
            return None
        consequence = self.parse_block_statement()

        alternative = None
        if self.peek_token_is(TokenKind.ELSE):
            self.next_token()
            if not self.expect_peek(TokenKind.LBRACE):
                return None
            alternative = self.parse_block_statement()

        return ast.IfExpression(token, condition, consequence, alternative)

    def parse_function_expression(self) -> Optional[ast.Expression]:
        token = self.cur_token
        if not self.expect_peek(TokenKind.LPAREN):
            return None
        parameters = self.parse_function_parameters()
        if parameters is None:
            return None
        if not self.expect_peek(TokenKind.LBRACE):
            return None
        body = self.parse_block_statement()
        return ast.FunctionExpression(token, parameters, body)

    def parse_function_parameters(self) -> Optional[List[ast.Identifier]]:
        identifiers: List[ast.Identifier] = []
        if self.peek_token_is(TokenKind.RPAREN):
            self.next_token()
            return identifiers

        if not self.expect_peek(TokenKind.IDENT):
            return None
        identifiers.append(ast.Identifier(self.cur_token, self.cur_token.text))
        while self.peek_token_is(TokenKind.COMMA):
            self.next_token()
            if not self.expect_peek(TokenKind.IDENT):
                return None
            identifiers.append(ast.Identifier(self.cur_token, self.cur_token.text))

        if not self.expect_peek(TokenKind.RPAREN):
            return None
        return identifiers

    def parse_call_expression(self, function: ast.Expression) -> Optional[ast.Expression]:
        token = self.cur_token
        arguments = self.parse_call_arguments()
        if arguments is None:
            return None
        return ast.CallExpression(token, function, arguments)

    def parse_call_arguments(self) -> Optional[List[ast.Expression]]:
        args: List[ast.Expression] = []
        if self.peek_token_is(TokenKind.RPAREN):
            self.next_token()
            return args

        self.next_token()
        arg = self.parse_expression(Precedence.LOWEST)
        if arg is None:
            return None
        args.append(arg)
        while self.peek_token_is(TokenKind.COMMA):
            self.next_token()
            self.next_token()
            arg = self.parse_expression(Precedence.LOWEST)
            if arg is None:
                return None
            args.append(arg)

        if not self.expect_peek(TokenKind.RPAREN):
            return None
        return args


def parse(source: str, max_depth: int = DEFAULT_MAX_DEPTH,
          file_path: str = "<unknown>") -> tuple[ast.Program, List[ParseError]]:
    """Scan and parse source text, returning the program and its diagnostics"""
    parser = Parser(Lexer(source), max_depth=max_depth, file_path=file_path)
    program = parser.parse_program()
    return program, parser.errors
