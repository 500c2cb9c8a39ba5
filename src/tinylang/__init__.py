"""A small expression language: ply-based lexer, Pratt parser and tree-walking evaluator."""

from tinylang.evaluator import Evaluator, evaluate
from tinylang.lexer import Lexer, tokenize
from tinylang.parser import Parser, parse

__all__ = ["Evaluator", "Lexer", "Parser", "evaluate", "parse", "tokenize"]
