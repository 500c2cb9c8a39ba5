import logging
from typing import List

import tinylang.tinylang_ast as ast
from tinylang.errors import NestingTooDeepError, SourceLocation
from tinylang.objects import (Object, ObjectType, Integer, Error, ReturnValue,
                              TRUE, FALSE, NULL, native_bool_to_boolean, is_error)
from tinylang.parser import DEFAULT_MAX_DEPTH

logger = logging.getLogger(__name__)

INT64_MASK = (1 << 64) - 1
INT64_SIGN = 1 << 63


def wrap_int64(value: int) -> int:
    """Reduce an integer to signed 64-bit two's complement"""
    value &= INT64_MASK
    return value - (1 << 64) if value & INT64_SIGN else value


def truncating_div(left: int, right: int) -> int:
    """Integer division rounding toward zero"""
    quotient = abs(left) // abs(right)
    return -quotient if (left < 0) != (right < 0) else quotient


def is_truthy(obj: Object) -> bool:
    # Everything is truthy except false and absence
    return obj != FALSE and obj != NULL


class Evaluator:
    """Tree-walking evaluator.

    Type mismatches and unsupported operators produce ``Error`` values rather
    than the absence value, so callers can tell a legitimate ``null`` apart from
    a failure. Nesting deeper than ``max_depth`` raises NestingTooDeepError.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH, file_path: str = "<unknown>"):
        self.max_depth = max_depth
        self.file_path = file_path
        self.depth = 0

    def evaluate(self, node: ast.Node) -> Object:
        self.depth += 1
        try:
            if self.depth > self.max_depth:
                location = None
                if node.token is not None:
                    location = SourceLocation(self.file_path, node.token.line, node.token.column)
                raise NestingTooDeepError.exceeded("evaluation", self.max_depth, location)
            return self._dispatch(node)
        finally:
            self.depth -= 1

    def _dispatch(self, node: ast.Node) -> Object:
        # Statements
        if isinstance(node, ast.Program):
            return self.eval_program(node.statements)
        elif isinstance(node, ast.ExpressionStatement):
            return self.evaluate(node.expression)
        elif isinstance(node, ast.BlockStatement):
            return self.eval_block_statement(node.statements)
        elif isinstance(node, ast.ReturnStatement):
            value = self.evaluate(node.return_value)
            if is_error(value):
                return value
            return ReturnValue(value)

        # Literals
        elif isinstance(node, ast.IntegerLiteral):
            return Integer(node.value)
        elif isinstance(node, ast.Boolean):
            return native_bool_to_boolean(node.value)

        # Operators
        elif isinstance(node, ast.PrefixExpression):
            right = self.evaluate(node.right)
            if is_error(right):
                return right
            return self.eval_prefix_expression(node.operator, right)
        elif isinstance(node, ast.InfixExpression):
            return self.eval_infix_chain(node)

        # Conditionals
        elif isinstance(node, ast.IfExpression):
            return self.eval_if_expression(node)

        # No binding environment exists, so names cannot be resolved
        elif isinstance(node, ast.Identifier):
            return Error(f"identifier not found: {node.value}")

        logger.debug(f"No evaluation rule for {type(node).__name__}")
        return Error(f"unsupported expression: {type(node).__name__}")

    def eval_program(self, statements: List[ast.Statement]) -> Object:
        result: Object = NULL
        for stmt in statements:
            result = self.evaluate(stmt)
            if isinstance(result, ReturnValue):
                return result.value
            if is_error(result):
                return result
        return result

    def eval_block_statement(self, statements: List[ast.Statement]) -> Object:
        result: Object = NULL
        for stmt in statements:
            result = self.evaluate(stmt)
            # Leave ReturnValue wrapped so enclosing blocks stop as well
            if result.type in (ObjectType.RETURN_VALUE, ObjectType.ERROR):
                return result
        return result

    def eval_prefix_expression(self, operator: str, right: Object) -> Object:
        if operator == "!":
            return self.eval_bang_operator(right)
        if operator == "-":
            return self.eval_minus_prefix_operator(right)
        return Error(f"unknown operator: {operator}{right.type}")

    def eval_bang_operator(self, right: Object) -> Object:
        return FALSE if is_truthy(right) else TRUE

    def eval_minus_prefix_operator(self, right: Object) -> Object:
        if right.type is not ObjectType.INTEGER:
            return Error(f"unknown operator: -{right.type}")
        return Integer(wrap_int64(-right.value))

    def eval_infix_chain(self, node: ast.InfixExpression) -> Object:
        """Evaluate a left-associative operator chain such as ``1 + 2 - 3 * 4``.

        The left spine is walked in a loop, so a flat chain costs one level of
        depth however long it is. Right operands are evaluated recursively.
        """
        spine = []
        while isinstance(node, ast.InfixExpression):
            spine.append(node)
            node = node.left

        left = self.evaluate(node)
        if is_error(left):
            return left
        for infix in reversed(spine):
            right = self.evaluate(infix.right)
            if is_error(right):
                return right
            left = self.eval_infix_expression(infix.operator, left, right)
            if is_error(left):
                return left
        return left

    def eval_infix_expression(self, operator: str, left: Object, right: Object) -> Object:
        if left.type is ObjectType.INTEGER and right.type is ObjectType.INTEGER:
            return self.eval_integer_infix_expression(operator, left, right)
        if left.type is not right.type:
            return Error(f"type mismatch: {left.type} {operator} {right.type}")
        if left.type is ObjectType.BOOLEAN:
            if operator == "==":
                return native_bool_to_boolean(left == right)
            if operator == "!=":
                return native_bool_to_boolean(left != right)
        return Error(f"unknown operator: {left.type} {operator} {right.type}")

    def eval_integer_infix_expression(self, operator: str, left: Integer, right: Integer) -> Object:
        left_val = left.value
        right_val = right.value

        if operator == "+":
            return Integer(wrap_int64(left_val + right_val))
        elif operator == "-":
            return Integer(wrap_int64(left_val - right_val))
        elif operator == "*":
            return Integer(wrap_int64(left_val * right_val))
        elif operator == "/":
            if right_val == 0:
                return Error("division by zero")
            return Integer(wrap_int64(truncating_div(left_val, right_val)))
        elif operator == "<":
            return native_bool_to_boolean(left_val < right_val)
        elif operator == ">":
            return native_bool_to_boolean(left_val > right_val)
        elif operator == "==":
            return native_bool_to_boolean(left_val == right_val)
        elif operator == "!=":
            return native_bool_to_boolean(left_val != right_val)
        return Error(f"unknown operator: {left.type} {operator} {right.type}")

    def eval_if_expression(self, node: ast.IfExpression) -> Object:
        condition = self.evaluate(node.condition)
        if is_error(condition):
            return condition
        if is_truthy(condition):
            return self.evaluate(node.consequence)
        elif node.alternative is not None:
            return self.evaluate(node.alternative)
        return NULL


def evaluate(node: ast.Node, max_depth: int = DEFAULT_MAX_DEPTH) -> Object:
    """Evaluate a node with a fresh evaluator"""
    return Evaluator(max_depth=max_depth).evaluate(node)
