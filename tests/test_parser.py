import unittest
import sys
from pathlib import Path
sys.path.append(str(Path(__file__).parent.parent / 'src'))
from tinylang.errors import NestingTooDeepError
from tinylang.lexer import Lexer, tokenize
from tinylang.parser import Parser, Precedence, PRECEDENCES, parse
from tinylang.tokens import TokenKind
import tinylang.tinylang_ast as ast


class ParserTestCase(unittest.TestCase):
    def parse_clean(self, source):
        parser = Parser(Lexer(source))
        program = parser.parse_program()
        self.assertEqual([str(e) for e in parser.errors], [],
                         f"parser had errors for {source!r}")
        return program

    def single_expression(self, source):
        program = self.parse_clean(source)
        self.assertEqual(len(program.statements), 1)
        stmt = program.statements[0]
        self.assertIsInstance(stmt, ast.ExpressionStatement)
        return stmt.expression

    def assertLiteral(self, expr, expected):
        if isinstance(expected, bool):
            self.assertIsInstance(expr, ast.Boolean)
            self.assertEqual(expr.value, expected)
            self.assertEqual(expr.token_literal(), "true" if expected else "false")
        elif isinstance(expected, int):
            self.assertIsInstance(expr, ast.IntegerLiteral)
            self.assertEqual(expr.value, expected)
            self.assertEqual(expr.token_literal(), str(expected))
        else:
            self.assertIsInstance(expr, ast.Identifier)
            self.assertEqual(expr.value, expected)
            self.assertEqual(expr.token_literal(), expected)

    def assertInfix(self, expr, left, operator, right):
        self.assertIsInstance(expr, ast.InfixExpression)
        self.assertLiteral(expr.left, left)
        self.assertEqual(expr.operator, operator)
        self.assertLiteral(expr.right, right)


class TestStatements(ParserTestCase):
    def test_let_statements(self):
        cases = [
            ("let x = 5;", "x", 5),
            ("let y = true;", "y", True),
            ("let foobar = y;", "foobar", "y"),
        ]
        for source, name, value in cases:
            with self.subTest(source=source):
                program = self.parse_clean(source)
                self.assertEqual(len(program.statements), 1)
                stmt = program.statements[0]
                self.assertIsInstance(stmt, ast.LetStatement)
                self.assertEqual(stmt.token_literal(), "let")
                self.assertEqual(stmt.name.value, name)
                self.assertLiteral(stmt.value, value)

    def test_return_statements(self):
        program = self.parse_clean("return 5;\nreturn 10;\nreturn 993322;")
        self.assertEqual(len(program.statements), 3)
        for stmt, value in zip(program.statements, [5, 10, 993322]):
            self.assertIsInstance(stmt, ast.ReturnStatement)
            self.assertEqual(stmt.token_literal(), "return")
            self.assertLiteral(stmt.return_value, value)

    def test_semicolon_is_optional(self):
        program = self.parse_clean("let x = 1\nx")
        self.assertEqual(len(program.statements), 2)
        self.assertEqual(str(program), "let x = 1;x")

    def test_program_string(self):
        program = self.parse_clean("let myVar = anotherVar;")
        self.assertEqual(str(program), "let myVar = anotherVar;")


class TestExpressions(ParserTestCase):
    def test_identifier(self):
        self.assertLiteral(self.single_expression("foobar;"), "foobar")

    def test_integer_literal(self):
        self.assertLiteral(self.single_expression("5;"), 5)

    def test_boolean_literals(self):
        self.assertLiteral(self.single_expression("true"), True)
        self.assertLiteral(self.single_expression("false;"), False)

    def test_prefix_expressions(self):
        cases = [("!5", "!", 5), ("-15", "-", 15), ("!true", "!", True), ("!false", "!", False)]
        for source, operator, value in cases:
            with self.subTest(source=source):
                expr = self.single_expression(source)
                self.assertIsInstance(expr, ast.PrefixExpression)
                self.assertEqual(expr.operator, operator)
                self.assertLiteral(expr.right, value)

    def test_infix_expressions(self):
        cases = [
            ("5 + 5;", 5, "+", 5),
            ("5 - 5;", 5, "-", 5),
            ("5 * 5;", 5, "*", 5),
            ("5 / 5;", 5, "/", 5),
            ("5 > 5;", 5, ">", 5),
            ("5 < 5;", 5, "<", 5),
            ("5 == 5;", 5, "==", 5),
            ("5 != 5;", 5, "!=", 5),
            ("true == true", True, "==", True),
            ("true != false", True, "!=", False),
            ("false == false", False, "==", False),
        ]
        for source, left, operator, right in cases:
            with self.subTest(source=source):
                self.assertInfix(self.single_expression(source), left, operator, right)

    def test_operator_precedence(self):
        cases = [
            ("-a * b", "((-a) * b)"),
            ("!-a", "(!(-a))"),
            ("a + b + c", "((a + b) + c)"),
            ("a + b - c", "((a + b) - c)"),
            ("a * b * c", "((a * b) * c)"),
            ("a * b / c", "((a * b) / c)"),
            ("a + b / c", "(a + (b / c))"),
            ("a + b * c + d / e - f", "(((a + (b * c)) + (d / e)) - f)"),
            ("3 + 4; -5 * 5", "(3 + 4)((-5) * 5)"),
            ("5 > 4 == 3 < 4", "((5 > 4) == (3 < 4))"),
            ("5 < 4 != 3 > 4", "((5 < 4) != (3 > 4))"),
            ("3 + 4 * 5 == 3 * 1 + 4 * 5", "((3 + (4 * 5)) == ((3 * 1) + (4 * 5)))"),
            ("true", "true"),
            ("3 > 5 == false", "((3 > 5) == false)"),
            ("3 < 5 == true", "((3 < 5) == true)"),
            ("1 + (2 + 3) + 4", "((1 + (2 + 3)) + 4)"),
            ("(5 + 5) * 2", "((5 + 5) * 2)"),
            ("2 / (5 + 5)", "(2 / (5 + 5))"),
            ("-(5 + 5)", "(-(5 + 5))"),
            ("!(true == true)", "(!(true == true))"),
            ("a + add(b * c) + d", "((a + add((b * c))) + d)"),
            ("add(a, b, 1, 2 * 3, 4 + 5, add(6, 7 * 8))",
             "add(a, b, 1, (2 * 3), (4 + 5), add(6, (7 * 8)))"),
            ("add(a + b + c * d / f + g)", "add((((a + b) + ((c * d) / f)) + g))"),
        ]
        for source, expected in cases:
            with self.subTest(source=source):
                self.assertEqual(str(self.parse_clean(source)), expected)

    def test_precedence_table(self):
        self.assertLess(PRECEDENCES[TokenKind.EQ], PRECEDENCES[TokenKind.LT])
        self.assertLess(PRECEDENCES[TokenKind.GT], PRECEDENCES[TokenKind.PLUS])
        self.assertLess(PRECEDENCES[TokenKind.MINUS], PRECEDENCES[TokenKind.ASTERISK])
        self.assertLess(PRECEDENCES[TokenKind.SLASH], Precedence.PREFIX)
        self.assertEqual(PRECEDENCES[TokenKind.LPAREN], Precedence.CALL)
        self.assertNotIn(TokenKind.SEMICOLON, PRECEDENCES)

    def test_if_expression(self):
        expr = self.single_expression("if (x < y) { x }")
        self.assertIsInstance(expr, ast.IfExpression)
        self.assertInfix(expr.condition, "x", "<", "y")
        self.assertEqual(len(expr.consequence.statements), 1)
        self.assertLiteral(expr.consequence.statements[0].expression, "x")
        self.assertIsNone(expr.alternative)

    def test_if_else_expression(self):
        expr = self.single_expression("if (x < y) { x } else { y }")
        self.assertIsInstance(expr, ast.IfExpression)
        self.assertInfix(expr.condition, "x", "<", "y")
        self.assertLiteral(expr.consequence.statements[0].expression, "x")
        self.assertIsNotNone(expr.alternative)
        self.assertEqual(len(expr.alternative.statements), 1)
        self.assertLiteral(expr.alternative.statements[0].expression, "y")
        self.assertEqual(str(expr), "if ((x < y)) { x } else { y }")

    def test_function_literal(self):
        expr = self.single_expression("fn(x, y) { return x + y; }")
        self.assertIsInstance(expr, ast.FunctionExpression)
        self.assertIs(expr.token.kind, TokenKind.FUNCTION)
        self.assertEqual([p.value for p in expr.parameters], ["x", "y"])
        self.assertEqual(len(expr.body.statements), 1)
        body = expr.body.statements[0]
        self.assertIsInstance(body, ast.ReturnStatement)
        self.assertInfix(body.return_value, "x", "+", "y")

    def test_function_parameters(self):
        cases = [
            ("fn() {};", []),
            ("fn(x) {};", ["x"]),
            ("fn(x, y, z) {};", ["x", "y", "z"]),
        ]
        for source, expected in cases:
            with self.subTest(source=source):
                expr = self.single_expression(source)
                self.assertEqual([p.value for p in expr.parameters], expected)

    def test_call_expression(self):
        expr = self.single_expression("add(1, 2 * 3, 4 + 5);")
        self.assertIsInstance(expr, ast.CallExpression)
        self.assertLiteral(expr.function, "add")
        self.assertEqual(len(expr.arguments), 3)
        self.assertLiteral(expr.arguments[0], 1)
        self.assertInfix(expr.arguments[1], 2, "*", 3)
        self.assertInfix(expr.arguments[2], 4, "+", 5)

    def test_call_without_arguments(self):
        expr = self.single_expression("f()")
        self.assertIsInstance(expr, ast.CallExpression)
        self.assertEqual(expr.arguments, [])

    def test_calling_a_function_literal(self):
        expr = self.single_expression("fn(x) { x }(5)")
        self.assertIsInstance(expr, ast.CallExpression)
        self.assertIsInstance(expr.function, ast.FunctionExpression)
        self.assertLiteral(expr.arguments[0], 5)


class TestParseErrors(ParserTestCase):
    def errors_for(self, source):
        program, errors = parse(source)
        self.assertIsInstance(program, ast.Program)
        return [str(e) for e in errors]

    def test_let_missing_assign(self):
        errors = self.errors_for("let x 5;")
        self.assertEqual(errors, ["expected next token to be =, got INT instead"])

    def test_let_missing_identifier(self):
        errors = self.errors_for("let = 10;")
        self.assertIn("expected next token to be IDENT, got = instead", errors)

    def test_bare_operator_has_no_prefix_rule(self):
        errors = self.errors_for("*")
        self.assertEqual(errors, ["no prefix parse function for * found"])

    def test_missing_close_paren(self):
        errors = self.errors_for("(1 + 2")
        self.assertEqual(errors, ["expected next token to be ), got EOF instead"])

    def test_unterminated_block(self):
        errors = self.errors_for("if (x) { x")
        self.assertEqual(errors, ["expected next token to be }, got EOF instead"])

    def test_integer_out_of_range(self):
        errors = self.errors_for("9223372036854775808")
        self.assertEqual(errors, ['could not parse "9223372036854775808" as integer'])

    def test_largest_integer_parses(self):
        self.assertLiteral(self.single_expression("9223372036854775807"), 9223372036854775807)

    def test_trailing_comma_in_parameters(self):
        errors = self.errors_for("fn(x,) {}")
        self.assertEqual(errors[0], "expected next token to be IDENT, got ) instead")

    def test_illegal_token(self):
        errors = self.errors_for("@")
        self.assertEqual(errors, ["no prefix parse function for ILLEGAL found"])

    def test_parsing_continues_after_error(self):
        program, errors = parse("let x 5; 1 + 2;")
        self.assertEqual(len(errors), 1)
        self.assertEqual(str(program.statements[-1]), "(1 + 2)")

    def test_error_location(self):
        _, errors = parse("1 +\n  *", file_path="demo.tl")
        self.assertEqual(len(errors), 1)
        location = errors[0].location
        self.assertEqual((location.file, location.line, location.column), ("demo.tl", 2, 3))
        self.assertEqual(errors[0].describe(),
                         "ParseError at demo.tl:2:3: no prefix parse function for * found")

    def test_invalid_children_produce_no_node(self):
        program, errors = parse("-*;")
        self.assertEqual(program.statements, [])
        self.assertEqual(len(errors), 1)


class TestParserBehaviour(ParserTestCase):
    def test_deterministic(self):
        tokens = tokenize("let a = if (1 < 2) { fn(x) { x * 2 }(3) } else { -4 }; a + 1")
        first = Parser(tokens).parse_program()
        second = Parser(tokens).parse_program()
        self.assertEqual(str(first), str(second))
        self.assertEqual(first, second)

    def test_nodes_are_unhashable(self):
        expr = self.single_expression("1 + 2")
        self.assertIsNone(ast.Node.__hash__)
        with self.assertRaises(TypeError):
            hash(expr)
        with self.assertRaises(TypeError):
            {expr}

    def test_token_list_without_eof(self):
        tokens = [tok for tok in tokenize("1 + 2") if tok.kind is not TokenKind.EOF]
        parser = Parser(tokens)
        program = parser.parse_program()
        self.assertEqual(parser.errors, [])
        self.assertEqual(str(program), "(1 + 2)")

    def test_walk_visits_every_node(self):
        program = self.parse_clean("if (true) { 1 + 2 }")
        kinds = [type(node).__name__ for node in ast.walk(program)]
        self.assertEqual(kinds, ["Program", "ExpressionStatement", "IfExpression", "Boolean",
                                 "BlockStatement", "ExpressionStatement", "InfixExpression",
                                 "IntegerLiteral", "IntegerLiteral"])

    def test_nesting_limit(self):
        source = "(" * 20 + "1" + ")" * 20
        with self.assertRaises(NestingTooDeepError):
            Parser(Lexer(source), max_depth=10).parse_program()
        program = Parser(Lexer(source), max_depth=50).parse_program()
        self.assertEqual(str(program), "1")

    def test_nested_blocks_count_toward_limit(self):
        source = "if (true) { " * 6 + "1" + " }" * 6
        with self.assertRaises(NestingTooDeepError) as cm:
            Parser(Lexer(source), max_depth=8).parse_program()
        self.assertIn("too deeply nested", str(cm.exception))


if __name__ == '__main__':
    unittest.main()
