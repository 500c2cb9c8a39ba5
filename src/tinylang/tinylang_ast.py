from typing import List, Optional

from tinylang.tokens import Token


class Node:
    def __init__(self, token: Optional[Token]):
        self.token = token

    def token_literal(self) -> str:
        return self.token.text if self.token else ""

    def children(self) -> List['Node']:
        """Direct child nodes, in source order"""
        return []

    def __eq__(self, other):
        return type(self) is type(other) and vars(self) == vars(other)

    # Nodes are mutable and compare by structure, so they are unhashable
    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"


class Statement(Node):
    pass


class Expression(Node):
    pass


class Program(Node):
    def __init__(self, statements: Optional[List[Statement]] = None):
        super().__init__(None)
        self.statements = list(statements or [])

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""

    def children(self):
        return list(self.statements)

    def __str__(self) -> str:
        return "".join(str(stmt) for stmt in self.statements)


class Identifier(Expression):
    def __init__(self, token: Token, value: str):
        super().__init__(token)
        self.value = value

    def __str__(self) -> str:
        return self.value


class LetStatement(Statement):
    def __init__(self, token: Token, name: Identifier, value: Expression):
        super().__init__(token)
        self.name = name
        self.value = value

    def children(self):
        return [self.name, self.value]

    def __str__(self) -> str:
        return f"{self.token_literal()} {self.name} = {self.value};"


class ReturnStatement(Statement):
    def __init__(self, token: Token, return_value: Expression):
        super().__init__(token)
        self.return_value = return_value

    def children(self):
        return [self.return_value]

    def __str__(self) -> str:
        return f"{self.token_literal()} {self.return_value};"


class ExpressionStatement(Statement):
    def __init__(self, token: Token, expression: Expression):
        super().__init__(token)
        self.expression = expression

    def children(self):
        return [self.expression]

    def __str__(self) -> str:
        return str(self.expression)


class BlockStatement(Statement):
    def __init__(self, token: Token, statements: List[Statement]):
        super().__init__(token)
        self.statements = list(statements)

    def children(self):
        return list(self.statements)

    def __str__(self) -> str:
        return "".join(str(stmt) for stmt in self.statements)


class IntegerLiteral(Expression):
    def __init__(self, token: Token, value: int):
        super().__init__(token)
        self.value = value

    def __str__(self) -> str:
        return self.token_literal()


class Boolean(Expression):
    def __init__(self, token: Token, value: bool):
        super().__init__(token)
        self.value = value

    def __str__(self) -> str:
        return self.token_literal()


class PrefixExpression(Expression):
    def __init__(self, token: Token, operator: str, right: Expression):
        super().__init__(token)
        self.operator = operator
        self.right = right

    def children(self):
        return [self.right]

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


class InfixExpression(Expression):
    def __init__(self, token: Token, left: Expression, operator: str, right: Expression):
        super().__init__(token)
        self.left = left
        self.operator = operator
        self.right = right

    def children(self):
        return [self.left, self.right]

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


class IfExpression(Expression):
    def __init__(self, token: Token, condition: Expression, consequence: BlockStatement,
                 alternative: Optional[BlockStatement] = None):
        super().__init__(token)
        self.condition = condition
        self.consequence = consequence
        self.alternative = alternative

    def children(self):
        nodes = [self.condition, self.consequence]
        if self.alternative is not None:
            nodes.append(self.alternative)
        return nodes

    def __str__(self) -> str:
        text = f"if ({self.condition}) {{ {self.consequence} }}"
        if self.alternative is not None:
            text += f" else {{ {self.alternative} }}"
        return text


class FunctionExpression(Expression):
    def __init__(self, token: Token, parameters: List[Identifier], body: BlockStatement):
        super().__init__(token)
        self.parameters = list(parameters)
        self.body = body

    def children(self):
        return [*self.parameters, self.body]

    def __str__(self) -> str:
        params = ", ".join(str(param) for param in self.parameters)
        return f"{self.token_literal()}({params}) {{ {self.body} }}"


class CallExpression(Expression):
    def __init__(self, token: Token, function: Expression, arguments: List[Expression]):
        super().__init__(token)
        self.function = function  # Identifier or FunctionExpression
        self.arguments = list(arguments)

    def children(self):
        return [self.function, *self.arguments]

    def __str__(self) -> str:
        args = ", ".join(str(arg) for arg in self.arguments)
        return f"{self.function}({args})"


def walk(node: Node):
    """Yield node and all of its descendants, depth first"""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children()))
