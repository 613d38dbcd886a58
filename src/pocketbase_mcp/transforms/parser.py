"""
Parser for transform expressions.

Converts tokens into an Abstract Syntax Tree (AST) using JavaScript operator
precedence, lowest first:

  ?:  ??  ||  &&  == !=  < <= > >=  + -  * / %  unary ! -  .member [index] call
"""

from pocketbase_mcp.transforms.ast import (
    ArrayNode,
    BinaryOpNode,
    CallNode,
    ConditionalNode,
    ExpressionNode,
    IdentifierNode,
    IndexNode,
    LiteralNode,
    MemberNode,
    UnaryOpNode,
)
from pocketbase_mcp.transforms.errors import TransformSyntaxError
from pocketbase_mcp.transforms.lexer import Token, TokenType, TransformLexer

# Binary precedence levels, lowest first. Each level is left-associative.
BINARY_LEVELS: list[dict[TokenType, str]] = [
    {TokenType.NULLISH: "??"},
    {TokenType.OR: "||"},
    {TokenType.AND: "&&"},
    {TokenType.EQUALS: "==", TokenType.NOT_EQUALS: "!="},
    {
        TokenType.LESS_THAN: "<",
        TokenType.GREATER_THAN: ">",
        TokenType.LESS_EQUAL: "<=",
        TokenType.GREATER_EQUAL: ">=",
    },
    {TokenType.PLUS: "+", TokenType.MINUS: "-"},
    {TokenType.STAR: "*", TokenType.SLASH: "/", TokenType.PERCENT: "%"},
]


class TransformParser:
    """Parser for transform expressions."""

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0

    @classmethod
    def parse(cls, expression_text: str) -> ExpressionNode:
        """Parse a transform expression string into an AST."""
        if not expression_text or not expression_text.strip():
            raise TransformSyntaxError("Empty transform expression")
        lexer = TransformLexer(expression_text)
        tokens = lexer.tokenize()
        parser = cls(tokens)
        try:
            expression = parser._parse_expression()
        except RecursionError:
            raise TransformSyntaxError("Expression is nested too deeply") from None
        if not parser._is_at_end():
            token = parser._current()
            raise TransformSyntaxError(
                f"Unexpected token after expression: {token.value}", token.line, token.column
            )
        return expression

    def _parse_expression(self) -> ExpressionNode:
        """Parse an expression (entry point for precedence climbing)."""
        return self._parse_conditional()

    def _parse_conditional(self) -> ExpressionNode:
        """Parse 'test ? consequent : alternate' (right-associative)."""
        test = self._parse_binary(0)
        if not self._check(TokenType.QUESTION):
            return test

        self._advance()
        consequent = self._parse_expression()
        self._expect(TokenType.COLON, "Expected ':' in conditional expression")
        alternate = self._parse_expression()
        return ConditionalNode(test=test, consequent=consequent, alternate=alternate)

    def _parse_binary(self, level: int) -> ExpressionNode:
        """Parse a left-associative binary operator level."""
        if level >= len(BINARY_LEVELS):
            return self._parse_unary()

        operators = BINARY_LEVELS[level]
        left = self._parse_binary(level + 1)
        while self._current().type in operators:
            operator = operators[self._advance().type]
            right = self._parse_binary(level + 1)
            left = BinaryOpNode(operator=operator, left=left, right=right)
        return left

    def _parse_unary(self) -> ExpressionNode:
        """Parse '!x' and '-x'."""
        if self._check(TokenType.NOT):
            self._advance()
            return UnaryOpNode(operator="!", operand=self._parse_unary())
        if self._check(TokenType.MINUS):
            self._advance()
            return UnaryOpNode(operator="-", operand=self._parse_unary())
        if self._check(TokenType.PLUS):
            self._advance()
            return UnaryOpNode(operator="+", operand=self._parse_unary())
        return self._parse_postfix()

    def _parse_postfix(self) -> ExpressionNode:
        """Parse member access, indexing and calls chained after a primary."""
        expression = self._parse_primary()

        while True:
            if self._check(TokenType.DOT):
                self._advance()
                token = self._expect(TokenType.IDENTIFIER, "Expected property name after '.'")
                expression = MemberNode(target=expression, name=token.value)
            elif self._check(TokenType.LBRACKET):
                self._advance()
                index = self._parse_expression()
                self._expect(TokenType.RBRACKET, "Expected ']' after index")
                expression = IndexNode(target=expression, index=index)
            elif self._check(TokenType.LPAREN):
                self._advance()
                arguments = self._parse_arguments(TokenType.RPAREN)
                self._expect(TokenType.RPAREN, "Expected ')' after function arguments")
                expression = CallNode(callee=expression, arguments=arguments)
            else:
                return expression

    def _parse_primary(self) -> ExpressionNode:
        """Parse literals, identifiers, arrays and parenthesized expressions."""
        token = self._current()

        if self._check(TokenType.STRING):
            self._advance()
            return LiteralNode(value=token.value)

        if self._check(TokenType.NUMBER):
            self._advance()
            if any(c in token.value for c in ".eE"):
                return LiteralNode(value=float(token.value))
            return LiteralNode(value=int(token.value))

        if self._check(TokenType.BOOLEAN):
            self._advance()
            return LiteralNode(value=token.value == "true")

        if self._check(TokenType.NULL):
            self._advance()
            return LiteralNode(value=None)

        if self._check(TokenType.IDENTIFIER):
            self._advance()
            return IdentifierNode(name=token.value)

        if self._check(TokenType.LBRACKET):
            self._advance()
            elements = self._parse_arguments(TokenType.RBRACKET)
            self._expect(TokenType.RBRACKET, "Expected ']' after array elements")
            return ArrayNode(elements=elements)

        if self._check(TokenType.LPAREN):
            self._advance()
            expression = self._parse_expression()
            self._expect(TokenType.RPAREN, "Expected ')' after expression")
            return expression

        if self._is_at_end():
            raise TransformSyntaxError("Unexpected end of expression", token.line, token.column)

        raise TransformSyntaxError(f"Unexpected token: {token.value}", token.line, token.column)

    def _parse_arguments(self, closing: TokenType) -> list[ExpressionNode]:
        """Parse a comma separated list up to (not including) the closing token."""
        arguments: list[ExpressionNode] = []

        if self._check(closing):
            return arguments

        arguments.append(self._parse_expression())
        while self._check(TokenType.COMMA):
            self._advance()
            arguments.append(self._parse_expression())

        return arguments

    # Helper methods

    def _current(self) -> Token:
        """Get the current token."""
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return self.tokens[-1]  # Return EOF

    def _advance(self) -> Token:
        """Advance to the next token."""
        token = self._current()
        if not self._is_at_end():
            self.pos += 1
        return token

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token matches the given type."""
        return self._current().type == token_type

    def _expect(self, token_type: TokenType, message: str) -> Token:
        """Consume a token of the given type or raise a syntax error."""
        if not self._check(token_type):
            token = self._current()
            raise TransformSyntaxError(message, token.line, token.column)
        return self._advance()

    def _is_at_end(self) -> bool:
        """Check if we're at the end of tokens."""
        return self._current().type == TokenType.EOF
