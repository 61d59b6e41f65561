"""Recursive-descent parser for the lfi3a language."""

from __future__ import annotations

import sys
from typing import List, Optional

from . import lexer
from .ast import POST_INCREMENT, Node, NodeKind

# Roughly ten host frames per parenthesis level.
PARSE_RECURSION_LIMIT = 10000


class ParseError(Exception):
    def __init__(self, message: str, token: lexer.Token):
        super().__init__(message)
        self.message = message
        self.token = token

    @classmethod
    def expected(cls, message: str, token: lexer.Token) -> ParseError:
        return cls(f"{message} at token: {token.lexeme}", token)

    @classmethod
    def unexpected(cls, token: lexer.Token) -> ParseError:
        return cls(f"Unexpected token: {token.lexeme}", token)

    @property
    def line(self) -> int:
        return self.token.line

    @property
    def col(self) -> int:
        return self.token.col


class Parser:
    def __init__(self, tokens: List[lexer.Token]):
        self.tokens = tokens
        self.current = 0

    def parse(self) -> List[Node]:
        nodes: List[Node] = []
        limit = sys.getrecursionlimit()
        if PARSE_RECURSION_LIMIT > limit:
            sys.setrecursionlimit(PARSE_RECURSION_LIMIT)
        try:
            while not self._is_at_end():
                stmt = self._statement()
                if stmt is not None:
                    nodes.append(stmt)
                self._skip_semicolons()
        except RecursionError:
            raise ParseError("Expression nested too deeply", self._peek()) from None
        finally:
            sys.setrecursionlimit(limit)
        return nodes

    # --- statements ---
    def _statement(self) -> Optional[Node]:
        self._skip_semicolons()
        if self._is_at_end():
            return None
        if self._check_kw("dir"):
            return self._var_declaration()
        if self._check_kw("kteb"):
            return self._print_statement()
        if self._check_kw("ila"):
            return self._if_statement()
        if self._check_kw("ma7ad"):
            return self._while_statement()
        if self._check_kw("kol"):
            return self._for_statement()
        if self._check_kw("dalla"):
            return self._function_declaration()
        if self._check_kw("rje3"):
            return self._return_statement()
        if self._check_kw("kalla"):
            return self._call_statement()
        if self._check_kind(lexer.TokenKind.LBRACE):
            self._advance()
            return self._block()
        return self._assignment_or_expression()

    def _var_declaration(self) -> Node:
        kw = self._consume_kw("dir", "Expected 'dir'")
        name_tok = self._consume(lexer.TokenKind.IDENT, "Expected variable name")
        self._consume(lexer.TokenKind.EQ, "Expected '=' in variable declaration")
        value = self._expression()
        return Node(
            NodeKind.VAR_DECL,
            value=name_tok.lexeme,
            children=[value],
            line=kw.line,
            col=kw.col,
        )

    def _print_statement(self) -> Node:
        kw = self._consume_kw("kteb", "Expected 'kteb'")
        self._consume(lexer.TokenKind.LPAREN, "Expected '(' after kteb")
        args = self._arguments()
        self._consume(lexer.TokenKind.RPAREN, "Expected ')' after kteb arguments")
        return Node(NodeKind.PRINT, children=args, line=kw.line, col=kw.col)

    def _if_statement(self) -> Node:
        kw = self._consume_kw("ila", "Expected 'ila'")
        cond, then_block = self._condition_and_block("ila", "if")
        node = Node(NodeKind.IF, children=[cond, then_block], line=kw.line, col=kw.col)

        while self._check_kw("wila"):
            elif_kw = self._advance()
            elif_cond, elif_block = self._condition_and_block("wila", "wila")
            node.children.append(
                Node(
                    NodeKind.IF,
                    children=[elif_cond, elif_block],
                    line=elif_kw.line,
                    col=elif_kw.col,
                )
            )

        # 'wla' followed by 'w' is an operator occurrence, not an else.
        if self._check_kw("wla") and not self._next_is_kw("w"):
            self._advance()
            self._consume(lexer.TokenKind.LBRACE, "Expected '{' for else block")
            node.children.append(self._block())
        return node

    def _condition_and_block(self, keyword: str, block_name: str):
        self._consume(lexer.TokenKind.LPAREN, f"Expected '(' after {keyword}")
        cond = self._expression()
        self._consume(lexer.TokenKind.RPAREN, "Expected ')' after condition")
        self._consume(lexer.TokenKind.LBRACE, f"Expected '{{' for {block_name} block")
        return cond, self._block()

    def _while_statement(self) -> Node:
        kw = self._consume_kw("ma7ad", "Expected 'ma7ad'")
        cond, body = self._condition_and_block("ma7ad", "while")
        return Node(NodeKind.WHILE, children=[cond, body], line=kw.line, col=kw.col)

    def _for_statement(self) -> Node:
        kw = self._consume_kw("kol", "Expected 'kol'")
        self._consume(lexer.TokenKind.LPAREN, "Expected '(' after kol")
        if self._check_kw("dir"):
            init = self._var_declaration()
        else:
            init = self._assignment_or_expression()
        self._consume(lexer.TokenKind.SEMICOLON, "Expected ';' after for init")
        cond = self._expression()
        self._consume(lexer.TokenKind.SEMICOLON, "Expected ';' after for condition")
        increment = self._assignment_or_expression()
        self._consume(lexer.TokenKind.RPAREN, "Expected ')' after for clauses")
        self._consume(lexer.TokenKind.LBRACE, "Expected '{' for for block")
        body = self._block()
        return Node(
            NodeKind.FOR,
            children=[init, cond, increment, body],
            line=kw.line,
            col=kw.col,
        )

    def _function_declaration(self) -> Node:
        kw = self._consume_kw("dalla", "Expected 'dalla'")
        name_tok = self._consume(lexer.TokenKind.IDENT, "Expected function name")
        self._consume(lexer.TokenKind.LPAREN, "Expected '(' after function name")
        params: List[str] = []
        if not self._check_kind(lexer.TokenKind.RPAREN):
            while True:
                param = self._consume(lexer.TokenKind.IDENT, "Expected parameter name")
                params.append(param.lexeme)
                if not self._match(lexer.TokenKind.COMMA):
                    break
        self._consume(lexer.TokenKind.RPAREN, "Expected ')' after parameters")
        self._consume(lexer.TokenKind.LBRACE, "Expected '{' for function body")
        body = self._block()
        return Node(
            NodeKind.FUNCTION_DECL,
            value=name_tok.lexeme,
            params=params,
            body=body,
            line=kw.line,
            col=kw.col,
        )

    def _return_statement(self) -> Node:
        kw = self._consume_kw("rje3", "Expected 'rje3'")
        node = Node(NodeKind.RETURN, line=kw.line, col=kw.col)
        if not self._check_kind(lexer.TokenKind.SEMICOLON) and not self._check_kind(
            lexer.TokenKind.RBRACE
        ):
            node.children.append(self._expression())
        return node

    def _call_statement(self) -> Node:
        kw = self._consume_kw("kalla", "Expected 'kalla'")
        call = self._primary()
        if call.kind != NodeKind.CALL:
            raise ParseError.expected(
                "Expected function call after kalla", self._previous()
            )
        return Node(NodeKind.EXPR_STMT, children=[call], line=kw.line, col=kw.col)

    def _block(self) -> Node:
        """Statements up to the closing '}' (the '{' is already consumed)."""
        start = self._previous()
        stmts: List[Node] = []
        while not self._check_kind(lexer.TokenKind.RBRACE) and not self._is_at_end():
            stmt = self._statement()
            if stmt is not None:
                stmts.append(stmt)
            self._skip_semicolons()
        # A missing '}' at end of input closes the block implicitly.
        self._match(lexer.TokenKind.RBRACE)
        return Node(NodeKind.BLOCK, children=stmts, line=start.line, col=start.col)

    def _assignment_or_expression(self) -> Node:
        expr = self._expression()
        if self._match(lexer.TokenKind.EQ):
            eq_tok = self._previous()
            if expr.kind != NodeKind.IDENTIFIER:
                raise ParseError.expected("Invalid assignment target", eq_tok)
            value = self._expression()
            return Node(
                NodeKind.ASSIGNMENT,
                value=expr.value,
                children=[value],
                line=expr.line,
                col=expr.col,
            )
        return expr

    # --- expressions ---
    def _expression(self) -> Node:
        return self._logical_or()

    def _logical_or(self) -> Node:
        expr = self._logical_and()
        while self._check_kw("wla") and not self._next_is_kw("w"):
            op_tok = self._advance()
            right = self._logical_and()
            expr = self._binary(expr, op_tok, right)
        return expr

    def _logical_and(self) -> Node:
        expr = self._equality()
        while self._check_kw("w"):
            op_tok = self._advance()
            right = self._equality()
            expr = self._binary(expr, op_tok, right)
        return expr

    def _equality(self) -> Node:
        expr = self._comparison()
        while self._match_any(lexer.TokenKind.EQEQ, lexer.TokenKind.NEQ):
            op_tok = self._previous()
            right = self._comparison()
            expr = self._binary(expr, op_tok, right)
        return expr

    def _comparison(self) -> Node:
        expr = self._addition()
        while self._match_any(
            lexer.TokenKind.LT,
            lexer.TokenKind.GT,
            lexer.TokenKind.LTE,
            lexer.TokenKind.GTE,
        ):
            op_tok = self._previous()
            right = self._addition()
            expr = self._binary(expr, op_tok, right)
        return expr

    def _addition(self) -> Node:
        expr = self._multiplication()
        while self._match_any(lexer.TokenKind.PLUS, lexer.TokenKind.MINUS):
            op_tok = self._previous()
            right = self._multiplication()
            expr = self._binary(expr, op_tok, right)
        return expr

    def _multiplication(self) -> Node:
        expr = self._unary()
        while self._match_any(lexer.TokenKind.STAR, lexer.TokenKind.SLASH):
            op_tok = self._previous()
            right = self._unary()
            expr = self._binary(expr, op_tok, right)
        return expr

    def _unary(self) -> Node:
        if self._match(lexer.TokenKind.MINUS):
            op_tok = self._previous()
            operand = self._unary()
            return Node(
                NodeKind.UNARY_OP,
                op=op_tok.lexeme,
                children=[operand],
                line=op_tok.line,
                col=op_tok.col,
            )
        return self._postfix()

    def _postfix(self) -> Node:
        expr = self._primary()
        while self._match(lexer.TokenKind.PLUSPLUS):
            op_tok = self._previous()
            expr = Node(
                NodeKind.UNARY_OP,
                op=POST_INCREMENT,
                children=[expr],
                line=op_tok.line,
                col=op_tok.col,
            )
        return expr

    def _primary(self) -> Node:
        if self._match(lexer.TokenKind.NUMBER):
            tok = self._previous()
            return Node(NodeKind.NUMBER, value=tok.lexeme, line=tok.line, col=tok.col)
        if self._match(lexer.TokenKind.STRING):
            tok = self._previous()
            return Node(NodeKind.STRING, value=tok.lexeme, line=tok.line, col=tok.col)
        if self._check_kw("s7i7") or self._check_kw("ghalat"):
            tok = self._advance()
            return Node(NodeKind.BOOLEAN, value=tok.lexeme, line=tok.line, col=tok.col)
        if self._match(lexer.TokenKind.IDENT):
            tok = self._previous()
            if self._match(lexer.TokenKind.LPAREN):
                args = self._arguments()
                self._consume(
                    lexer.TokenKind.RPAREN, "Expected ')' after function arguments"
                )
                return Node(
                    NodeKind.CALL,
                    value=tok.lexeme,
                    children=args,
                    line=tok.line,
                    col=tok.col,
                )
            return Node(NodeKind.IDENTIFIER, value=tok.lexeme, line=tok.line, col=tok.col)
        if self._match(lexer.TokenKind.LPAREN):
            expr = self._expression()
            self._consume(lexer.TokenKind.RPAREN, "Expected ')' after expression")
            return expr
        raise ParseError.unexpected(self._peek())

    def _arguments(self) -> List[Node]:
        args: List[Node] = []
        if not self._check_kind(lexer.TokenKind.RPAREN):
            args.append(self._expression())
            while self._match(lexer.TokenKind.COMMA):
                args.append(self._expression())
        return args

    def _binary(self, left: Node, op_tok: lexer.Token, right: Node) -> Node:
        return Node(
            NodeKind.BINARY_OP,
            op=op_tok.lexeme,
            children=[left, right],
            line=op_tok.line,
            col=op_tok.col,
        )

    # --- helpers ---
    def _skip_semicolons(self) -> None:
        while self._match(lexer.TokenKind.SEMICOLON):
            pass

    def _match(self, kind: lexer.TokenKind) -> bool:
        if self._check_kind(kind):
            self._advance()
            return True
        return False

    def _match_any(self, *kinds: lexer.TokenKind) -> bool:
        for kind in kinds:
            if self._match(kind):
                return True
        return False

    def _consume(self, kind: lexer.TokenKind, msg: str) -> lexer.Token:
        if self._check_kind(kind):
            return self._advance()
        raise ParseError.expected(msg, self._peek())

    def _consume_kw(self, kw: str, msg: str) -> lexer.Token:
        if self._check_kw(kw):
            return self._advance()
        raise ParseError.expected(msg, self._peek())

    def _check_kw(self, kw: str) -> bool:
        return self._peek().is_keyword(kw)

    def _next_is_kw(self, kw: str) -> bool:
        if self.current + 1 >= len(self.tokens):
            return False
        return self.tokens[self.current + 1].is_keyword(kw)

    def _check_kind(self, kind: lexer.TokenKind) -> bool:
        return self._peek().kind == kind

    def _advance(self) -> lexer.Token:
        tok = self._peek()
        if not self._is_at_end():
            self.current += 1
        return tok

    def _peek(self) -> lexer.Token:
        if self.current < len(self.tokens):
            return self.tokens[self.current]
        return self.tokens[-1]

    def _previous(self) -> lexer.Token:
        return self.tokens[max(self.current - 1, 0)]

    def _is_at_end(self) -> bool:
        return self._peek().kind == lexer.TokenKind.EOF


def parse(tokens: List[lexer.Token]) -> List[Node]:
    """Parse a token stream into top-level statements; raises ParseError."""
    return Parser(tokens).parse()


__all__ = ["Parser", "ParseError", "parse"]
