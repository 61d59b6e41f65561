"""Tree-walking interpreter for lfi3a.

Runtime state is one flat variable store and one function table. A call
snapshots the whole store, binds parameters into it, runs the body and then
restores the snapshot, so callees see the caller's variables but cannot
change them.
"""

from __future__ import annotations

import math
import sys
from typing import Dict, Iterable, List, Optional, TextIO

from .ast import POST_INCREMENT, Node, NodeKind
from .values import (
    ZERO,
    format_number,
    from_bool,
    is_truthy,
    parse_number,
)

DEFAULT_MAX_CALL_DEPTH = 200
# Host frames one language-level call may need; bounds the recursion limit.
FRAMES_PER_CALL = 40


class InterpreterError(Exception):
    def __init__(self, message: str, node: Optional[Node] = None):
        super().__init__(message)
        self.message = message
        self.node = node

    @property
    def line(self) -> Optional[int]:
        return self.node.line if self.node is not None else None

    @property
    def col(self) -> Optional[int]:
        return self.node.col if self.node is not None else None


class UndefinedVariableError(InterpreterError):
    def __init__(self, name: str, node: Optional[Node] = None):
        super().__init__(f"Undefined variable '{name}'", node)
        self.name = name


class UndefinedFunctionError(InterpreterError):
    def __init__(self, name: str, node: Optional[Node] = None):
        super().__init__(f"Undefined function '{name}'", node)
        self.name = name


class DivisionByZeroError(InterpreterError):
    def __init__(self, node: Optional[Node] = None):
        super().__init__("Division by zero", node)


class NumericConversionError(InterpreterError):
    def __init__(self, text: str, op: str, node: Optional[Node] = None):
        super().__init__(f"Invalid numeric operand '{text}' for '{op}'", node)
        self.text = text
        self.op = op


class RecursionDepthError(InterpreterError):
    def __init__(
        self, node: Optional[Node] = None, message: str = "Maximum call depth exceeded"
    ):
        super().__init__(message, node)


class Interpreter:
    def __init__(
        self,
        output: Optional[TextIO] = None,
        max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
    ):
        self.output = output
        self.max_call_depth = max_call_depth
        self.variables: Dict[str, str] = {}
        self.functions: Dict[str, Node] = {}
        self.return_value = ZERO
        self.has_returned = False
        self.call_depth = 0

    def run(self, nodes: Iterable[Node]) -> None:
        limit = sys.getrecursionlimit()
        needed = self.max_call_depth * FRAMES_PER_CALL + 1000
        if needed > limit:
            sys.setrecursionlimit(needed)
        try:
            for node in nodes:
                if self.has_returned:
                    break
                self.execute(node)
        except RecursionError:
            raise RecursionDepthError(node, "Expression nested too deeply") from None
        finally:
            sys.setrecursionlimit(limit)

    # --- statements ---
    def execute(self, node: Node) -> None:
        kind = node.kind
        if kind in (NodeKind.VAR_DECL, NodeKind.ASSIGNMENT):
            self.variables[node.value] = self.evaluate(node.children[0])
            return
        if kind is NodeKind.PRINT:
            values = [self.evaluate(child) for child in node.children]
            print(" ".join(values), file=self.output or sys.stdout)
            return
        if kind is NodeKind.IF:
            self._if(node)
            return
        if kind is NodeKind.WHILE:
            cond, body = node.children
            while is_truthy(self.evaluate(cond)):
                self.execute(body)
                if self.has_returned:
                    break
            return
        if kind is NodeKind.FOR:
            init, cond, increment, body = node.children
            self.execute(init)
            while is_truthy(self.evaluate(cond)):
                self.execute(body)
                if self.has_returned:
                    break
                self.evaluate(increment)
            return
        if kind is NodeKind.FUNCTION_DECL:
            self.functions[node.value] = node
            return
        if kind is NodeKind.RETURN:
            if node.children:
                self.return_value = self.evaluate(node.children[0])
            else:
                self.return_value = ZERO
            self.has_returned = True
            return
        if kind is NodeKind.BLOCK:
            for stmt in node.children:
                self.execute(stmt)
                if self.has_returned:
                    break
            return
        if kind is NodeKind.EXPR_STMT:
            self.evaluate(node.children[0])
            return
        # Bare expressions in statement position have no effect.

    def _if(self, node: Node) -> None:
        if is_truthy(self.evaluate(node.children[0])):
            self.execute(node.children[1])
            return
        for branch in node.children[2:]:
            if branch.kind is NodeKind.IF:
                if is_truthy(self.evaluate(branch.children[0])):
                    self.execute(branch.children[1])
                    return
            elif branch.kind is NodeKind.BLOCK:
                self.execute(branch)
                return

    # --- expressions ---
    def evaluate(self, node: Node) -> str:
        kind = node.kind
        if kind in (NodeKind.NUMBER, NodeKind.STRING, NodeKind.BOOLEAN):
            return node.value
        if kind is NodeKind.IDENTIFIER:
            try:
                return self.variables[node.value]
            except KeyError:
                raise UndefinedVariableError(node.value, node) from None
        if kind is NodeKind.BINARY_OP:
            left = self.evaluate(node.children[0])
            right = self.evaluate(node.children[1])
            return self._binary(node, left, right)
        if kind is NodeKind.UNARY_OP:
            return self._unary(node)
        if kind is NodeKind.CALL:
            return self._call(node)
        # Statements in expression position (e.g. an assignment used as a
        # for-loop increment) evaluate to zero without running.
        return ZERO

    def _binary(self, node: Node, left: str, right: str) -> str:
        op = node.op
        if op == "+":
            lnum = parse_number(left)
            rnum = parse_number(right)
            if lnum is None or rnum is None:
                return left + right
            return format_number(lnum + rnum)
        if op == "-":
            return format_number(self._number(left, node) - self._number(right, node))
        if op == "*":
            return format_number(self._number(left, node) * self._number(right, node))
        if op == "/":
            lnum = self._number(left, node)
            rnum = self._number(right, node)
            if rnum == 0:
                raise DivisionByZeroError(node)
            return format_number(lnum / rnum)
        if op == "==":
            return from_bool(left == right)
        if op == "!=":
            return from_bool(left != right)
        if op == "<":
            return from_bool(self._number(left, node) < self._number(right, node))
        if op == ">":
            return from_bool(self._number(left, node) > self._number(right, node))
        if op == "<=":
            return from_bool(self._number(left, node) <= self._number(right, node))
        if op == ">=":
            return from_bool(self._number(left, node) >= self._number(right, node))
        if op == "w":
            return from_bool(is_truthy(left) and is_truthy(right))
        if op == "wla":
            return from_bool(is_truthy(left) or is_truthy(right))
        return ZERO

    def _unary(self, node: Node) -> str:
        target = node.children[0]
        operand = self.evaluate(target)
        if node.op == "-":
            return format_number(-self._number(operand, node))
        if node.op == POST_INCREMENT and target.kind is NodeKind.IDENTIFIER:
            current = self._number(operand, node)
            incremented = current + 1
            if math.isfinite(incremented):
                self.variables[target.value] = str(int(incremented))
            else:
                self.variables[target.value] = format_number(incremented)
            return format_number(current)
        return ZERO

    def _call(self, node: Node) -> str:
        decl = self.functions.get(node.value)
        if decl is None:
            raise UndefinedFunctionError(node.value, node)
        if self.call_depth >= self.max_call_depth:
            raise RecursionDepthError(node)

        saved_vars = dict(self.variables)
        saved_has_returned = self.has_returned
        saved_return_value = self.return_value
        self.has_returned = False
        self.return_value = ZERO

        self.call_depth += 1
        try:
            # Extra arguments are ignored; missing ones leave the name unbound.
            params: List[str] = decl.params or []
            args = [self.evaluate(arg) for arg in node.children[: len(params)]]
            for name, value in zip(params, args):
                self.variables[name] = value
            self.execute(decl.body)
            result = self.return_value
        except RecursionError:
            raise RecursionDepthError(node) from None
        finally:
            self.call_depth -= 1
            self.variables = saved_vars
            self.has_returned = saved_has_returned
            self.return_value = saved_return_value
        return result

    def _number(self, text: str, node: Node) -> float:
        value = parse_number(text)
        if value is None:
            raise NumericConversionError(text, node.op, node)
        return value


def run(nodes: Iterable[Node], output: Optional[TextIO] = None) -> Interpreter:
    """Execute a parsed program and hand back the interpreter for inspection."""
    interpreter = Interpreter(output=output)
    interpreter.run(nodes)
    return interpreter


__all__ = [
    "Interpreter",
    "InterpreterError",
    "UndefinedVariableError",
    "UndefinedFunctionError",
    "DivisionByZeroError",
    "NumericConversionError",
    "RecursionDepthError",
    "DEFAULT_MAX_CALL_DEPTH",
    "run",
]
