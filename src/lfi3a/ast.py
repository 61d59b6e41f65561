"""AST node definitions for the lfi3a language.

Every construct is a single ``Node`` tagged with a ``NodeKind``. Children are
positional and their meaning depends on the kind:

- VAR_DECL / ASSIGNMENT: children[0] is the initializer, value is the name
- PRINT: children are the printed expressions, in order
- IF: [condition, then-block, *elseif IF nodes, optional else BLOCK]
- WHILE: [condition, body]
- FOR: [init, condition, increment, body]
- CALL: value is the callee name, children are the arguments
- FUNCTION_DECL: value is the name, params and body are set
- RETURN: [] or [expression]
- EXPR_STMT: [call] (the ``kalla`` statement)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class NodeKind(Enum):
    # Literals
    NUMBER = auto()
    STRING = auto()
    BOOLEAN = auto()
    IDENTIFIER = auto()

    # Expressions
    BINARY_OP = auto()
    UNARY_OP = auto()
    CALL = auto()

    # Statements
    VAR_DECL = auto()
    ASSIGNMENT = auto()
    PRINT = auto()
    IF = auto()
    WHILE = auto()
    FOR = auto()
    FUNCTION_DECL = auto()
    RETURN = auto()
    BLOCK = auto()
    EXPR_STMT = auto()


# Operator spelling used for the postfix increment.
POST_INCREMENT = "post++"


@dataclass
class Node:
    kind: NodeKind
    value: Optional[str] = None
    op: Optional[str] = None
    children: List[Node] = field(default_factory=list)
    params: Optional[List[str]] = None
    body: Optional[Node] = None
    line: Optional[int] = field(default=None, kw_only=True)
    col: Optional[int] = field(default=None, kw_only=True)


def dump(node: Optional[Node]) -> Optional[Dict[str, Any]]:
    """Nested-dict view of a tree, for ``lfi3a --ast``."""
    if node is None:
        return None
    d: Dict[str, Any] = {"kind": node.kind.name}
    if node.value is not None:
        d["value"] = node.value
    if node.op is not None:
        d["op"] = node.op
    if node.params is not None:
        d["params"] = list(node.params)
    if node.children:
        d["children"] = [dump(c) for c in node.children]
    if node.body is not None:
        d["body"] = dump(node.body)
    return d


def pretty(obj: Any, indent: int = 0) -> str:
    sp = "  " * indent
    if isinstance(obj, dict):
        lines = []
        for k, v in obj.items():
            if isinstance(v, (dict, list)):
                lines.append(f"{sp}{k}:")
                lines.append(pretty(v, indent + 1))
            else:
                lines.append(f"{sp}{k}: {v!r}" if k == "value" else f"{sp}{k}: {v}")
        return "\n".join(lines)
    if isinstance(obj, list):
        lines = []
        for item in obj:
            lines.append(f"{sp}-")
            lines.append(pretty(item, indent + 1))
        return "\n".join(lines)
    return f"{sp}{obj}"


__all__ = [
    "Node",
    "NodeKind",
    "POST_INCREMENT",
    "dump",
    "pretty",
]
