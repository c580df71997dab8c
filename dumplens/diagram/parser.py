"""Parser for ER diagram text using Lark.

Turns diagram text into an ``ERDocument`` so that a rendering engine which
does not speak the diagram language natively can be driven from it.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from lark import Lark, Token, Transformer, UnexpectedInput

from .errors import DiagramSyntaxError, SyntaxErrorDetail
from .grammar import DIAGRAM_GRAMMAR
from .models import (
    LEFT_CARDINALITIES,
    RIGHT_CARDINALITIES,
    ERAttribute,
    ERDocument,
    EREntity,
    ERRelationship,
)


@lru_cache(maxsize=1)
def _get_parser() -> Lark:
    return Lark(
        DIAGRAM_GRAMMAR,
        parser="lalr",
        lexer="contextual",
        start="start",
        propagate_positions=True,
        maybe_placeholders=False,
    )


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


class _DocumentBuilder(Transformer):
    def start(self, children):
        doc = ERDocument()
        for child in children[1:]:
            if isinstance(child, EREntity):
                doc.entities.append(child)
            elif isinstance(child, ERRelationship):
                doc.relationships.append(child)
        return doc

    def entity(self, children):
        name, *attributes = children
        return EREntity(id=str(name), attributes=attributes)

    def attribute(self, children):
        data_type, name, *rest = children
        keys: List[str] = []
        comment: Optional[str] = None
        for item in rest:
            if isinstance(item, list):
                keys = item
            elif isinstance(item, Token) and item.type == "COMMENT":
                comment = _unquote(str(item))
        return ERAttribute(type=str(data_type), name=str(name), keys=keys, comment=comment)

    def key_list(self, children):
        return [str(tok) for tok in children]

    def relationship(self, children):
        left, op, right, label = children
        op = str(op)
        return ERRelationship(
            left=str(left),
            right=str(right),
            left_cardinality=LEFT_CARDINALITIES[op[:2]],
            right_cardinality=RIGHT_CARDINALITIES[op[4:]],
            identifying=op[2:4] == "--",
            label=label,
        )

    def label(self, children):
        return _unquote(str(children[0]))


def _context_snippet(text: str, line: Optional[int], column: Optional[int]) -> Optional[str]:
    if not line or not column:
        return None
    lines = text.splitlines()
    if line > len(lines):
        return None
    line_text = lines[line - 1]
    start = max(0, column - 30)
    end = min(len(line_text), column + 30)
    pointer = " " * (column - 1 - start) + "^"
    return f"  {line_text[start:end]}\n  {pointer}"


def parse_er_diagram(text: str) -> ERDocument:
    """Parse diagram text into an ``ERDocument``.

    Raises:
        DiagramSyntaxError: if the text does not follow the grammar
    """
    if not text or not text.strip():
        raise DiagramSyntaxError(SyntaxErrorDetail(
            message="Diagram text is empty",
            line=1,
            column=1,
            expected=["erDiagram"],
        ))

    try:
        tree = _get_parser().parse(text)
    except UnexpectedInput as e:
        line = getattr(e, "line", None)
        column = getattr(e, "column", None)

        found = None
        if getattr(e, "char", None) is not None:
            found = e.char
        elif getattr(e, "token", None) is not None:
            found = str(e.token)

        expected = None
        if getattr(e, "expected", None):
            expected = sorted(str(exp) for exp in e.expected)
        elif getattr(e, "allowed", None):
            expected = sorted(str(exp) for exp in e.allowed)

        message = f"Unexpected token {repr(found)}" if found else "Unexpected input at this position"
        raise DiagramSyntaxError(SyntaxErrorDetail(
            message=message,
            line=line if isinstance(line, int) and line > 0 else None,
            column=column if isinstance(column, int) and column > 0 else None,
            found=found,
            expected=expected,
            context=_context_snippet(text, line, column),
        )) from e

    return _DocumentBuilder().transform(tree)
