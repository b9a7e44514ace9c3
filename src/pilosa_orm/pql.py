"""PQL reader.

Parses serialized PQL back into a Lark tree and walks it to find the
fields a query references, so a query can be checked against a local
:class:`~pilosa_orm.schema.Schema` before it is sent.
"""

from __future__ import annotations

import re
from typing import Any

from lark import Lark, Token, Tree
from lark.exceptions import LarkError
from lark.visitors import Interpreter

from pilosa_orm._errors import ERR_MSG_PQL_SYNTAX, PQLSyntaxError

PQL_GRAMMAR = r"""
start: call*

call: NAME "(" args? ")"

args: arg ("," arg)*

?arg: call
    | kwarg
    | condition

kwarg: NAME "=" value

condition: NAME COMPARATOR value   -> comparison
         | NAME BETWEEN list       -> between

?value: SIGNED_NUMBER              -> number
      | SQ_STRING                  -> sq_string
      | DQ_STRING                  -> dq_string
      | "true"                     -> true
      | "false"                    -> false
      | "null"                     -> null
      | list

list: "[" (value ("," value)*)? "]"

BETWEEN.2: "><"
COMPARATOR: "==" | "!=" | "<=" | ">=" | "<" | ">"
NAME: /[a-zA-Z_][a-zA-Z0-9_-]*/
SQ_STRING: /'(?:[^'\\]|\\.)*'/
DQ_STRING: /"(?:[^"\\]|\\.)*"/

%import common.SIGNED_NUMBER
%import common.WS
%ignore WS
"""

# Calls whose ``field=`` argument names a field rather than an attribute label.
_FIELD_ARG_CALLS = frozenset({"Sum", "Min", "Max"})

# Non-field keyword arguments of SetValue.
_SET_VALUE_RESERVED = frozenset({"col"})

_ESCAPE_RE = re.compile(r"\\(.)")

_parser = Lark(PQL_GRAMMAR, parser="lalr")


def _unquote(token: Token) -> str:
    return _ESCAPE_RE.sub(r"\1", str(token)[1:-1])


def parse(pql: str) -> Tree:
    """Parse PQL text into a Lark tree.

    Args:
        pql: One or more concatenated PQL calls.

    Returns:
        The parse tree rooted at ``start``.

    Raises:
        PQLSyntaxError: If the text is not valid PQL.
    """
    try:
        return _parser.parse(pql)
    except LarkError as e:
        raise PQLSyntaxError(ERR_MSG_PQL_SYNTAX, str(e), wrapped=e) from e


class FrameCollector(Interpreter):
    """Collects the field names referenced by a PQL tree."""

    def __init__(self) -> None:
        self._frames: set[str] = set()
        self._calls: list[str] = []

    @property
    def frames(self) -> list[str]:
        return sorted(self._frames)

    def call(self, tree: Tree) -> None:
        self._calls.append(str(tree.children[0]))
        try:
            self.visit_children(tree)
        finally:
            self._calls.pop()

    def kwarg(self, tree: Tree) -> None:
        key = str(tree.children[0])
        value: Any = tree.children[1]
        call = self._calls[-1] if self._calls else ""

        if call == "SetValue":
            if key not in _SET_VALUE_RESERVED:
                self._frames.add(key)
            return
        if key == "frame" or (key == "field" and call in _FIELD_ARG_CALLS):
            if isinstance(value, Tree) and value.data == "sq_string":
                self._frames.add(_unquote(value.children[0]))

    def comparison(self, tree: Tree) -> None:
        self._frames.add(str(tree.children[0]))

    def between(self, tree: Tree) -> None:
        self._frames.add(str(tree.children[0]))


def referenced_frames(pql: str) -> list[str]:
    """Return the sorted field names referenced by ``pql``.

    Raises:
        PQLSyntaxError: If the text is not valid PQL.
    """
    collector = FrameCollector()
    collector.visit(parse(pql))
    return collector.frames
