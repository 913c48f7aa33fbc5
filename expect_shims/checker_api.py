"""
expect_shims/checker_api.py
═══════════════════════════

Contracts for the collaborators the verifier consumes but does not
implement: a type checker bound to one program and one version, its syntax
trees, its diagnostics, and something that can build it.

Any object with the right shape satisfies these protocols; nothing needs
to inherit from them.

Ownership rule
──────────────
A syntax node may only be queried through the :class:`CheckerInstance`
whose :meth:`~CheckerInstance.syntax_tree` produced it.  The verifier
always takes the tree and the type queries from the same instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    Any,
    Iterable,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
    runtime_checkable,
)

EXPRESSION_STATEMENT = "ExpressionStatement"


@runtime_checkable
class SyntaxNode(Protocol):
    """
    A node of a checker's syntax tree.

    ``start`` is the offset of the node's first token (leading trivia
    excluded); ``end`` is the offset just past its last character.
    Expression-statement nodes also expose ``expression``.
    """

    kind: str
    start: int
    end: int

    def children(self) -> Iterable["SyntaxNode"]:
        ...


def is_expression_statement(node: SyntaxNode) -> bool:
    return node.kind == EXPRESSION_STATEMENT


@dataclass(frozen=True)
class MessageChain:
    """A diagnostic message with nested detail lines."""
    text: str
    next: Tuple["MessageChain", ...] = ()


def flatten_message(message: Union[str, MessageChain], new_line: str = "\n") -> str:
    """Render a message chain, indenting each nesting level by two spaces."""
    if isinstance(message, str):
        return message
    out = []
    stack = [(message, 0)]
    while stack:
        chain, indent = stack.pop()
        if out:
            out.append(new_line + "  " * indent)
        out.append(chain.text)
        stack.extend((child, indent + 1) for child in reversed(chain.next))
    return "".join(out)


@dataclass(frozen=True)
class CheckerDiagnostic:
    """
    A problem reported by the checker.

    Attributes
    ----------
    message   : Text or message chain
    file_name : Owning file; ``None`` for global diagnostics
    start     : Offset in ``file_name`` (``None`` when unknown)
    length    : Length of the reported span
    """
    message: Union[str, MessageChain]
    file_name: Optional[str] = None
    start: Optional[int] = None
    length: int = 0

    @property
    def message_text(self) -> str:
        return flatten_message(self.message)


@runtime_checkable
class CheckerInstance(Protocol):
    """One program analysed by one checker version."""

    def source_text(self, file_name: str) -> str:
        ...

    def is_declaration_file(self, file_name: str) -> bool:
        ...

    def syntax_tree(self, file_name: str) -> SyntaxNode:
        ...

    def diagnostics(self, file_name: str) -> Sequence[CheckerDiagnostic]:
        """Pre-emit diagnostics only; emit-phase problems are excluded."""
        ...

    def type_of(self, node: SyntaxNode) -> Any:
        ...

    def render_type(self, type_: Any, *, truncate: bool = True) -> str:
        ...


@runtime_checkable
class CheckerProvider(Protocol):
    """Builds a checker instance for one configured version."""

    def construct(self, config_path: str, install: Any) -> CheckerInstance:
        ...


__all__ = [
    "EXPRESSION_STATEMENT",
    "SyntaxNode",
    "is_expression_statement",
    "MessageChain",
    "flatten_message",
    "CheckerDiagnostic",
    "CheckerInstance",
    "CheckerProvider",
]
